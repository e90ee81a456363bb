# tests/unit/test_transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from unittest.mock import MagicMock

import pytest

from eventfsm.core.errors import ConfigurationError
from eventfsm.core.transitions import TRANSITION_DELIMITER, transition_name


def test_transition_identity(machine):
    transition = machine.transition("idle", "running")
    assert transition.name == "idle=>running"
    assert transition_name("idle", "running") == "idle" + TRANSITION_DELIMITER + "running"
    assert transition.before_event == "before:idle=>running"
    assert transition.after_event == "after:idle=>running"
    assert transition.start_state is machine.state("idle")
    assert transition.end_state is machine.state("running")
    assert not transition.is_reentry
    assert repr(transition) == "Transition('idle=>running')"


def test_self_transition_is_reentry(machine):
    assert machine.transition("idle", "idle").is_reentry


def test_transition_is_created_once(machine):
    first = machine.transition("idle", "running")
    assert machine.transition("idle", "running") is first
    assert machine.state("idle").get_transition("running") is first
    assert dict(machine.transitions) == {"idle=>running": first}


def test_before_and_after_fire_on_traversal(machine):
    before = MagicMock()
    after = MagicMock()
    transition = machine.transition("idle", "running")
    transition.before(before)
    transition.after(after)

    machine.go("idle", "init")
    before.assert_not_called()
    machine.go("running", "go")

    before.assert_called_once_with("go")
    after.assert_called_once_with("go")


def test_transit_is_after_alias(machine):
    transit = MagicMock()
    remove = machine.transition("idle", "running").transit(transit, handler_id="transit")
    assert machine.events.handlers("after:idle=>running")[0].handler_id == "transit"
    remove()
    assert machine.events.handlers("after:idle=>running") == []


def test_before_sees_old_state_after_sees_new(machine):
    seen = []
    transition = machine.transition("idle", "running")
    transition.before(lambda data: seen.append(("before", machine.get_state())))
    transition.after(lambda data: seen.append(("after", machine.get_state())))

    machine.go("idle")
    machine.go("running")

    assert seen == [("before", "idle"), ("after", "running")]


def test_handlers_do_not_fire_for_other_transitions(machine):
    after = MagicMock()
    machine.transition("idle", "running").after(after)
    machine.transition("idle", "stopped")

    machine.go("idle")
    machine.go("stopped")

    after.assert_not_called()


# -----------------------------------------------------------------------------
# EVENT WIRING
# -----------------------------------------------------------------------------


def test_on_event_true_wires_unconditional_transition(idle_running):
    idle_running.transition("idle", "running").on_event("start", True)

    idle_running.go("idle")
    idle_running.trigger("start", "payload")

    assert idle_running.get_state() == "running"
    descriptor = idle_running.events.handlers("start")[0]
    assert descriptor.handler_id == "idle=>running"


def test_on_event_true_only_in_start_state(idle_running):
    idle_running.transition("idle", "running").on_event("start", True)
    idle_running.go("running")
    idle_running.trigger("start")
    assert idle_running.get_state() == "running"


def test_on_event_false_removes_wiring(idle_running):
    transition = idle_running.transition("idle", "running")
    transition.on_event("start", True)
    assert transition.on_event("start", False) is transition

    idle_running.go("idle")
    idle_running.trigger("start")

    assert idle_running.get_state() == "idle"
    assert idle_running.events.handlers("start") == []


@pytest.mark.parametrize("verdict,expected", [(True, "running"), (False, "idle"), ("yes", "idle"), (1, "idle")])
def test_on_event_predicate(idle_running, verdict, expected):
    predicate = MagicMock(return_value=verdict)
    idle_running.transition("idle", "running").on_event("maybe", predicate)

    idle_running.go("idle")
    idle_running.trigger("maybe", {"k": 1})

    predicate.assert_called_once_with({"k": 1})
    assert idle_running.get_state() == expected


def test_predicate_transition_passes_event_data(idle_running):
    entered = MagicMock()
    idle_running.state("running").on_enter(entered)
    idle_running.transition("idle", "running").on_event("maybe", lambda data: data["ok"])

    idle_running.go("idle")
    idle_running.trigger("maybe", {"ok": False})
    idle_running.trigger("maybe", {"ok": True})

    entered.assert_called_once_with({"ok": True})


def test_on_event_rejects_other_types(machine):
    with pytest.raises(ConfigurationError, match="expected bool or callable"):
        machine.transition("idle", "running").on_event("start", "running")


def test_configure(idle_running):
    before = MagicMock()
    after = MagicMock()
    transition = idle_running.transition("idle", "running")
    assert transition.configure({"before": before, "after": after, "start": True}) is transition

    idle_running.go("idle")
    idle_running.trigger("start", 5)

    before.assert_called_once_with(5)
    after.assert_called_once_with(5)
    assert idle_running.get_state() == "running"

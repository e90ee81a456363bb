# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Callable, List, Tuple
from unittest.mock import MagicMock

import pytest


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")


@pytest.fixture
def dispatcher():
    """A bare dispatcher with no default context."""
    from eventfsm.runtime.dispatcher import EventDispatcher

    return EventDispatcher()


@pytest.fixture
def machine():
    """An empty, unstarted state machine."""
    from eventfsm.core.state_machine import StateMachine

    return StateMachine()


@pytest.fixture
def idle_running(machine):
    """A machine with states idle and running joined by idle=>running and running=>idle."""
    machine.transition("idle", "running")
    machine.transition("running", "idle")
    return machine


@pytest.fixture
def recorder() -> Tuple[List[Tuple[str, Any]], Callable[[str], Callable[[Any], None]]]:
    """
    Returns (log, make) where make(label) builds a handler appending
    (label, data) to log.
    """
    log: List[Tuple[str, Any]] = []

    def make(label: str) -> Callable[[Any], None]:
        def handler(data: Any) -> None:
            log.append((label, data))

        return handler

    return log, make


@pytest.fixture
def event_tracer(machine):
    """
    Binds a recorder to every lifecycle event of the given states and
    transitions. Returns (log, trace) where trace(*names) attaches to the
    state or transition events of each name.
    """
    log: List[Tuple[str, Any]] = []

    def trace(*names: str) -> List[Tuple[str, Any]]:
        for name in names:
            if "=>" in name:
                start, end = name.split("=>")
                transition = machine.transition(start, end)
                event_names = [transition.before_event, transition.after_event]
            else:
                state = machine.state(name)
                event_names = [state.enter_event, state.exit_event, state.reentry_event]
            for event_name in event_names:
                machine.bind(event_name, lambda data, e=event_name: log.append((e, data)), handler_id=f"trace:{event_name}")
        return log

    return log, trace


@pytest.fixture
def error_sink():
    """A MagicMock used as error_handler."""
    return MagicMock(name="error_handler")

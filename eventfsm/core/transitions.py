# eventfsm/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Union

from eventfsm.core.errors import ConfigurationError
from eventfsm.core.options import apply_options

if TYPE_CHECKING:
    from eventfsm.core.state_machine import StateMachine
    from eventfsm.core.states import State

TRANSITION_DELIMITER = "=>"

Remover = Callable[[], None]


def transition_name(start: str, end: str) -> str:
    """Composite key identifying the transition from ``start`` to ``end``."""
    return f"{start}{TRANSITION_DELIMITER}{end}"


class Transition:
    """
    A directed edge between two named states. A transition never dispatches
    events itself; it exposes its ``before`` and ``after`` event names and
    binds handlers for them on the machine's dispatcher.
    """

    def __init__(self, machine: "StateMachine", start_state: "State", end: str) -> None:
        """
        Create the edge ``start_state => end``. The end state is resolved
        against the machine's registry and created if it does not exist yet.

        :param machine: The owning state machine.
        :param start_state: The origin State.
        :param end: Name of the destination state.
        """
        self._machine = machine
        self._start_state = start_state
        self._end_state = machine.state(end)
        self._name = transition_name(start_state.name, end)
        self._before_event = f"before:{self._name}"
        self._after_event = f"after:{self._name}"
        machine.events.add_event(self._before_event)
        machine.events.add_event(self._after_event)

    @property
    def name(self) -> str:
        return self._name

    @property
    def start_state(self) -> "State":
        return self._start_state

    @property
    def end_state(self) -> "State":
        return self._end_state

    @property
    def before_event(self) -> str:
        return self._before_event

    @property
    def after_event(self) -> str:
        return self._after_event

    @property
    def is_reentry(self) -> bool:
        return self._start_state is self._end_state

    def before(self, callback: Callable[[Any], Any], **options: Any) -> Remover:
        """
        Bind ``callback`` to fire before the start state is left.

        :return: A callable removing this binding.
        """
        return self._machine.bind(self._before_event, callback, **options)

    def after(self, callback: Callable[[Any], Any], **options: Any) -> Remover:
        """
        Bind ``callback`` to fire once the transition has been crossed, before
        the end state's enter event.

        :return: A callable removing this binding.
        """
        return self._machine.bind(self._after_event, callback, **options)

    transit = after

    def on_event(
        self,
        event_name: str,
        trigger: Union[bool, Callable[[Any], Any]],
        **options: Any,
    ) -> "Transition":
        """
        Wire ``event_name`` to this transition while the start state is active.

        :param event_name: Event that may trigger the transition.
        :param trigger: True to always transition on the event, False to remove
            that wiring, or a predicate whose boolean result decides.
        :param options: Extra bind options; ``handler_id`` defaults to the transition name.
        :raises ConfigurationError: If trigger is neither a bool nor callable.
        """
        options.setdefault("handler_id", self._name)

        if isinstance(trigger, bool):
            if trigger:
                self._start_state.on_event(event_name, self._end_state.go, **options)
            else:
                self._start_state.remove_event_handler(event_name, options["handler_id"])
        elif callable(trigger):
            options["result_handler"] = self._follow_if_true
            self._start_state.on_event(event_name, trigger, **options)
        else:
            raise ConfigurationError(
                f"Transition {self._name!r}: expected bool or callable for event {event_name!r}, "
                f"got {type(trigger).__name__}"
            )
        return self

    def configure(self, options: Mapping[str, Any]) -> "Transition":
        """
        Apply a configuration mapping. ``before``, ``after`` and ``transit``
        bind the matching handler; every other key is an event name handled by
        :meth:`on_event`.
        """
        apply_options(
            options,
            {"before": self.before, "after": self.after, "transit": self.transit},
            self.on_event,
        )
        return self

    def _follow_if_true(self, result: Any, data: Any) -> None:
        if result is True:
            self._end_state.go(data)

    def __repr__(self) -> str:
        return f"Transition({self._name!r})"

# eventfsm/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, Hashable, Optional

from eventfsm.core.errors import ConfigurationError
from eventfsm.core.options import apply_options
from eventfsm.core.transitions import TRANSITION_DELIMITER, Remover, Transition

if TYPE_CHECKING:
    from eventfsm.core.state_machine import StateMachine


class State:
    """
    A named node of the machine. Owns its outgoing transitions and the names
    of its enter, exit and reentry events, and binds handlers that only fire
    while it is the current state.
    """

    def __init__(self, machine: "StateMachine", name: str) -> None:
        """
        :param machine: The owning state machine.
        :param name: Unique name of the state within the machine.
        """
        self._machine = machine
        self._name = name
        self._transitions: Dict[str, Transition] = {}
        self._enter_event = f"enterState:{name}"
        self._exit_event = f"exitState:{name}"
        self._reentry_event = f"reenterState:{name}"
        for event_name in (self._enter_event, self._exit_event, self._reentry_event):
            machine.events.add_event(event_name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def machine(self) -> "StateMachine":
        return self._machine

    @property
    def transitions(self) -> Mapping:
        """Outgoing transitions keyed by destination state name."""
        return MappingProxyType(self._transitions)

    @property
    def enter_event(self) -> str:
        return self._enter_event

    @property
    def exit_event(self) -> str:
        return self._exit_event

    @property
    def reentry_event(self) -> str:
        return self._reentry_event

    @property
    def is_active(self) -> bool:
        return self._machine.get_state() == self._name

    def go(self, data: Any = None) -> "StateMachine":
        """Transition the machine to this state."""
        return self._machine.go(self._name, data)

    def add_transition(self, next_state: str, options: Optional[Mapping] = None) -> "State":
        """
        Create (or fetch) the transition to ``next_state`` and configure it.

        :param next_state: Destination state name.
        :param options: Optional transition configuration mapping.
        """
        self._machine.transition(self._name, next_state, options)
        return self

    def get_transition(self, next_state: str) -> Optional[Transition]:
        return self._transitions.get(next_state)

    def _register_transition(self, transition: Transition) -> None:
        self._transitions[transition.end_state.name] = transition

    def on_enter(self, callback: Callable[[Any], Any], **options: Any) -> Remover:
        return self._machine.bind(self._enter_event, callback, **options)

    def on_exit(self, callback: Callable[[Any], Any], **options: Any) -> Remover:
        return self._machine.bind(self._exit_event, callback, **options)

    def on_reentry(self, callback: Callable[[Any], Any], **options: Any) -> Remover:
        return self._machine.bind(self._reentry_event, callback, **options)

    def on_event(self, event_name: str, callback: Callable[[Any], Any], **options: Any) -> Remover:
        """
        Bind ``callback`` to ``event_name`` so that it fires only while this
        state is current. If the callback returns a ``str``, the machine goes
        to the state of that name with the same event data.

        The activity check runs at dispatch time. ``filter`` and
        ``result_handler`` may be passed to replace either default.

        :return: A callable removing this binding.
        """
        options.setdefault("filter", self._is_current)
        options.setdefault("result_handler", self._go_to_result)
        return self._machine.bind(event_name, callback, **options)

    def remove_event_handler(self, event_name: str, handler: Hashable) -> "State":
        """Unbind a handler previously bound with :meth:`on_event`."""
        self._machine.events.unbind_event(event_name, handler)
        return self

    def configure(self, settings: Mapping[str, Any]) -> "State":
        """
        Apply a state configuration mapping.

        - ``on_enter``, ``on_exit``, ``on_reentry``: lifecycle handlers.
        - ``"=><dest>"``: a mapping configures the transition to ``dest``; a
          callable is bound as that transition's transit handler.
        - any other key is an event name. A ``str`` value declares a transition
          to that state, taken whenever the event fires in this state; a
          callable is bound with :meth:`on_event`.
        """
        apply_options(
            settings,
            {"on_enter": self.on_enter, "on_exit": self.on_exit, "on_reentry": self.on_reentry},
            self._configure_key,
        )
        return self

    def _configure_key(self, key: str, value: Any) -> None:
        if key.startswith(TRANSITION_DELIMITER):
            end = key[len(TRANSITION_DELIMITER):]
            if isinstance(value, Mapping):
                self.add_transition(end, value)
            elif callable(value):
                self.add_transition(end)
                self._transitions[end].transit(value)
            else:
                raise ConfigurationError(
                    f"State {self._name!r}: transition {key!r} expects a mapping or callable",
                    {"state": self._name, "key": key},
                )
        elif isinstance(value, str):
            self.add_transition(value)
            self.on_event(key, lambda data, target=value: target, handler_id=self._transitions[value].name)
        elif callable(value):
            self.on_event(key, value, handler_id=(self._name, key, value))
        else:
            raise ConfigurationError(
                f"State {self._name!r}: event {key!r} expects a state name or callable",
                {"state": self._name, "key": key},
            )

    def _is_current(self) -> bool:
        return self._machine.get_state() == self._name

    def _go_to_result(self, result: Any, data: Any) -> None:
        if isinstance(result, str):
            self._machine.go(result, data)

    def __repr__(self) -> str:
        return f"State({self._name!r})"

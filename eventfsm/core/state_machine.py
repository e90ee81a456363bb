# eventfsm/core/state_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Dict, Optional

from eventfsm.core.errors import ConfigurationError, InvalidTransitionError, UnimplementedOptionError
from eventfsm.core.options import apply_options
from eventfsm.core.states import State
from eventfsm.core.transitions import TRANSITION_DELIMITER, Remover, Transition, transition_name
from eventfsm.runtime.dispatcher import ErrorHandler, EventDispatcher

logger = logging.getLogger(__name__)

RESERVED_KEYWORDS = ("states", "transitions", "events", "vars")


class StateMachine:
    """
    A finite state machine driven by a shared event dispatcher.

    States and transitions are created on first reference and live as long as
    the machine. ``go`` is the only operation that changes the current state;
    it fires the exit, before, after, enter (or reentry) events through the
    dispatcher and updates the current state in queue order, after every
    event already queued and before the after/enter events.
    """

    def __init__(
        self,
        configuration: Optional[Mapping] = None,
        *,
        allow_undefined_transitions: bool = False,
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        """
        :param configuration: Optional mapping applied as by :meth:`configure`.
        :param allow_undefined_transitions: Let ``go`` reach any declared state
            even without a declared transition.
        :param error_handler: Receives a HandlerError for every handler failure
            contained during dispatch.
        """
        self._events = EventDispatcher(error_handler=error_handler)
        self._events.set_default_context(self)
        self._states: Dict[str, State] = {}
        self._transitions: Dict[str, Transition] = {}
        self._current_state: Optional[State] = None
        self._started = False
        self._allow_undefined = allow_undefined_transitions
        self.vars: Dict[str, Any] = {}

        if configuration is not None:
            self.configure(configuration)

    @property
    def events(self) -> EventDispatcher:
        """The dispatcher every state and transition binds its handlers on."""
        return self._events

    @property
    def started(self) -> bool:
        return self._started

    @property
    def current_state(self) -> Optional[State]:
        return self._current_state

    @property
    def states(self) -> Mapping:
        return MappingProxyType(self._states)

    @property
    def transitions(self) -> Mapping:
        return MappingProxyType(self._transitions)

    @property
    def undefined_transitions_allowed(self) -> bool:
        return self._allow_undefined

    def get_state(self) -> Optional[str]:
        """Name of the current state, None before the first ``go``."""
        return self._current_state.name if self._current_state is not None else None

    def has_state(self, name: str) -> bool:
        return name in self._states

    def allow_undefined_transitions(self, allow: bool = True) -> "StateMachine":
        self._allow_undefined = bool(allow)
        return self

    def state(self, name: str, options: Optional[Mapping] = None) -> State:
        """
        Get or create the state ``name``, then apply ``options`` if given.
        """
        state = self._states.get(name)
        if state is None:
            state = State(self, name)
            self._states[name] = state
            logger.debug("Declared state %r", name)
        if options is not None:
            state.configure(options)
        return state

    def transition(self, start: str, end: str, options: Optional[Mapping] = None) -> Transition:
        """
        Get or create the transition ``start => end``, creating either state
        if needed, then apply ``options`` if given.
        """
        start_state = self.state(start)
        transition = start_state.get_transition(end)
        if transition is None:
            transition = Transition(self, start_state, end)
            start_state._register_transition(transition)
            self._transitions[transition.name] = transition
            logger.debug("Declared transition %r", transition.name)
        if options is not None:
            transition.configure(options)
        return transition

    def get_transition(self, start: str, end: str) -> Optional[Transition]:
        return self._transitions.get(transition_name(start, end))

    def bind(self, event_name: str, callback: Callable[[Any], Any], **options: Any) -> Remover:
        """
        Bind ``callback`` to ``event_name`` on the machine's dispatcher.

        :param options: Keyword options accepted by EventDispatcher.bind_event.
        :return: A callable that removes exactly this binding.
        """
        options.setdefault("context", self)
        self._events.bind_event(event_name, callback, **options)
        key = options.get("handler_id")
        if key is None:
            key = callback

        def remove() -> None:
            self._events.unbind_event(event_name, key)

        return remove

    def trigger(self, event_name: str, data: Any = None) -> "StateMachine":
        """Dispatch ``event_name`` with ``data`` through the machine's dispatcher."""
        self._events.dispatch_event(event_name, data)
        return self

    def go(self, target: str, data: Any = None) -> "StateMachine":
        """
        Change state to ``target``, or set the initial state on the first call.

        :param target: Name of the next state.
        :param data: Payload passed to every event fired by this change.
        :raises InvalidTransitionError: If no transition to ``target`` can be
            resolved. The current state is unchanged.
        """
        if not self._started:
            self._start(target, data)
            return self

        current = self._current_state
        is_reentry = current.name == target
        transition = current.get_transition(target)

        if transition is not None:
            next_state = transition.end_state
        elif self._allow_undefined:
            next_state = self._states.get(target)
            if next_state is None:
                raise InvalidTransitionError(current.name, target, "state is not declared")
        else:
            raise InvalidTransitionError(current.name, target)

        fire = self._events.dispatch_event

        if not is_reentry:
            fire(current.exit_event, data)
        if transition is not None:
            fire(transition.before_event, data)

        self._events.defer_action(lambda: self._set_current_state(next_state))

        if transition is not None:
            fire(transition.after_event, data)
        if is_reentry:
            fire(next_state.reentry_event, data)
        else:
            fire(next_state.enter_event, data)
        return self

    def _start(self, target: str, data: Any) -> None:
        state = self.state(target)
        self._started = True
        self._set_current_state(state)
        self._events.dispatch_event(state.enter_event, data)

    def _set_current_state(self, state: State) -> None:
        previous = self.get_state()
        self._current_state = state
        logger.debug("Current state %r -> %r", previous, state.name)

    def configure(self, configuration: Mapping[str, Any]) -> "StateMachine":
        """
        Build the model from a configuration mapping.

        Keys of the form ``"<start>=><end>"`` configure transitions; the
        reserved keywords ``states``, ``transitions``, ``events`` and ``vars``
        are not implemented and raise; every other key configures the state of
        that name. ``allow_undefined_transitions`` takes a boolean. ``go``
        sets the initial state after all other keys have been applied.

        :raises UnimplementedOptionError: For a reserved keyword.
        :raises ConfigurationError: For malformed keys or values.
        """
        if not isinstance(configuration, Mapping):
            raise ConfigurationError(
                f"Expected a configuration mapping, got {type(configuration).__name__}"
            )
        target = configuration.get("go")
        if "go" in configuration and not isinstance(target, str):
            raise ConfigurationError(f"'go' expects a state name, got {target!r}")
        flag = configuration.get("allow_undefined_transitions")
        if "allow_undefined_transitions" in configuration and not isinstance(flag, bool):
            raise ConfigurationError(f"'allow_undefined_transitions' expects a bool, got {flag!r}")

        pending_go = []
        apply_options(
            configuration,
            {"go": pending_go.append, "allow_undefined_transitions": self.allow_undefined_transitions},
            self._configure_key,
        )
        for target in pending_go:
            self.go(target)
        return self

    def _configure_key(self, key: str, value: Any) -> None:
        if TRANSITION_DELIMITER in key:
            start, _, end = key.partition(TRANSITION_DELIMITER)
            if not start or not end:
                raise ConfigurationError(f"Malformed transition key {key!r}", {"key": key})
            self.transition(start, end, value)
        elif key in RESERVED_KEYWORDS:
            raise UnimplementedOptionError(key)
        else:
            self.state(key, value)

    def __repr__(self) -> str:
        return f"StateMachine(state={self.get_state()!r}, states={len(self._states)})"

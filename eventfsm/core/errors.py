# eventfsm/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, Dict, Optional


class FSMError(Exception):
    """
    Base exception class for errors raised by the state machine library.

    :param message: Human readable description of the failure.
    :param details: Optional structured context describing the failure.
    """

    def __init__(self, message: str = "", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.details: Dict[str, Any] = dict(details or {})


class InvalidTransitionError(FSMError):
    """
    Raised by ``go`` when no transition from the current state to the target
    can be resolved. The machine's current state is left unchanged.
    """

    def __init__(self, current: Optional[str], target: str, reason: str = "no transition declared") -> None:
        super().__init__(
            f"Invalid transition: {current!r} => {target!r} ({reason})",
            {"current": current, "target": target},
        )
        self.current = current
        self.target = target


class ConfigurationError(FSMError):
    """
    Raised when a configuration mapping or builder argument is malformed.
    """


class UnimplementedOptionError(ConfigurationError, NotImplementedError):
    """
    Raised when a reserved bulk configuration keyword is used.
    """

    def __init__(self, keyword: str) -> None:
        super().__init__(f"Configuration keyword {keyword!r} is not implemented", {"keyword": keyword})
        self.keyword = keyword


class HandlerError(FSMError):
    """
    Describes a handler failure that was contained during event dispatch. The
    original exception is chained as ``__cause__``.
    """

    def __init__(self, event_name: str, handler_id: Any, error: BaseException) -> None:
        super().__init__(
            f"Handler {handler_id!r} failed for event {event_name!r}: {error}",
            {"event_name": event_name, "handler_id": handler_id},
        )
        self.event_name = event_name
        self.handler_id = handler_id
        self.__cause__ = error

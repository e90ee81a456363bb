"""eventfsm: an embeddable finite state machine driven by a named-event dispatcher

Responsibilities:
    - Declaring states and the transitions between them
    - Sequencing exit/before/after/enter and reentry events on every state change
    - Re-entrant, single-threaded FIFO event dispatch with filtered handlers
    - Declarative configuration from nested mappings

Interactions:
    - Client code binds callbacks to state, transition or free-form events
    - Handlers may call ``go`` or dispatch further events; these are queued
    - Logging system for diagnostics

Cross-cutting Concerns:
    Concurrency:
        - Single-threaded and synchronous; re-entrancy is flattened into the queue

    Error Handling:
        - Structural errors raise from the triggering call
        - Handler failures are contained per handler, logged and reported

    Logging:
        - Standard library ``logging`` under the ``eventfsm`` logger namespace
        - No handlers are installed by the library
"""

from eventfsm.core import (
    ConfigurationError,
    FSMError,
    HandlerError,
    InvalidTransitionError,
    State,
    StateMachine,
    Transition,
    UnimplementedOptionError,
)
from eventfsm.runtime import Bind, EventDispatcher, EventHandle, HandlerDescriptor, Trigger

__version__ = "0.1.0"

__all__ = [
    "StateMachine",
    "State",
    "Transition",
    "EventDispatcher",
    "EventHandle",
    "HandlerDescriptor",
    "Bind",
    "Trigger",
    "FSMError",
    "InvalidTransitionError",
    "ConfigurationError",
    "UnimplementedOptionError",
    "HandlerError",
]

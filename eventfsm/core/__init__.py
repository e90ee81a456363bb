"""
Core package providing the state machine model.

Architecture:
- StateMachine owns the current state and the state/transition registries
- State and Transition translate builder calls into dispatcher bindings
- Configuration mappings are applied key by key through apply_options
"""

# Import order matters to avoid circular dependencies
from .errors import (
    ConfigurationError,
    FSMError,
    HandlerError,
    InvalidTransitionError,
    UnimplementedOptionError,
)
from .transitions import TRANSITION_DELIMITER, Transition, transition_name
from .states import State
from .state_machine import StateMachine

__all__ = [
    # Errors
    "FSMError",
    "InvalidTransitionError",
    "ConfigurationError",
    "UnimplementedOptionError",
    "HandlerError",
    # Model
    "State",
    "Transition",
    "StateMachine",
    "TRANSITION_DELIMITER",
    "transition_name",
]

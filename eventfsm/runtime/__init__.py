"""
Runtime package for event dispatch.

Architecture:
- EventQueue holds pending events and deferred actions in FIFO order
- EventDispatcher owns handler registries and drains the queue
"""

from .dispatcher import Bind, EventDispatcher, EventHandle, HandlerDescriptor, Trigger
from .event_queue import DeferredAction, EventQueue, QueuedEvent

__all__ = [
    "EventDispatcher",
    "EventHandle",
    "HandlerDescriptor",
    "Bind",
    "Trigger",
    "EventQueue",
    "QueuedEvent",
    "DeferredAction",
]

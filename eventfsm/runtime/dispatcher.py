# eventfsm/runtime/dispatcher.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional, Union

from eventfsm.core.errors import HandlerError
from eventfsm.runtime.event_queue import DeferredAction, EventQueue, QueuedEvent

logger = logging.getLogger(__name__)

Callback = Callable[[Any], Any]
FilterFn = Callable[[], Any]
ResultHandler = Callable[[Any, Any], Any]
ErrorHandler = Callable[[HandlerError], Any]

# Event name reported for failures of deferred actions.
DEFERRED_ACTION = "<deferred>"


@dataclass
class HandlerDescriptor:
    """
    One registered handler for one event name.

    :param callback: Invoked with the event payload.
    :param handler_id: Binding key; the callback itself unless overridden.
    :param context: Object the handler was bound on behalf of.
    :param filter: Zero-argument predicate; the handler only fires when it is truthy.
    :param result_handler: Invoked with the callback's return value and the payload.
    """

    callback: Callback
    handler_id: Hashable
    context: Any = None
    filter: Optional[FilterFn] = None
    result_handler: Optional[ResultHandler] = None


@dataclass(frozen=True)
class Bind:
    """Request to bind ``callback`` to an event, with bind_event keyword options."""

    callback: Callback
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Trigger:
    """Request to dispatch an event with ``data`` as payload."""

    data: Any = None


class EventHandle:
    """
    Accessor for a single named event. Binding and triggering are separate
    entry points; ``apply`` accepts an explicit Bind or Trigger request.
    """

    def __init__(self, dispatcher: "EventDispatcher", name: str) -> None:
        self._dispatcher = dispatcher
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def bind(self, callback: Callback, **options: Any) -> "EventHandle":
        self._dispatcher.bind_event(self._name, callback, **options)
        return self

    def unbind(self, handler: Hashable) -> "EventHandle":
        self._dispatcher.unbind_event(self._name, handler)
        return self

    def trigger(self, data: Any = None) -> "EventHandle":
        self._dispatcher.dispatch_event(self._name, data)
        return self

    def apply(self, request: Union[Bind, Trigger]) -> "EventHandle":
        """
        Perform a Bind or Trigger request against this event.

        :param request: The request variant.
        :raises TypeError: If request is neither a Bind nor a Trigger.
        """
        if isinstance(request, Bind):
            return self.bind(request.callback, **request.options)
        if isinstance(request, Trigger):
            return self.trigger(request.data)
        raise TypeError(f"Expected Bind or Trigger, got {type(request).__name__}")

    def __repr__(self) -> str:
        return f"EventHandle({self._name!r})"


class EventDispatcher:
    """
    Owns named handler registries and a FIFO dispatch queue.

    Dispatching is re-entrant but never recursive: only the outermost
    ``dispatch_event`` call drains the queue. Calls made from inside a handler
    only enqueue, so side effects are ordered by enqueue time.
    """

    def __init__(self, default_context: Any = None, error_handler: Optional[ErrorHandler] = None) -> None:
        """
        :param default_context: Context recorded for handlers bound without one.
        :param error_handler: Receives a HandlerError for every contained handler failure.
        """
        self._handlers: Dict[str, Dict[Hashable, HandlerDescriptor]] = {}
        self._handles: Dict[str, EventHandle] = {}
        self._queue = EventQueue()
        self._draining = False
        self._default_context = default_context if default_context is not None else self
        self._current_context: Any = None
        self.error_handler = error_handler

    @property
    def default_context(self) -> Any:
        return self._default_context

    def set_default_context(self, obj: Any) -> "EventDispatcher":
        self._default_context = obj
        return self

    @property
    def current_context(self) -> Any:
        """Context of the handler currently executing, None outside of handlers."""
        return self._current_context

    @property
    def is_dispatching(self) -> bool:
        return self._draining

    def add_event(self, name: str) -> EventHandle:
        """
        Register ``name`` with an empty handler table. Registering twice is a no-op.

        :param name: Event name.
        :return: The event's handle.
        """
        if name not in self._handlers:
            self._handlers[name] = {}
            self._handles[name] = EventHandle(self, name)
        return self._handles[name]

    def event(self, name: str) -> EventHandle:
        """Return the handle for ``name``, registering the event if needed."""
        return self.add_event(name)

    def has_event(self, name: str) -> bool:
        return name in self._handlers

    def event_names(self) -> List[str]:
        return list(self._handlers)

    def handlers(self, name: str) -> List[HandlerDescriptor]:
        """Snapshot of the descriptors bound to ``name`` in registration order."""
        return list(self._handlers.get(name, {}).values())

    def get_trigger(self, name: str) -> Callable[[Any], None]:
        """
        Register ``name`` and return a one-argument callable that dispatches it.
        """
        self.add_event(name)

        def trigger(data: Any = None) -> None:
            self.dispatch_event(name, data)

        return trigger

    def bind_event(
        self,
        name: str,
        callback: Callback,
        *,
        filter: Optional[FilterFn] = None,
        result_handler: Optional[ResultHandler] = None,
        context: Any = None,
        handler_id: Optional[Hashable] = None,
    ) -> "EventDispatcher":
        """
        Bind ``callback`` to ``name``. Binding again under an existing key
        replaces that descriptor without changing its position.

        :param name: Event name; registered implicitly.
        :param callback: Called with the event payload.
        :param filter: Zero-argument predicate gating the handler at dispatch time.
        :param result_handler: Called with ``(result, data)`` after the callback.
        :param context: Defaults to the dispatcher's default context.
        :param handler_id: Binding key for later removal; defaults to ``callback``.
        """
        if not callable(callback):
            raise TypeError(f"Handler for {name!r} must be callable")
        self.add_event(name)
        key = handler_id if handler_id is not None else callback
        self._handlers[name][key] = HandlerDescriptor(
            callback=callback,
            handler_id=key,
            context=context if context is not None else self._default_context,
            filter=filter,
            result_handler=result_handler,
        )
        return self

    def unbind_event(self, name: str, handler: Hashable) -> "EventDispatcher":
        """
        Remove the descriptor bound under ``handler`` (a handler_id or callback).
        Missing events or bindings are ignored.
        """
        self._handlers.get(name, {}).pop(handler, None)
        return self

    def dispatch_event(self, name: str, data: Any = None) -> "EventDispatcher":
        """
        Queue ``name`` and, when no drain is in progress, drain the queue.

        :param name: Event name. Unregistered names are absorbed.
        :param data: Payload passed to each handler.
        """
        self._queue.enqueue(QueuedEvent(name, data))
        if self._draining:
            return self

        self._draining = True
        try:
            while not self._queue.is_empty():
                entry = self._queue.dequeue()
                if isinstance(entry, DeferredAction):
                    self._run_deferred(entry)
                else:
                    self._run_handlers(entry)
        finally:
            self._draining = False
            self._queue.clear()
        return self

    def defer_action(self, callback: Callable[[], Any]) -> None:
        """
        Run ``callback`` after every event already queued, or immediately when
        the dispatcher is idle.
        """
        if self._draining:
            logger.debug("Deferring action %r behind %d queued entries", callback, len(self._queue))
            self._queue.enqueue(DeferredAction(callback))
        else:
            callback()

    def _run_handlers(self, event: QueuedEvent) -> None:
        registry = self._handlers.get(event.name)
        if registry is None:
            logger.debug("Absorbed undefined event %r", event.name)
            return

        matching = [desc for desc in list(registry.values()) if self._passes_filter(event.name, desc)]
        logger.debug("Dispatching %r to %d handler(s)", event.name, len(matching))
        for desc in matching:
            previous = self._current_context
            self._current_context = desc.context
            try:
                result = desc.callback(event.data)
                if desc.result_handler is not None:
                    desc.result_handler(result, event.data)
            except Exception as e:
                self._report(event.name, desc.handler_id, e)
            finally:
                self._current_context = previous

    def _run_deferred(self, action: DeferredAction) -> None:
        try:
            action.callback()
        except Exception as e:
            self._report(DEFERRED_ACTION, action.callback, e)

    def _passes_filter(self, name: str, desc: HandlerDescriptor) -> bool:
        if desc.filter is None:
            return True
        try:
            return bool(desc.filter())
        except Exception:
            logger.warning("Filter for handler %r on %r raised; skipping handler", desc.handler_id, name, exc_info=True)
            return False

    def _report(self, name: str, handler_id: Hashable, error: Exception) -> None:
        logger.exception("Handler %r failed while handling %r", handler_id, name)
        if self.error_handler is None:
            return
        try:
            self.error_handler(HandlerError(name, handler_id, error))
        except Exception:
            logger.exception("Error handler failed while reporting %r", name)

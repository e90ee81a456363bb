# eventfsm/runtime/event_queue.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union


@dataclass(frozen=True)
class QueuedEvent:
    """A named event waiting to be dispatched with its payload."""

    name: str
    data: Any = None


@dataclass(frozen=True)
class DeferredAction:
    """A zero-argument callable waiting to run in queue order."""

    callback: Callable[[], Any]


QueueEntry = Union[QueuedEvent, DeferredAction]


class EventQueue:
    """
    A strictly FIFO queue of pending events and deferred actions consumed by
    the dispatcher's drain loop.
    """

    def __init__(self) -> None:
        self._queue: deque = deque()

    def enqueue(self, entry: QueueEntry) -> None:
        """
        Add an entry to the back of the queue.

        :param entry: A QueuedEvent or DeferredAction.
        """
        if not isinstance(entry, (QueuedEvent, DeferredAction)):
            raise TypeError(f"Unsupported queue entry: {entry!r}")
        self._queue.append(entry)

    def dequeue(self) -> Optional[QueueEntry]:
        """
        Remove and return the oldest entry, or None if the queue is empty.
        """
        if self._queue:
            return self._queue.popleft()
        return None

    def clear(self) -> None:
        """
        Remove all pending entries.
        """
        self._queue.clear()

    def is_empty(self) -> bool:
        return not self._queue

    def __len__(self) -> int:
        return len(self._queue)

# tests/unit/test_event_queue.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest

from eventfsm.runtime.event_queue import DeferredAction, EventQueue, QueuedEvent


def test_event_queue_fifo():
    eq = EventQueue()
    first = QueuedEvent("first", 1)
    action = DeferredAction(lambda: None)
    second = QueuedEvent("second")
    eq.enqueue(first)
    eq.enqueue(action)
    eq.enqueue(second)

    assert len(eq) == 3
    assert eq.dequeue() is first
    assert eq.dequeue() is action
    assert eq.dequeue() is second
    assert eq.dequeue() is None, "Queue should be empty now."
    assert eq.is_empty()


def test_event_queue_clear():
    eq = EventQueue()
    eq.enqueue(QueuedEvent("a"))
    eq.clear()
    assert eq.dequeue() is None, "Clearing should remove all events."
    assert len(eq) == 0


def test_event_queue_rejects_unknown_entries():
    eq = EventQueue()
    with pytest.raises(TypeError):
        eq.enqueue("not an entry")


def test_queued_event_defaults():
    entry = QueuedEvent("ping")
    assert entry.name == "ping"
    assert entry.data is None

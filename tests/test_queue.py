"""Tests for search_tracker.delivery.queue: swap and prepend semantics."""

from __future__ import annotations

from search_tracker.delivery.queue import BatchQueue


class TestBatchQueue:
    """Tests for BatchQueue."""

    def test_append_returns_length(self) -> None:
        queue: BatchQueue[int] = BatchQueue()
        assert queue.append(1) == 1
        assert queue.append(2) == 2
        assert len(queue) == 2

    def test_take_empties(self) -> None:
        queue: BatchQueue[int] = BatchQueue()
        queue.append(1)
        queue.append(2)
        assert queue.take() == [1, 2]
        assert len(queue) == 0

    def test_items_added_after_take_not_in_batch(self) -> None:
        queue: BatchQueue[int] = BatchQueue()
        queue.append(1)
        batch = queue.take()
        queue.append(2)
        assert batch == [1]
        assert queue.items() == [2]

    def test_requeue_prepends(self) -> None:
        queue: BatchQueue[str] = BatchQueue()
        queue.append("a")
        queue.append("b")
        batch = queue.take()
        queue.append("c")
        queue.requeue(batch)
        assert queue.items() == ["a", "b", "c"]

    def test_items_is_copy(self) -> None:
        queue: BatchQueue[int] = BatchQueue()
        queue.append(1)
        queue.items().append(2)
        assert len(queue) == 1

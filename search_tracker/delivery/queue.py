"""In-memory ordered buffer with swap-out and prepend-on-failure."""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")


class BatchQueue(Generic[T]):
    """Ordered queue of pending items.

    ``take()`` swaps the whole contents out in one step, so items that
    arrive while a batch is in flight land in the fresh queue instead
    of the in-flight batch.  ``requeue()`` puts a failed batch back in
    front of anything that arrived in the meantime.
    """

    def __init__(self) -> None:
        self._items: list[T] = []

    def __len__(self) -> int:
        return len(self._items)

    def append(self, item: T) -> int:
        """Append *item* and return the new queue length."""
        self._items.append(item)
        return len(self._items)

    def take(self) -> list[T]:
        """Remove and return every queued item, oldest first."""
        batch = self._items
        self._items = []
        return batch

    def requeue(self, batch: list[T]) -> None:
        """Prepend *batch*, preserving its order ahead of newer items."""
        self._items = [*batch, *self._items]

    def items(self) -> list[T]:
        """Return a copy of the queued items."""
        return list(self._items)

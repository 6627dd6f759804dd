"""Bounded first-in first-out queue used between network endpoints."""

from __future__ import annotations

from collections import deque
from typing import Deque, Generic, TypeVar

T = TypeVar("T")


class FifoEmptyError(LookupError):
    """Raised when reading from an empty queue."""


class FifoFullError(OverflowError):
    """Raised when writing to a full queue."""


class BoundedFifo(Generic[T]):
    """A queue holding at most ``capacity`` items."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: Deque[T] = deque()

    def write(self, item: T) -> None:
        """Append an item; raises FifoFullError when no room is left."""
        if self.is_full():
            raise FifoFullError(f"queue holds {self.capacity} items already")
        self._items.append(item)

    def read(self) -> T:
        """Remove and return the oldest item; raises FifoEmptyError if none."""
        if self.is_empty():
            raise FifoEmptyError("queue is empty")
        return self._items.popleft()

    def reset(self) -> None:
        """Drop every queued item."""
        self._items.clear()

    def is_empty(self) -> bool:
        return not self._items

    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def __len__(self) -> int:
        return len(self._items)
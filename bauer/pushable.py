"""A fixed-capacity sequence that remembers how many items were offered to it."""

from __future__ import annotations

from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class PushableArray(Generic[T]):
    """Collects up to ``capacity`` items and counts every push, even the rejected ones.

    The number of pushes is what the builder checks: the array is valid only
    when exactly ``capacity`` items were pushed.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must not be negative, got {capacity}")
        self._capacity = capacity
        self._items: list[T] = []
        self._pushed = 0

    @property
    def capacity(self) -> int:
        """The number of items the array holds when complete."""
        return self._capacity

    def push(self, item: T) -> bool:
        """Push an item; return False if it did not fit and was dropped."""
        self._pushed += 1
        if len(self._items) < self._capacity:
            self._items.append(item)
            return True
        return False

    def __len__(self) -> int:
        return self._pushed

    def __bool__(self) -> bool:
        return self._pushed != 0

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def is_valid(self) -> bool:
        """True when exactly ``capacity`` items have been pushed."""
        return self._pushed == self._capacity

    def has_too_many(self) -> bool:
        """True when more than ``capacity`` items have been pushed."""
        return self._pushed > self._capacity

    def into_array(self) -> tuple[T, ...] | None:
        """Return the stored items as a tuple, or None if the array is not valid."""
        if self.is_valid():
            return tuple(self._items)
        return None

    def __repr__(self) -> str:
        return repr(self._items)
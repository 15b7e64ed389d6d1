"""Fixed-capacity circular buffer that overwrites its oldest slot when full."""

from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """Index-addressed ring of *capacity* slots.

    Not thread-safe; callers serialise access themselves.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._slots: list[T | None] = [None] * capacity
        self._head = 0  # index of the oldest item
        self._size = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def push(self, item: T) -> None:
        """Append *item*, evicting the oldest one first when the ring is full."""
        capacity = len(self._slots)
        if self._size == capacity:
            self._slots[self._head] = item
            self._head = (self._head + 1) % capacity
        else:
            self._slots[(self._head + self._size) % capacity] = item
            self._size += 1

    def snapshot(self) -> list[T]:
        """Return the stored items, oldest first."""
        return list(self)

    def __iter__(self) -> Iterator[T]:
        capacity = len(self._slots)
        for offset in range(self._size):
            yield self._slots[(self._head + offset) % capacity]

    def __len__(self) -> int:
        return self._size

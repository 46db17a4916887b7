"""
Fixed-capacity ring buffer backed by a preallocated numpy array.

Insertion and eviction are O(1): the buffer never shifts its contents, it only
moves a write cursor.
"""

import numpy as np


class RingBuffer:
    """FIFO buffer of floats holding at most ``capacity`` values."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("Ring buffer capacity must be at least 1")
        self._data = np.zeros(capacity, dtype=np.float64)
        self._capacity = capacity
        self._cursor = 0
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._size

    def is_full(self) -> bool:
        return self._size == self._capacity

    def push(self, value: float) -> float | None:
        """
        Append a value.

        Returns:
            The evicted oldest value when the buffer was already full,
            otherwise None.
        """
        evicted = None
        if self._size == self._capacity:
            evicted = float(self._data[self._cursor])
        else:
            self._size += 1
        self._data[self._cursor] = value
        self._cursor = (self._cursor + 1) % self._capacity
        return evicted

    def oldest(self) -> float:
        if self._size == 0:
            raise IndexError("oldest() on an empty ring buffer")
        start = (self._cursor - self._size) % self._capacity
        return float(self._data[start])

    def to_array(self) -> np.ndarray:
        """Return a copy of the buffered values, oldest first."""
        if self._size < self._capacity:
            return self._data[: self._size].copy()
        return np.concatenate((self._data[self._cursor :], self._data[: self._cursor]))

    def __repr__(self):
        return f"RingBuffer(capacity={self._capacity}, size={self._size})"

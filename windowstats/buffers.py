"""
Fixed-capacity FIFO storage.

Classes:
    RingBuffer: Pre-allocated circular buffer reporting the value it evicts.
"""

import logging
from typing import Iterator, List, Optional, Tuple

from .base import validate_length
from .exceptions import InvalidParameterError, WindowReleasedError

logger = logging.getLogger(__name__)


class RingBuffer:
    """
    Circular buffer holding the most recent ``capacity`` values.

    Slots are allocated once at construction. Pushing into a full buffer
    overwrites the oldest slot and hands the overwritten value back to the
    caller, which is how owning windows learn what to evict.

    Example:
        >>> ring = RingBuffer(2)
        >>> ring.push(1.0)
        (False, None)
        >>> ring.push(2.0)
        (False, None)
        >>> ring.push(3.0)
        (True, 1.0)
        >>> list(ring)
        [2.0, 3.0]
    """

    def __init__(self, capacity: int):
        """
        Allocate the buffer.

        Args:
            capacity (int): Number of slots. Must be > 0.

        Raises:
            InvalidParameterError: If capacity is not a positive integer.
        """
        self.capacity = validate_length(capacity, "capacity", self.__class__.__name__)
        self._slots: Optional[List[float]] = [0.0] * capacity
        self._start = 0
        self._size = 0

    def push(self, value: float) -> Tuple[bool, Optional[float]]:
        """
        Append a value, overwriting the oldest one when full.

        Returns:
            Tuple[bool, Optional[float]]: ``(True, evicted)`` when a value was
                overwritten, otherwise ``(False, None)``.
        """
        slots = self._slots
        if slots is None:
            raise WindowReleasedError("push", self.__class__.__name__)

        if self._size < self.capacity:
            slots[(self._start + self._size) % self.capacity] = value
            self._size += 1
            return False, None

        evicted = slots[self._start]
        slots[self._start] = value
        self._start = (self._start + 1) % self.capacity
        return True, evicted

    def __getitem__(self, index: int) -> float:
        """Value at ``index`` counted from the oldest (0) to the newest."""
        if self._slots is None:
            raise WindowReleasedError("read", self.__class__.__name__)
        if not 0 <= index < self._size:
            raise InvalidParameterError("index", index, f"index in [0, {self._size})", self.__class__.__name__)
        return self._slots[(self._start + index) % self.capacity]

    def __iter__(self) -> Iterator[float]:
        if self._slots is None:
            raise WindowReleasedError("iterate", self.__class__.__name__)
        for offset in range(self._size):
            yield self._slots[(self._start + offset) % self.capacity]

    def __len__(self) -> int:
        return self._size

    @property
    def is_full(self) -> bool:
        return self._size == self.capacity

    @property
    def released(self) -> bool:
        return self._slots is None

    def clear(self) -> None:
        """Forget every value while keeping the allocated slots."""
        self._start = 0
        self._size = 0

    def release(self) -> None:
        """Drop the allocated slots. Safe to call more than once."""
        if self._slots is None:
            return
        self._slots = None
        self._start = 0
        self._size = 0
        logger.debug(f"Released {self.__class__.__name__} with capacity={self.capacity}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(capacity={self.capacity}, size={self._size})"

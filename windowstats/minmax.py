"""
Sliding min/max tracking.

This module implements a fixed-capacity window that reports its running
maximum and minimum.

Classes:
    SlidingExtremumTracker: Monotonic-deque rolling min/max.
"""

from collections import deque
from typing import Deque, Tuple

from .base import BaseWindow


class SlidingExtremumTracker(BaseWindow):
    """
    Efficient O(1) amortized rolling min/max over the last ``length`` values.

    Two monotonic deques of ``(index, value)`` pairs are kept: values in the
    max deque never increase from front to back, values in the min deque
    never decrease. A value that is dominated by a newer one can never again
    be the extremum while the newer one is in the window, so it is dropped
    from the back. Indices that have slid out of the window are dropped from
    the front.

    Attributes:
        length (int): The window capacity.
        is_ready (bool): Whether ``length`` observations have been seen.
        max (float): The current maximum value in the window.
        min (float): The current minimum value in the window.

    Example:
        >>> tracker = SlidingExtremumTracker(length=3)
        >>> for value in (5, 1, 4, 2):
        ...     tracker.add(value)
        >>> tracker.max, tracker.min
        (4, 1)
    """

    def __init__(self, length: int):
        """
        Initialize the tracker.

        Args:
            length (int): The lookback length. Must be > 0.

        Raises:
            InvalidParameterError: If length is not a positive integer.
        """
        super().__init__(length)
        self._max_deque: Deque[Tuple[int, float]] = deque()
        self._min_deque: Deque[Tuple[int, float]] = deque()

    def add(self, value: float) -> None:
        """
        Update the rolling min/max with a new value.

        Args:
            value (float): The new data point.
        """
        index = self._count
        max_deque = self._max_deque
        min_deque = self._min_deque

        # Remove values that are dominated by the new value
        while max_deque and max_deque[-1][1] <= value:
            max_deque.pop()
        max_deque.append((index, value))

        while min_deque and min_deque[-1][1] >= value:
            min_deque.pop()
        min_deque.append((index, value))

        # Remove indices that are out of the window
        oldest = index - self.length + 1
        while max_deque[0][0] < oldest:
            max_deque.popleft()
        while min_deque[0][0] < oldest:
            min_deque.popleft()

        self._count = index + 1

    @property
    def max(self) -> float:
        """
        Get the current maximum value.

        Returns:
            float: The maximum value, or 0.0 before any observation.
        """
        return self._max_deque[0][1] if self._max_deque else 0.0

    @property
    def min(self) -> float:
        """
        Get the current minimum value.

        Returns:
            float: The minimum value, or 0.0 before any observation.
        """
        return self._min_deque[0][1] if self._min_deque else 0.0

    def reset(self) -> None:
        """Reset the tracker to its initial state."""
        self._max_deque.clear()
        self._min_deque.clear()
        super().reset()

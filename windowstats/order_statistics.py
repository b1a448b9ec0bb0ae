"""
Rank-aware rolling windows.

This module implements a bounded multiset of the most recent observations
answering rank, order-statistic and median queries in O(log length).

Values are arbitrary floats, so a value-indexed Fenwick tree does not apply;
the multiset is kept in a treap (randomized balanced binary search tree)
whose nodes carry subtree sizes. Rank-by-value and value-by-rank both walk a
single root-to-leaf path.

Classes:
    OrderStatisticTree: Pooled treap multiset with rank/select.
    OrderStatisticWindow: FIFO-bounded window over an OrderStatisticTree.
"""

import logging
import math
import random
from typing import List, Optional

from .base import BaseWindow, validate_length
from .buffers import RingBuffer
from .core import get_settings
from .exceptions import InvalidParameterError, WindowReleasedError

logger = logging.getLogger(__name__)

NIL = -1


class OrderStatisticTree:
    """
    Multiset of floats stored in a treap with subtree-size counters.

    One node exists per distinct value and carries a multiplicity, so
    duplicates cost no extra nodes. Node fields live in parallel lists that
    are allocated up front for ``capacity`` nodes; freed slots are recycled
    through a free list and the pool doubles if it ever runs out.

    NaN is not an orderable key and must not be inserted.
    """

    def __init__(self, capacity: int = 16, seed: Optional[int] = None):
        """
        Allocate the node pool.

        Args:
            capacity (int): Number of distinct values to pre-allocate for.
            seed (Optional[int]): Seed for node priorities.
        """
        capacity = validate_length(capacity, "capacity", self.__class__.__name__)
        self._keys: Optional[List[float]] = [0.0] * capacity
        self._priorities: List[float] = [0.0] * capacity
        self._multiplicity: List[int] = [0] * capacity
        self._sizes: List[int] = [0] * capacity
        self._left: List[int] = [NIL] * capacity
        self._right: List[int] = [NIL] * capacity
        self._free: List[int] = list(range(capacity - 1, -1, -1))
        self._root = NIL
        self._random = random.Random(seed)

    def __len__(self) -> int:
        return self._sizes[self._root] if self._root != NIL else 0

    @property
    def released(self) -> bool:
        return self._keys is None

    def insert(self, key: float) -> None:
        """Add one occurrence of ``key``."""
        if self._keys is None:
            raise WindowReleasedError("insert", self.__class__.__name__)
        self._root = self._insert(self._root, key)

    def remove(self, key: float) -> None:
        """Remove one occurrence of ``key``; absent keys are ignored."""
        if self._keys is None:
            raise WindowReleasedError("remove", self.__class__.__name__)
        self._root = self._remove(self._root, key)

    def count_less_than(self, key: float) -> int:
        """Number of held values strictly below ``key``."""
        keys = self._keys
        if keys is None:
            raise WindowReleasedError("query", self.__class__.__name__)
        total = 0
        node = self._root
        while node != NIL:
            if key <= keys[node]:
                node = self._left[node]
            else:
                total += self._size(self._left[node]) + self._multiplicity[node]
                node = self._right[node]
        return total

    def count_less_than_or_equal(self, key: float) -> int:
        """Number of held values at or below ``key``."""
        keys = self._keys
        if keys is None:
            raise WindowReleasedError("query", self.__class__.__name__)
        total = 0
        node = self._root
        while node != NIL:
            if key < keys[node]:
                node = self._left[node]
            else:
                total += self._size(self._left[node]) + self._multiplicity[node]
                node = self._right[node]
        return total

    def select(self, rank: int) -> float:
        """
        Return the ``rank``-th smallest held value (1-based).

        Ranks outside ``[1, len(self)]`` are clamped; an empty tree yields 0.0.
        """
        keys = self._keys
        if keys is None:
            raise WindowReleasedError("query", self.__class__.__name__)
        node = self._root
        if node == NIL:
            return 0.0

        rank = max(1, min(rank, self._sizes[node]))
        while True:
            left_size = self._size(self._left[node])
            if rank <= left_size:
                node = self._left[node]
                continue
            self_rank = left_size + self._multiplicity[node]
            if rank <= self_rank:
                return keys[node]
            rank -= self_rank
            node = self._right[node]

    def clear(self) -> None:
        """Remove every value while keeping the node pool."""
        if self._keys is None:
            return
        self._root = NIL
        self._free = list(range(len(self._keys) - 1, -1, -1))

    def release(self) -> None:
        """Drop the node pool. Safe to call more than once."""
        if self._keys is None:
            return
        self._keys = None
        self._priorities = []
        self._multiplicity = []
        self._sizes = []
        self._left = []
        self._right = []
        self._free = []
        self._root = NIL

    # ------------------------------------------------------------------
    # Treap internals
    # ------------------------------------------------------------------

    def _size(self, node: int) -> int:
        return self._sizes[node] if node != NIL else 0

    def _update(self, node: int) -> None:
        self._sizes[node] = self._multiplicity[node] + self._size(self._left[node]) + self._size(self._right[node])

    def _allocate(self, key: float) -> int:
        if not self._free:
            self._grow()
        node = self._free.pop()
        self._keys[node] = key
        self._priorities[node] = self._random.random()
        self._multiplicity[node] = 1
        self._sizes[node] = 1
        self._left[node] = NIL
        self._right[node] = NIL
        return node

    def _grow(self) -> None:
        old_capacity = len(self._keys)
        extra = old_capacity
        self._keys.extend([0.0] * extra)
        self._priorities.extend([0.0] * extra)
        self._multiplicity.extend([0] * extra)
        self._sizes.extend([0] * extra)
        self._left.extend([NIL] * extra)
        self._right.extend([NIL] * extra)
        self._free.extend(range(old_capacity + extra - 1, old_capacity - 1, -1))
        logger.debug(f"Grew {self.__class__.__name__} node pool to {old_capacity + extra}")

    def _rotate_right(self, node: int) -> int:
        pivot = self._left[node]
        self._left[node] = self._right[pivot]
        self._right[pivot] = node
        self._update(node)
        self._update(pivot)
        return pivot

    def _rotate_left(self, node: int) -> int:
        pivot = self._right[node]
        self._right[node] = self._left[pivot]
        self._left[pivot] = node
        self._update(node)
        self._update(pivot)
        return pivot

    def _insert(self, node: int, key: float) -> int:
        if node == NIL:
            return self._allocate(key)

        node_key = self._keys[node]
        if key == node_key:
            self._multiplicity[node] += 1
        elif key < node_key:
            child = self._insert(self._left[node], key)
            self._left[node] = child
            if self._priorities[child] > self._priorities[node]:
                node = self._rotate_right(node)
        else:
            child = self._insert(self._right[node], key)
            self._right[node] = child
            if self._priorities[child] > self._priorities[node]:
                node = self._rotate_left(node)

        self._update(node)
        return node

    def _remove(self, node: int, key: float) -> int:
        if node == NIL:
            return NIL

        node_key = self._keys[node]
        if key == node_key:
            if self._multiplicity[node] > 1:
                self._multiplicity[node] -= 1
            else:
                left = self._left[node]
                right = self._right[node]
                if left == NIL or right == NIL:
                    self._free.append(node)
                    return right if left == NIL else left

                # Rotate the higher-priority child up, then chase the key down
                if self._priorities[left] > self._priorities[right]:
                    node = self._rotate_right(node)
                    self._right[node] = self._remove(self._right[node], key)
                else:
                    node = self._rotate_left(node)
                    self._left[node] = self._remove(self._left[node], key)
        elif key < node_key:
            self._left[node] = self._remove(self._left[node], key)
        else:
            self._right[node] = self._remove(self._right[node], key)

        self._update(node)
        return node


class OrderStatisticWindow(BaseWindow):
    """
    Bounded multiset of the last ``length`` observations with rank queries.

    Each ``add`` inserts the new value into an order-statistics tree and,
    once more than ``length`` values are held, removes the oldest surviving
    value. Insertion order is tracked by a ring buffer.

    The window owns pooled storage and is a scoped resource: release it with
    ``release()`` or use it as a context manager so the pool is dropped on
    every exit path. Using a released window raises ``WindowReleasedError``.

    Example:
        >>> with OrderStatisticWindow(length=3) as window:
        ...     for value in (5, 1, 4, 2):
        ...         window.add(value)
        ...     median, rank = window.median, window.count_less_than_or_equal(3)
        >>> median, rank
        (2, 2)
    """

    def __init__(self, length: int, seed: Optional[int] = None):
        """
        Initialize the window and pre-allocate its storage.

        Args:
            length (int): The window capacity. Must be > 0.
            seed (Optional[int]): Seed for tree priorities. Defaults to the
                active engine settings.

        Raises:
            InvalidParameterError: If length is not a positive integer.
        """
        super().__init__(length)
        if seed is None:
            seed = get_settings().tree_seed

        self._window = RingBuffer(self.length)
        # One extra node: the newest value is inserted before the oldest is evicted
        self._tree = OrderStatisticTree(self.length + 1, seed)
        self._released = False

    def add(self, value: float) -> None:
        """
        Add an observation, evicting the oldest once the window is full.

        Args:
            value (float): The new data point.
        """
        if self._released:
            raise WindowReleasedError("add", self._name)

        self._tree.insert(value)
        evicted, oldest = self._window.push(value)
        if evicted:
            self._tree.remove(oldest)
        self._count += 1

    def count_less_than_or_equal(self, value: float) -> int:
        """
        Number of held observations at or below ``value``.

        Returns:
            int: The rank count, or 0 when the window is empty.
        """
        return self._tree.count_less_than_or_equal(value)

    def count_less_than(self, value: float) -> int:
        """Number of held observations strictly below ``value``."""
        return self._tree.count_less_than(value)

    def select(self, rank: int) -> float:
        """k-th smallest held observation (1-based, clamped); 0.0 when empty."""
        return self._tree.select(rank)

    @property
    def median(self) -> float:
        """
        Get the median of the held observations.

        For an odd count this is the middle order statistic; for an even
        count the mean of the two middle order statistics.

        Returns:
            float: The median, or 0.0 when the window is empty.
        """
        n = len(self._tree)
        if n == 0:
            if self._released:
                raise WindowReleasedError("query", self._name)
            return 0.0

        half = n // 2
        if n % 2 == 1:
            return self._tree.select(half + 1)
        return (self._tree.select(half) + self._tree.select(half + 1)) / 2

    def percentile_nearest_rank(self, percentile: float) -> float:
        """
        Nearest-rank percentile of the held observations.

        Args:
            percentile (float): Percentile in [0, 100].

        Returns:
            float: The value at rank ``ceil(percentile * count / 100)``
                clamped to ``[1, count]``, or 0.0 when empty.
        """
        if not 0 <= percentile <= 100:
            raise InvalidParameterError("percentile", percentile, "value between 0 and 100", self._name)
        n = len(self._tree)
        if n == 0:
            return self._tree.select(1)

        rank = math.ceil(percentile * n / 100)
        return self._tree.select(max(1, min(rank, n)))

    def percent_rank(self, value: float) -> float:
        """
        Fraction of held observations at or below ``value``.

        Returns:
            float: A value in [0, 1], or 0.0 when the window is empty.
        """
        n = len(self._tree)
        if n == 0:
            if self._released:
                raise WindowReleasedError("query", self._name)
            return 0.0
        return self._tree.count_less_than_or_equal(value) / n

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Free the pooled storage. Safe to call more than once."""
        if self._released:
            return
        self._tree.release()
        self._window.release()
        self._released = True
        logger.debug(f"Released {self._name} with length={self.length}")

    def reset(self) -> None:
        """Reset the window to its initial state, keeping its storage."""
        if self._released:
            raise WindowReleasedError("reset", self._name)
        self._tree.clear()
        self._window.clear()
        super().reset()

    def __enter__(self) -> 'OrderStatisticWindow':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.release()
        return False

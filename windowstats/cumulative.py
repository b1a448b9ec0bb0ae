"""
Cumulative (prefix-sum) window aggregators.

These structures keep every running total ever appended, so a single stream
can be queried at any lookback length on every step in O(1). Memory grows
linearly with the number of observations; use the fixed-capacity windows
when only one lookback is needed.

Classes:
    CumulativeWindowAggregator: Rolling sum/average at arbitrary lookbacks.
    PairedWindowAggregator: Rolling Pearson correlation at arbitrary lookbacks.
"""

import logging
import math
import sys
from typing import List, Optional

from .core import get_settings
from .exceptions import InvalidParameterError

logger = logging.getLogger(__name__)

# Rounding-error multiple of n*sum(x^2) under which n*sum(x^2) - sum(x)^2 counts as zero
_VARIANCE_TOLERANCE = 8 * sys.float_info.epsilon


class CumulativeWindowAggregator:
    """
    Append-only log of running sums answering sum/average for any lookback.

    Mathematical Formula:
        S[i] = S[i-1] + v[i], with S[-1] = 0
        Sum(L) = S[n-1] - S[n-1-L]

    Lookbacks longer than the stream shrink to the observations seen so far,
    so early-series queries use a partial window rather than zero padding.

    Running totals are accumulated with Neumaier compensated summation by
    default. Each prefix is stored as a (high, low) pair and window sums
    subtract both parts.

    Example:
        >>> sums = CumulativeWindowAggregator()
        >>> for value in (1, 2, 3, 4):
        ...     sums.add(value)
        >>> sums.sum(2)
        7.0
        >>> sums.sum(10)
        10.0
    """

    def __init__(self, compensated: Optional[bool] = None):
        """
        Initialize an empty aggregator.

        Args:
            compensated (Optional[bool]): Use compensated summation. Defaults
                to the active engine settings.
        """
        if compensated is None:
            compensated = get_settings().compensated_summation
        self._compensated = compensated

        self._high: List[float] = []
        self._low: List[float] = []
        self._running = 0.0
        self._carry = 0.0

    def add(self, value: float) -> None:
        """Append one observation."""
        running = self._running
        total = running + value
        if self._compensated:
            if abs(running) >= abs(value):
                self._carry += (running - total) + value
            else:
                self._carry += (value - total) + running
            self._low.append(self._carry)
        self._running = total
        self._high.append(total)

    @property
    def count(self) -> int:
        """Number of observations appended so far."""
        return len(self._high)

    def sum(self, length: int) -> float:
        """
        Sum of the last ``min(length, count)`` observations.

        Args:
            length (int): Lookback length, must be positive.

        Returns:
            float: The window sum, or 0.0 before any observation.
        """
        if length <= 0:
            raise InvalidParameterError("length", length, "positive integer (> 0)", self.__class__.__name__)
        if not self._high:
            return 0.0
        return self._window_total(length, len(self._high) - 1)

    def sum_at(self, length: int, end_index: int) -> float:
        """
        Sum of the ``length`` observations ending at ``end_index`` (inclusive).

        Args:
            length (int): Lookback length, must be positive.
            end_index (int): 0-based index of the last observation in the window.
        """
        if length <= 0:
            raise InvalidParameterError("length", length, "positive integer (> 0)", self.__class__.__name__)
        self._check_index(end_index)
        return self._window_total(length, end_index)

    def average(self, length: int) -> float:
        """
        Mean of the last ``min(length, count)`` observations.

        Returns:
            float: The window mean, or 0.0 before any observation.
        """
        total = self.sum(length)
        n = min(length, len(self._high))
        return total / n if n > 0 else 0.0

    def average_at(self, length: int, end_index: int) -> float:
        """Mean of the window ending at ``end_index``, shrunk to the data available."""
        total = self.sum_at(length, end_index)
        return total / min(length, end_index + 1)

    def reset(self) -> None:
        """Discard every stored running total."""
        self._high.clear()
        self._low.clear()
        self._running = 0.0
        self._carry = 0.0
        logger.debug(f"Reset {self.__class__.__name__} state")

    def _window_total(self, length: int, end_index: int) -> float:
        start_index = end_index - length
        high = self._high[end_index]
        low = self._low[end_index] if self._compensated else 0.0
        if start_index >= 0:
            high -= self._high[start_index]
            if self._compensated:
                low -= self._low[start_index]
        return high + low

    def _check_index(self, end_index: int) -> None:
        if not 0 <= end_index < len(self._high):
            raise InvalidParameterError(
                "end_index", end_index, f"index in [0, {len(self._high)})", self.__class__.__name__
            )

    def __len__(self) -> int:
        return len(self._high)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(count={len(self._high)}, compensated={self._compensated})"


class PairedWindowAggregator:
    """
    Prefix sums of paired observations answering Pearson correlation.

    Keeps five cumulative aggregators (x, y, x^2, y^2, xy) so that the
    correlation over any lookback is recovered in O(1). Pairs are stored
    relative to the first pair seen; r is shift-invariant and the centred
    moments stay well conditioned for high-priced, low-volatility series.

    Mathematical Formula:
        r = (n*Sxy - Sx*Sy) / sqrt((n*Sxx - Sx^2) * (n*Syy - Sy^2))

    Undefined correlations (fewer than two pairs, ``length < 2`` or zero
    variance in either stream) are reported as ``None``. Callers map that to
    0 before using the value in further arithmetic.

    Example:
        >>> corr = PairedWindowAggregator()
        >>> for x, y in zip([1, 2, 3, 4], [2, 4, 6, 8]):
        ...     corr.add(x, y)
        >>> round(corr.r(4), 12)
        1.0
    """

    def __init__(self, compensated: Optional[bool] = None):
        """
        Initialize an empty paired aggregator.

        Args:
            compensated (Optional[bool]): Use compensated summation. Defaults
                to the active engine settings.
        """
        self._x = CumulativeWindowAggregator(compensated)
        self._y = CumulativeWindowAggregator(compensated)
        self._xx = CumulativeWindowAggregator(compensated)
        self._yy = CumulativeWindowAggregator(compensated)
        self._xy = CumulativeWindowAggregator(compensated)
        self._shift_x: Optional[float] = None
        self._shift_y: Optional[float] = None

    def add(self, x: float, y: float) -> None:
        """Append one ``(x, y)`` pair."""
        if self._shift_x is None:
            self._shift_x = x
            self._shift_y = y
        x = x - self._shift_x
        y = y - self._shift_y
        self._x.add(x)
        self._y.add(y)
        self._xx.add(x * x)
        self._yy.add(y * y)
        self._xy.add(x * y)

    @property
    def count(self) -> int:
        """Number of pairs appended so far."""
        return self._x.count

    def r(self, length: int) -> Optional[float]:
        """
        Pearson correlation over the last ``min(length, count)`` pairs.

        Args:
            length (int): Lookback length, must be positive.

        Returns:
            Optional[float]: Correlation in [-1, 1], or None when undefined.
        """
        if length <= 0:
            raise InvalidParameterError("length", length, "positive integer (> 0)", self.__class__.__name__)
        n = min(length, self._x.count)
        if length < 2 or n < 2:
            return None

        sum_x = self._x.sum(length)
        sum_y = self._y.sum(length)
        sum_xx = self._xx.sum(length)
        sum_yy = self._yy.sum(length)
        sum_xy = self._xy.sum(length)

        var_x = n * sum_xx - sum_x * sum_x
        var_y = n * sum_yy - sum_y * sum_y
        if var_x <= _VARIANCE_TOLERANCE * n * sum_xx or var_y <= _VARIANCE_TOLERANCE * n * sum_yy:
            return None

        r = (n * sum_xy - sum_x * sum_y) / math.sqrt(var_x * var_y)
        return max(-1.0, min(1.0, r))

    def r_squared(self, length: int) -> Optional[float]:
        """Coefficient of determination over the lookback, or None when undefined."""
        r = self.r(length)
        return None if r is None else r * r

    def sum_x(self, length: int) -> float:
        return self._unshifted_sum(self._x, self._shift_x, length)

    def sum_y(self, length: int) -> float:
        return self._unshifted_sum(self._y, self._shift_y, length)

    def average_x(self, length: int) -> float:
        total = self.sum_x(length)
        n = min(length, self._x.count)
        return total / n if n > 0 else 0.0

    def average_y(self, length: int) -> float:
        total = self.sum_y(length)
        n = min(length, self._y.count)
        return total / n if n > 0 else 0.0

    def reset(self) -> None:
        """Discard every stored running total."""
        for aggregator in (self._x, self._y, self._xx, self._yy, self._xy):
            aggregator.reset()
        self._shift_x = None
        self._shift_y = None

    @staticmethod
    def _unshifted_sum(aggregator: CumulativeWindowAggregator, shift: Optional[float], length: int) -> float:
        total = aggregator.sum(length)
        if shift is None:
            return total
        return total + shift * min(length, aggregator.count)

    def __len__(self) -> int:
        return self._x.count

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(count={self._x.count})"

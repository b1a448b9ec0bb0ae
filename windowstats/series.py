"""
Batch drivers over whole price series.

Each function feeds a series into a fresh window structure one observation
per step and collects one output per step, which is how indicator code
consumes the engine. Windows shrink at the start of the series instead of
emitting NaN during warm-up.

Standard signature: fn(series, length) -> series aligned to the input
"""

from typing import Callable, Sequence, Union

import numpy as np
import pandas as pd

from .base import validate_length
from .cumulative import CumulativeWindowAggregator, PairedWindowAggregator
from .exceptions import InvalidParameterError
from .minmax import SlidingExtremumTracker
from .order_statistics import OrderStatisticWindow


# Type aliases
SeriesLike = Union[np.ndarray, pd.Series, Sequence[float]]


def _as_array(x: SeriesLike) -> np.ndarray:
    if isinstance(x, pd.Series):
        return x.to_numpy(dtype=float)
    return np.asarray(x, dtype=float)


def _wrap(result: np.ndarray, like: SeriesLike, name: str) -> Union[np.ndarray, pd.Series]:
    """Return a Series on the input index when the input was a Series."""
    if isinstance(like, pd.Series):
        return pd.Series(result, index=like.index, name=name)
    return result


def _drive(x: SeriesLike, step: Callable[[float], float], name: str) -> Union[np.ndarray, pd.Series]:
    values = _as_array(x)
    out = np.empty(len(values), dtype=float)
    for i, value in enumerate(values.tolist()):
        out[i] = step(value)
    return _wrap(out, x, name)


# ============================================================================
# Cumulative Windows
# ============================================================================

def rolling_sum(x: SeriesLike, length: int) -> Union[np.ndarray, pd.Series]:
    """Rolling sum over the last ``length`` observations."""
    validate_length(length)
    sums = CumulativeWindowAggregator()

    def step(value: float) -> float:
        sums.add(value)
        return sums.sum(length)

    return _drive(x, step, f"sum_{length}")


def rolling_average(x: SeriesLike, length: int) -> Union[np.ndarray, pd.Series]:
    """Rolling mean over the last ``length`` observations."""
    validate_length(length)
    sums = CumulativeWindowAggregator()

    def step(value: float) -> float:
        sums.add(value)
        return sums.average(length)

    return _drive(x, step, f"average_{length}")


def _paired(x: SeriesLike, y: SeriesLike, length: int, squared: bool) -> Union[np.ndarray, pd.Series]:
    validate_length(length)
    xs = _as_array(x)
    ys = _as_array(y)
    if len(xs) != len(ys):
        raise InvalidParameterError("y", f"length {len(ys)}", f"same length as x ({len(xs)})")

    corr = PairedWindowAggregator()
    out = np.empty(len(xs), dtype=float)
    for i, (x_value, y_value) in enumerate(zip(xs.tolist(), ys.tolist())):
        corr.add(x_value, y_value)
        r = corr.r_squared(length) if squared else corr.r(length)
        out[i] = r if r is not None else 0.0

    name = f"r_squared_{length}" if squared else f"r_{length}"
    return _wrap(out, x, name)


def rolling_correlation(x: SeriesLike, y: SeriesLike, length: int) -> Union[np.ndarray, pd.Series]:
    """Rolling Pearson correlation; undefined windows map to 0.0."""
    return _paired(x, y, length, squared=False)


def rolling_r_squared(x: SeriesLike, y: SeriesLike, length: int) -> Union[np.ndarray, pd.Series]:
    """Rolling coefficient of determination; undefined windows map to 0.0."""
    return _paired(x, y, length, squared=True)


# ============================================================================
# Fixed-Capacity Windows
# ============================================================================

def rolling_max(x: SeriesLike, length: int) -> Union[np.ndarray, pd.Series]:
    """Rolling maximum over the last ``length`` observations."""
    tracker = SlidingExtremumTracker(length)

    def step(value: float) -> float:
        tracker.add(value)
        return tracker.max

    return _drive(x, step, f"max_{length}")


def rolling_min(x: SeriesLike, length: int) -> Union[np.ndarray, pd.Series]:
    """Rolling minimum over the last ``length`` observations."""
    tracker = SlidingExtremumTracker(length)

    def step(value: float) -> float:
        tracker.add(value)
        return tracker.min

    return _drive(x, step, f"min_{length}")


def rolling_median(x: SeriesLike, length: int) -> Union[np.ndarray, pd.Series]:
    """Rolling median over the last ``length`` observations."""
    with OrderStatisticWindow(length) as window:

        def step(value: float) -> float:
            window.add(value)
            return window.median

        return _drive(x, step, f"median_{length}")


def rolling_percent_rank(x: SeriesLike, length: int) -> Union[np.ndarray, pd.Series]:
    """Fraction of the last ``length`` observations at or below the current one."""
    with OrderStatisticWindow(length) as window:

        def step(value: float) -> float:
            window.add(value)
            return window.percent_rank(value)

        return _drive(x, step, f"percent_rank_{length}")

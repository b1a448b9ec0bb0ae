"""
windowstats - Windowed Statistics Engine

Incremental, streaming window primitives that technical indicators query at
every step of a price series without re-scanning the window.

This library provides:
- Prefix-sum aggregators answering sum/average and Pearson R at any lookback in O(1)
- Monotonic-deque rolling max/min in amortized O(1)
- Order-statistics windows answering rank, percentile and median in O(log n)
- Batch drivers running any of the above over numpy arrays or pandas Series
- Factory pattern for creating structures by name

Example Usage:
    import windowstats as ws

    sums = ws.CumulativeWindowAggregator()
    tracker = ws.SlidingExtremumTracker(length=14)

    with ws.OrderStatisticWindow(length=21) as window:
        for price in prices:
            window.add(price)
            rank = window.count_less_than_or_equal(price)

    medians = ws.rolling_median(close_series, 21)
"""

__version__ = "1.0.0"
__author__ = "windowstats Development Team"

# Public API exports
from .base import BaseWindow, validate_length
from .buffers import RingBuffer
from .core import (
    ConfigLoader,
    EngineSettings,
    configure,
    get_settings,
    load_settings,
    setup_logging
)
from .cumulative import CumulativeWindowAggregator, PairedWindowAggregator
from .exceptions import (
    WindowStatsError,
    InvalidParameterError,
    WindowReleasedError,
    WindowNotFoundError
)
from .factory import create, list_windows, describe
from .minmax import SlidingExtremumTracker
from .order_statistics import OrderStatisticTree, OrderStatisticWindow
from .series import (
    rolling_sum,
    rolling_average,
    rolling_correlation,
    rolling_r_squared,
    rolling_max,
    rolling_min,
    rolling_median,
    rolling_percent_rank
)

__all__ = [
    # Core structures
    "CumulativeWindowAggregator",
    "PairedWindowAggregator",
    "SlidingExtremumTracker",
    "OrderStatisticWindow",
    "OrderStatisticTree",
    "RingBuffer",
    "BaseWindow",

    # Factory functions
    "create",
    "list_windows",
    "describe",
    "validate_length",

    # Series drivers
    "rolling_sum",
    "rolling_average",
    "rolling_correlation",
    "rolling_r_squared",
    "rolling_max",
    "rolling_min",
    "rolling_median",
    "rolling_percent_rank",

    # Configuration
    "ConfigLoader",
    "EngineSettings",
    "configure",
    "get_settings",
    "load_settings",
    "setup_logging",

    # Exceptions
    "WindowStatsError",
    "InvalidParameterError",
    "WindowReleasedError",
    "WindowNotFoundError",

    # Metadata
    "__version__",
    "__author__",
]

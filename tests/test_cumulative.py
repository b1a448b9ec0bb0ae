"""Tests for the prefix-sum aggregators."""

import math

import numpy as np
import pytest

from windowstats import (
    CumulativeWindowAggregator,
    PairedWindowAggregator,
    InvalidParameterError,
)


def naive_pearson(xs, ys):
    n = len(xs)
    mx = sum(xs) / n
    my = sum(ys) / n
    cov = sum((x - mx) * (y - my) for x, y in zip(xs, ys))
    vx = sum((x - mx) ** 2 for x in xs)
    vy = sum((y - my) ** 2 for y in ys)
    return cov / math.sqrt(vx * vy)


class TestCumulativeWindowAggregator:

    def test_sum_of_last_two_and_clamped_lookback(self):
        sums = CumulativeWindowAggregator()
        for value in (1, 2, 3, 4):
            sums.add(value)

        assert sums.sum(2) == 7
        assert sums.sum(10) == 10
        assert sums.count == 4

    def test_empty_aggregator_returns_zero(self):
        sums = CumulativeWindowAggregator()
        assert sums.sum(5) == 0.0
        assert sums.average(5) == 0.0

    @pytest.mark.parametrize("length", [0, -3])
    def test_non_positive_length_is_rejected(self, length):
        sums = CumulativeWindowAggregator()
        sums.add(1.0)
        with pytest.raises(InvalidParameterError):
            sums.sum(length)
        with pytest.raises(InvalidParameterError):
            sums.average(length)

    @pytest.mark.parametrize("compensated", [True, False])
    def test_sum_and_average_match_naive_window(self, prices, compensated):
        sums = CumulativeWindowAggregator(compensated=compensated)
        history = []
        for value in prices[:200]:
            sums.add(value)
            history.append(value)
            for length in (1, 3, 14, 50, 500):
                window = history[-length:]
                assert sums.sum(length) == pytest.approx(sum(window), rel=1e-12)
                assert sums.average(length) == pytest.approx(sum(window) / len(window), rel=1e-12)

    def test_sum_at_and_average_at_anchor_earlier_windows(self):
        sums = CumulativeWindowAggregator()
        values = [5.0, 1.0, 4.0, 2.0, 8.0]
        for value in values:
            sums.add(value)

        assert sums.sum_at(2, 2) == 5.0
        assert sums.sum_at(10, 1) == 6.0
        assert sums.average_at(3, 3) == pytest.approx(7.0 / 3)
        assert sums.average_at(4, 0) == 5.0

    def test_sum_at_rejects_index_outside_stream(self):
        sums = CumulativeWindowAggregator()
        sums.add(1.0)
        with pytest.raises(InvalidParameterError):
            sums.sum_at(1, 1)
        with pytest.raises(InvalidParameterError):
            sums.sum_at(1, -1)

    def test_compensated_sums_resist_drift(self):
        # Large offset with tiny increments: plain prefix differencing loses the increments
        sums = CumulativeWindowAggregator(compensated=True)
        sums.add(1e16)
        for _ in range(1000):
            sums.add(1.0)

        assert sums.sum(1000) == 1000.0

    def test_reset_clears_state(self):
        sums = CumulativeWindowAggregator()
        for value in (1.0, 2.0, 3.0):
            sums.add(value)
        sums.reset()

        assert sums.count == 0
        assert sums.sum(3) == 0.0
        sums.add(4.0)
        assert sums.sum(3) == 4.0

    def test_queries_are_idempotent(self, prices):
        sums = CumulativeWindowAggregator()
        for value in prices[:50]:
            sums.add(value)

        first = [sums.sum(7), sums.average(7)]
        second = [sums.sum(7), sums.average(7)]
        assert first == second


class TestPairedWindowAggregator:

    def test_perfect_linear_relationship(self):
        corr = PairedWindowAggregator()
        for x, y in zip([1, 2, 3, 4], [2, 4, 6, 8]):
            corr.add(x, y)

        assert corr.r(4) == pytest.approx(1.0)
        assert corr.r_squared(4) == pytest.approx(1.0)

    def test_perfect_inverse_relationship(self):
        corr = PairedWindowAggregator()
        for x in range(10):
            corr.add(float(x), 5.0 - 2.0 * x)

        assert corr.r(10) == pytest.approx(-1.0)

    def test_length_below_two_is_undefined(self):
        corr = PairedWindowAggregator()
        for x, y in zip([1, 2, 3], [3, 1, 2]):
            corr.add(x, y)

        assert corr.r(1) is None
        assert corr.r_squared(1) is None

    def test_single_pair_is_undefined(self):
        corr = PairedWindowAggregator()
        corr.add(1.0, 2.0)
        assert corr.r(5) is None

    def test_zero_variance_is_undefined(self):
        corr = PairedWindowAggregator()
        for x in range(6):
            corr.add(float(x), 0.1)

        assert corr.r(6) is None
        assert corr.r_squared(3) is None

    def test_non_positive_length_is_rejected(self):
        corr = PairedWindowAggregator()
        corr.add(1.0, 2.0)
        with pytest.raises(InvalidParameterError):
            corr.r(0)

    def test_matches_from_scratch_pearson(self, prices):
        rng = np.random.default_rng(3)
        noise = rng.normal(0, 1, len(prices))
        ys = prices * 0.5 + noise

        corr = PairedWindowAggregator()
        for i, (x, y) in enumerate(zip(prices.tolist(), ys.tolist())):
            corr.add(x, y)
            if i < 2:
                continue
            for length in (5, 20, 100):
                start = max(0, i + 1 - length)
                expected = naive_pearson(prices[start:i + 1].tolist(), ys[start:i + 1].tolist())
                assert corr.r(length) == pytest.approx(expected, rel=1e-9, abs=1e-9)

    def test_matches_numpy_corrcoef_over_full_stream(self, prices):
        ys = np.sin(np.arange(len(prices)) / 10.0)
        corr = PairedWindowAggregator()
        for x, y in zip(prices.tolist(), ys.tolist()):
            corr.add(x, y)

        expected = np.corrcoef(prices, ys)[0, 1]
        assert corr.r(len(prices)) == pytest.approx(expected, rel=1e-9, abs=1e-12)

    @pytest.mark.parametrize("compensated", [True, False])
    def test_high_priced_quiet_pair_matches_numpy(self, compensated):
        # Level near 60,000 with moves of about 0.01
        rng = np.random.default_rng(11)
        xs = 60000.0 + np.cumsum(rng.normal(0, 0.01, 200))
        ys = 2.0 * xs + rng.normal(0, 0.005, 200)
        length = 20

        corr = PairedWindowAggregator(compensated=compensated)
        for i, (x, y) in enumerate(zip(xs.tolist(), ys.tolist())):
            corr.add(x, y)
            if i + 1 < length:
                continue
            expected = np.corrcoef(xs[i + 1 - length:i + 1], ys[i + 1 - length:i + 1])[0, 1]
            result = corr.r(length)
            assert result is not None
            assert result == pytest.approx(expected, rel=1e-6, abs=1e-9)

    def test_high_priced_stream_sums_keep_level(self):
        corr = PairedWindowAggregator()
        for x, y in zip([60000.0, 60000.5, 60001.0], [30000.0, 30001.0, 30002.0]):
            corr.add(x, y)

        assert corr.sum_x(2) == 120001.5
        assert corr.average_x(3) == 60000.5
        assert corr.sum_y(10) == 90003.0
        assert corr.average_y(2) == 30001.5

    def test_stream_sums(self):
        corr = PairedWindowAggregator()
        for x, y in zip([1, 2, 3, 4], [10, 20, 30, 40]):
            corr.add(x, y)

        assert corr.sum_x(2) == 7
        assert corr.sum_y(3) == 90
        assert corr.average_x(4) == 2.5
        assert corr.average_y(10) == 25.0

    def test_replay_is_deterministic(self, prices):
        ys = prices[::-1].copy()
        first = PairedWindowAggregator()
        second = PairedWindowAggregator()
        for x, y in zip(prices.tolist(), ys.tolist()):
            first.add(x, y)
            second.add(x, y)

        assert first.r(30) == second.r(30)
        assert first.r_squared(300) == second.r_squared(300)

    def test_reset(self):
        corr = PairedWindowAggregator()
        for x, y in zip([1, 2, 3], [1, 2, 3]):
            corr.add(x, y)
        corr.reset()

        assert corr.count == 0
        assert corr.r(3) is None
        corr.add(10.0, 1.0)
        corr.add(20.0, 3.0)
        assert corr.sum_x(2) == 30.0
        assert corr.r(2) == pytest.approx(1.0)

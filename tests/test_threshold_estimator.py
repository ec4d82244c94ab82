"""Tests de ThresholdEstimator."""

from datetime import timezone

import pytest

from prediction_service.domain.point import Point
from prediction_service.domain.threshold_status import (
    BEYOND_DAY_TEXT,
    NOT_EXPECTED_TEXT,
    StatusKind,
)
from prediction_service.models.threshold_estimator import ThresholdEstimator, fit_line

NOW = 1_700_000_000  # 22:13:20 UTC


@pytest.fixture
def estimator() -> ThresholdEstimator:
    return ThresholdEstimator()


def ramp(start, count, v0, step):
    return [Point(start + i, v0 + step * i) for i in range(count)]


class TestInsufficientData:

    def test_empty_or_single_point(self, estimator):
        assert estimator.estimate([], 10.0, NOW) is None
        assert estimator.estimate([Point(NOW, 50.0)], 10.0, NOW) is None


class TestReached:

    def test_last_value_at_threshold(self, estimator):
        status = estimator.estimate([Point(NOW - 1, 1.0), Point(NOW, 10.0)], 10.0, NOW)
        assert status.kind is StatusKind.REACHED
        assert status.at == NOW
        assert status.message(timezone.utc) == "Reached at 22:13:20"

    @pytest.mark.parametrize("threshold", [-50.0, 0.0, 9.99, 10.0])
    def test_any_threshold_below_last(self, estimator, threshold):
        forecast = ramp(NOW - 5, 5, 20.0, -2.5)  # termina en 10.0
        status = estimator.estimate(forecast, threshold, NOW)
        assert status.is_reached
        assert status.at == forecast[-1].time


class TestNotTrending:

    def test_flat_series(self, estimator):
        status = estimator.estimate(ramp(NOW - 10, 10, 5.0, 0.0), 50.0, NOW)
        assert status.kind is StatusKind.NOT_TRENDING
        assert status.message() == NOT_EXPECTED_TEXT

    def test_decreasing_series(self, estimator):
        status = estimator.estimate(ramp(NOW - 10, 10, 20.0, -1.0), 50.0, NOW)
        assert status.kind is StatusKind.NOT_TRENDING

    def test_all_times_equal_no_division_by_zero(self, estimator):
        forecast = [Point(NOW, float(v)) for v in range(5)]
        status = estimator.estimate(forecast, 50.0, NOW)
        assert status.kind is StatusKind.NOT_TRENDING

    def test_reach_time_in_the_past(self, estimator):
        # Pendiente positiva pero el cruce "debió" ocurrir hace mucho
        status = estimator.estimate(ramp(1000, 10, 0.0, 1.0), 100.0, NOW)
        assert status.kind is StatusKind.NOT_TRENDING


class TestEta:

    def test_within_day(self, estimator):
        forecast = ramp(NOW - 9, 10, 0.0, 1.0)  # pendiente 1/s, último (NOW, 9)
        status = estimator.estimate(forecast, 100.0, NOW - 5)
        assert status.kind is StatusKind.WITHIN_DAY
        assert status.at == pytest.approx(NOW + 91)
        assert status.message(timezone.utc) == "Estimated to reach at 22:14:51"

    def test_beyond_day(self, estimator):
        forecast = ramp(NOW - 9, 10, 0.0, 1e-4)
        status = estimator.estimate(forecast, 100.0, NOW)
        assert status.kind is StatusKind.BEYOND_DAY
        assert status.message() == BEYOND_DAY_TEXT

    def test_only_last_ten_points_are_regressed(self, estimator):
        falling = [Point(NOW - 19 + i, 100.0 - 10 * i) for i in range(10)]
        rising = [Point(NOW - 9 + i, float(i)) for i in range(10)]
        status = estimator.estimate(falling + rising, 50.0, NOW)
        assert status.kind is StatusKind.WITHIN_DAY
        assert status.at == pytest.approx(NOW + 41)

    def test_estimator_is_pure(self, estimator):
        forecast = ramp(NOW - 9, 10, 0.0, 1.0)
        first = estimator.estimate(forecast, 100.0, NOW)
        second = estimator.estimate(forecast, 100.0, NOW)
        assert first == second


class TestFitLine:

    def test_precision_with_epoch_times(self):
        fit = fit_line(ramp(NOW, 10, 3.0, 2.0))
        assert fit.slope == pytest.approx(2.0)
        assert fit.n == 10

    def test_degenerate(self):
        assert fit_line([Point(5, 1.0), Point(5, 2.0)]) is None
        assert fit_line([Point(5, 1.0)]) is None

"""
Tests for cross-target aggregation.

Validates:
  - Equal weight per target for MPI and radius, per-shot outlier rate
  - Empty input yields "no data" metrics
  - Radius trend ordering and improving / stable / worsening classification
  - Spread statistics recomputed from stored shots
  - Per-pressure aggregation and the low vs. higher comparison
"""

from datetime import datetime, timedelta
import pytest

from marksman import aggregation
from marksman.models.metrics import TrendDirection
from marksman.models.session import SessionType
from marksman.models.shot import Confidence, NormalizedShot, StoredTargetPattern

START = datetime(2026, 10, 1, 9, 0)


def _pattern(radius, shots=5, outliers=0, mpi=(0.0, 0.0), day=0,
             session_type=SessionType.FREE_PRACTICE):
    return StoredTargetPattern(
        session_type=session_type,
        normalized_shots=tuple(NormalizedShot(0.0, 0.0) for _ in range(shots)),
        mpi=NormalizedShot(*mpi),
        group_radius=radius,
        outlier_count=outliers,
        timestamp=START + timedelta(days=day),
    )


class TestAggregate:
    """Pooling several targets."""

    def test_empty(self):
        metrics = aggregation.aggregate([])
        assert metrics.session_count == 0
        assert metrics.total_shots == 0
        assert metrics.average_group_radius == 0.0
        assert metrics.suppression_reason == "no data"
        assert not metrics.has_data

    def test_equal_weight_per_target(self):
        """A 3-shot target and a 30-shot target count the same."""
        metrics = aggregation.aggregate([
            _pattern(0.1, shots=3),
            _pattern(0.5, shots=30, outliers=3, day=1),
        ])
        assert metrics.average_group_radius == pytest.approx(0.3)
        assert metrics.outlier_rate == pytest.approx(3 / 33)
        assert metrics.total_shots == 33
        assert metrics.session_count == 2
        assert metrics.confidence == Confidence.HIGH

    def test_average_mpi(self):
        metrics = aggregation.aggregate([
            _pattern(0.2, shots=2, mpi=(0.2, -0.1)),
            _pattern(0.2, shots=20, mpi=(0.0, 0.3)),
        ])
        assert metrics.average_mpi.u == pytest.approx(0.1)
        assert metrics.average_mpi.v == pytest.approx(0.1)

    def test_radius_trend_oldest_first(self):
        metrics = aggregation.aggregate([
            _pattern(0.3, day=2), _pattern(0.1, day=0), _pattern(0.2, day=1),
        ])
        assert [r for _, r in metrics.radius_trend] == [0.1, 0.2, 0.3]

    def test_shots_by_day(self):
        metrics = aggregation.aggregate([
            _pattern(0.1, shots=4, day=0),
            _pattern(0.1, shots=6, day=0),
            _pattern(0.1, shots=5, day=3),
        ])
        assert metrics.shots_by_day == {
            START.date(): 10,
            (START + timedelta(days=3)).date(): 5,
        }

    def test_pressure_level_only_when_uniform(self):
        same = aggregation.aggregate([
            _pattern(0.1, session_type=SessionType.COMPETITION),
            _pattern(0.2, session_type=SessionType.COMPETITION),
        ])
        mixed = aggregation.aggregate([
            _pattern(0.1, session_type=SessionType.COMPETITION),
            _pattern(0.2),
        ])
        assert same.pressure_level == 3
        assert mixed.pressure_level is None


    def test_spread_averages(self):
        """Std dev, extreme spread and group size come from the stored shots."""
        def ring(r, day):
            shots = (NormalizedShot(r, 0.0), NormalizedShot(-r, 0.0),
                     NormalizedShot(0.0, r), NormalizedShot(0.0, -r))
            return StoredTargetPattern(
                session_type=SessionType.FREE_PRACTICE, normalized_shots=shots,
                mpi=NormalizedShot(0.0, 0.0), group_radius=r, outlier_count=0,
                timestamp=START + timedelta(days=day))

        metrics = aggregation.aggregate([ring(0.1, 0), ring(0.3, 1)])
        assert metrics.average_std_dev == pytest.approx(0.2)
        assert metrics.average_extreme_spread == pytest.approx(0.4)
        assert metrics.average_group_size == pytest.approx(0.4)

    def test_single_shot_target_has_no_spread(self):
        metrics = aggregation.aggregate([_pattern(0.0, shots=1)])
        assert metrics.session_count == 1
        assert metrics.average_std_dev == 0.0
        assert metrics.average_extreme_spread == 0.0


class TestTrend:
    """Older half vs. newer half of the radius trend."""

    def _trend(self, radii):
        return [(START + timedelta(days=i), r) for i, r in enumerate(radii)]

    def test_improving_scenario(self):
        metrics = aggregation.aggregate([
            _pattern(r, day=i) for i, r in enumerate([0.30, 0.28, 0.27, 0.15, 0.14, 0.13])
        ])
        assert metrics.trend == TrendDirection.IMPROVING

    def test_worsening(self):
        trend = self._trend([0.13, 0.14, 0.15, 0.27, 0.28, 0.30])
        assert aggregation.classify_trend(trend) == TrendDirection.WORSENING

    def test_fewer_than_four_points_is_stable(self):
        trend = self._trend([0.4, 0.3, 0.1])
        assert aggregation.classify_trend(trend) == TrendDirection.STABLE

    def test_small_change_is_stable(self):
        trend = self._trend([0.20, 0.21, 0.19, 0.20])
        assert aggregation.classify_trend(trend) == TrendDirection.STABLE

    def test_odd_count_skips_middle(self):
        # Middle point would flip the result if it were counted
        trend = self._trend([0.2, 0.2, 5.0, 0.2, 0.2])
        assert aggregation.classify_trend(trend) == TrendDirection.STABLE

    def test_zero_baseline(self):
        assert (aggregation.classify_trend(self._trend([0, 0, 0.1, 0.1]))
                == TrendDirection.WORSENING)
        assert (aggregation.classify_trend(self._trend([0, 0, 0, 0]))
                == TrendDirection.STABLE)


class TestPressure:
    """Per-level aggregation and the low vs. higher comparison."""

    def test_aggregate_by_pressure(self):
        by_level = aggregation.aggregate_by_pressure([
            _pattern(0.1),
            _pattern(0.3, session_type=SessionType.COMPETITION),
        ])
        assert sorted(by_level) == [1, 3]
        assert by_level[3].average_group_radius == pytest.approx(0.3)

    def test_levels_lowest_pressure_first(self):
        by_level = aggregation.aggregate_by_pressure([
            _pattern(0.3, session_type=SessionType.COMPETITION),
            _pattern(0.2, session_type=SessionType.COMPETITION_TRAINING),
            _pattern(0.1),
        ])
        assert list(by_level) == [1, 2, 3]

    def test_session_types_by_pressure(self):
        levels = [t.pressure_level for t in SessionType.by_pressure()]
        assert levels == sorted(levels)
        assert SessionType.by_pressure()[0] is SessionType.FREE_PRACTICE

    def test_compare_uses_highest_level(self):
        comparison = aggregation.compare_pressure([
            _pattern(0.1),
            _pattern(0.2, session_type=SessionType.COMPETITION_TRAINING),
            _pattern(0.3, session_type=SessionType.COMPETITION),
        ])
        assert comparison.high_label == "competition"
        assert comparison.percent_change == pytest.approx(200.0)

    def test_compare_falls_back_to_training(self):
        comparison = aggregation.compare_pressure([
            _pattern(0.2),
            _pattern(0.1, session_type=SessionType.COMPETITION_TRAINING),
        ])
        assert comparison.high_label == "competition training"
        assert comparison.percent_change == pytest.approx(-50.0)

    def test_compare_needs_both_sides(self):
        assert aggregation.compare_pressure([_pattern(0.1)]) is None
        assert aggregation.compare_pressure(
            [_pattern(0.1, session_type=SessionType.COMPETITION)]) is None
        assert aggregation.compare_pressure([]) is None

    def test_zero_baseline_has_no_percent(self):
        comparison = aggregation.compare_pressure([
            _pattern(0.0),
            _pattern(0.2, session_type=SessionType.COMPETITION),
        ])
        assert comparison.percent_change is None

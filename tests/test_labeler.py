"""
Tests for pattern labeling.

Validates:
  - Tightness buckets at their boundaries
  - Centered / off-center split and severity
  - Direction naming (negative v is high) and clock position
  - Consistency and accuracy grades
  - Labeling never fails on missing or out-of-range values
"""

import math
import pytest

from marksman import labeler
from marksman.models.metrics import (
    AggregatedMetrics,
    BiasCategory,
    BiasDirection,
    BiasSeverity,
    Rating,
    Tightness,
)
from marksman.models.shot import Confidence, GroupResult, NormalizedShot


def _result(u=0.0, v=0.0, radius=0.1):
    return GroupResult(shot_count=10, confidence=Confidence.MEDIUM,
                       mpi=NormalizedShot(u, v), group_radius=radius)


class TestTightness:
    """Group radius → tight / moderate / wide."""

    @pytest.mark.parametrize("radius,expected", [
        (0.0, Tightness.TIGHT),
        (0.1499, Tightness.TIGHT),
        (0.15, Tightness.MODERATE),
        (0.35, Tightness.MODERATE),
        (0.3501, Tightness.WIDE),
        (2.0, Tightness.WIDE),
    ])
    def test_boundaries(self, radius, expected):
        assert labeler.classify_tightness(radius) == expected

    def test_negative_radius_clamps_to_tight(self):
        assert labeler.classify_tightness(-0.4) == Tightness.TIGHT

    def test_nan_radius_clamps_to_tight(self):
        assert labeler.classify_tightness(math.nan) == Tightness.TIGHT

    def test_infinite_radius_is_wide(self):
        assert labeler.classify_tightness(math.inf) == Tightness.WIDE


class TestBias:
    """MPI offset → centered / off-center with severity."""

    def test_small_offset_is_centered(self):
        pattern = labeler.label(_result(0.05, -0.05))
        assert pattern.bias == BiasCategory.CENTERED
        assert pattern.direction == BiasDirection.CENTERED
        assert pattern.severity == BiasSeverity.CENTERED
        assert pattern.clock is None

    def test_slight_offset(self):
        pattern = labeler.label(_result(0.12, 0.0))
        assert pattern.bias == BiasCategory.OFF_CENTER
        assert pattern.severity == BiasSeverity.SLIGHT
        assert pattern.direction == BiasDirection.RIGHT

    def test_significant_offset(self):
        pattern = labeler.label(_result(-0.2, -0.2, radius=0.4))
        assert pattern.tightness == Tightness.WIDE
        assert pattern.bias == BiasCategory.OFF_CENTER
        assert pattern.severity == BiasSeverity.SIGNIFICANT
        assert pattern.direction == BiasDirection.HIGH_LEFT

    def test_description(self):
        assert labeler.label(_result()).description == "Tight & Centered"
        assert (labeler.label(_result(-0.2, -0.2, radius=0.4)).description
                == "Wide & Significant high-left")


class TestDirection:
    """Dominant axis names the direction; diagonals need a strong minor axis."""

    @pytest.mark.parametrize("u,v,expected", [
        (0.0, -0.3, BiasDirection.HIGH),
        (0.0, 0.3, BiasDirection.LOW),
        (-0.3, 0.0, BiasDirection.LEFT),
        (0.3, -0.05, BiasDirection.RIGHT),
        (0.05, 0.3, BiasDirection.LOW),
        (0.3, -0.2, BiasDirection.HIGH_RIGHT),
        (-0.2, 0.3, BiasDirection.LOW_LEFT),
    ])
    def test_direction(self, u, v, expected):
        assert labeler.bias_direction(NormalizedShot(u, v)) == expected

    def test_phrase(self):
        assert BiasDirection.HIGH_LEFT.phrase == "high and left"
        assert BiasDirection.LOW.phrase == "low"

    @pytest.mark.parametrize("u,v,hour", [
        (0.0, -0.3, 12),
        (0.3, 0.0, 3),
        (0.0, 0.3, 6),
        (-0.3, 0.0, 9),
    ])
    def test_clock_position(self, u, v, hour):
        assert labeler.clock_position(NormalizedShot(u, v)) == hour


class TestRatings:
    """Spread and offset graded excellent / good / fair / needs work."""

    @pytest.mark.parametrize("value,expected", [
        (0.0, Rating.EXCELLENT),
        (0.0499, Rating.EXCELLENT),
        (0.05, Rating.GOOD),
        (0.0999, Rating.GOOD),
        (0.10, Rating.FAIR),
        (0.15, Rating.NEEDS_WORK),
        (-1.0, Rating.EXCELLENT),
        (math.nan, Rating.EXCELLENT),
        (math.inf, Rating.NEEDS_WORK),
    ])
    def test_consistency_boundaries(self, value, expected):
        assert labeler.rate(value, (0.05, 0.10, 0.15)) == expected

    def test_consistency_from_std_dev(self):
        result = GroupResult(shot_count=10, confidence=Confidence.MEDIUM,
                             mpi=NormalizedShot(0.0, 0.0), group_radius=0.1,
                             std_dev=0.12)
        assert labeler.label(result).consistency == Rating.FAIR

    @pytest.mark.parametrize("u,expected", [
        (0.0, Rating.EXCELLENT),
        (0.08, Rating.GOOD),
        (0.19, Rating.FAIR),
        (0.2, Rating.NEEDS_WORK),
    ])
    def test_accuracy_from_offset(self, u, expected):
        assert labeler.label(_result(u=u)).accuracy == expected

    def test_pooled_consistency(self):
        metrics = AggregatedMetrics(average_group_radius=0.2, average_std_dev=0.07,
                                    total_shots=20, session_count=3)
        assert labeler.label(metrics).consistency == Rating.GOOD

    def test_suppressed_grades_excellent(self):
        suppressed = GroupResult(shot_count=1, confidence=Confidence.LOW,
                                 suppression_reason="insufficient data")
        pattern = labeler.label(suppressed)
        assert pattern.consistency == Rating.EXCELLENT
        assert pattern.accuracy == Rating.EXCELLENT


class TestNeverFails:
    """Missing or odd inputs still produce a label."""

    def test_suppressed_result(self):
        suppressed = GroupResult(shot_count=1, confidence=Confidence.LOW,
                                 suppression_reason="insufficient data")
        pattern = labeler.label(suppressed)
        assert pattern.tightness == Tightness.TIGHT
        assert pattern.bias == BiasCategory.CENTERED

    def test_empty_metrics(self):
        pattern = labeler.label(AggregatedMetrics(suppression_reason="no data"))
        assert pattern.tightness == Tightness.TIGHT
        assert pattern.bias == BiasCategory.CENTERED

    def test_nan_mpi(self):
        pattern = labeler.label(_result(math.nan, math.nan))
        assert pattern.bias == BiasCategory.CENTERED

    def test_infinite_mpi(self):
        pattern = labeler.label(_result(math.inf, 0.0))
        assert pattern.direction == BiasDirection.RIGHT
        assert pattern.clock == 3

    def test_aggregated_metrics(self):
        metrics = AggregatedMetrics(average_mpi=NormalizedShot(0.0, 0.4),
                                    average_group_radius=0.2,
                                    total_shots=20, session_count=3)
        pattern = labeler.label(metrics)
        assert pattern.tightness == Tightness.MODERATE
        assert pattern.direction == BiasDirection.LOW

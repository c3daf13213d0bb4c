"""
Pattern labeling for Marksman.

Turns a group's radius and MPI into tightness and bias labels, and grades
its consistency and accuracy. Works on a single-target GroupResult or on
pooled AggregatedMetrics. Labeling never fails: suppressed or empty inputs
label as tight and centered, and out-of-range values fall into the
nearest bucket.
"""

import math
from typing import Optional, Union

from marksman.models.metrics import (
    AggregatedMetrics,
    BiasCategory,
    BiasDirection,
    BiasSeverity,
    PatternLabel,
    Rating,
    Tightness,
)
from marksman.models.shot import GroupResult, NormalizedShot
from marksman.utils.config import DEFAULT_THRESHOLDS, Thresholds


def label(result: Union[GroupResult, AggregatedMetrics],
          thresholds: Optional[Thresholds] = None) -> PatternLabel:
    """Label a group's tightness and bias and grade its spread and offset."""
    t = thresholds or DEFAULT_THRESHOLDS
    mpi, radius = _group_geometry(result)
    mpi = NormalizedShot(_finite(mpi.u), _finite(mpi.v))
    offset = math.hypot(mpi.u, mpi.v)

    tightness = classify_tightness(radius, t)
    consistency = rate(_spread(result), t.consistency_limits)
    accuracy = rate(offset, t.accuracy_limits)
    if offset < t.centered_offset_max:
        return PatternLabel(
            tightness=tightness,
            bias=BiasCategory.CENTERED,
            direction=BiasDirection.CENTERED,
            severity=BiasSeverity.CENTERED,
            consistency=consistency,
            accuracy=accuracy,
        )

    severity = (BiasSeverity.SLIGHT if offset <= t.slight_offset_max
                else BiasSeverity.SIGNIFICANT)
    return PatternLabel(
        tightness=tightness,
        bias=BiasCategory.OFF_CENTER,
        direction=bias_direction(mpi, t),
        severity=severity,
        clock=clock_position(mpi),
        consistency=consistency,
        accuracy=accuracy,
    )


def classify_tightness(radius: float, thresholds: Optional[Thresholds] = None) -> Tightness:
    """tight below 0.15, moderate up to 0.35, wide above."""
    t = thresholds or DEFAULT_THRESHOLDS
    radius = _clamp(radius)
    if radius < t.tight_group_max:
        return Tightness.TIGHT
    if radius <= t.moderate_group_max:
        return Tightness.MODERATE
    return Tightness.WIDE


def rate(value: float, limits) -> Rating:
    """Grade a spread or offset against (excellent, good, fair) upper bounds."""
    value = _clamp(value)
    for rating, limit in zip((Rating.EXCELLENT, Rating.GOOD, Rating.FAIR), limits):
        if value < limit:
            return rating
    return Rating.NEEDS_WORK


def bias_direction(mpi: NormalizedShot, thresholds: Optional[Thresholds] = None) -> BiasDirection:
    """Direction of the MPI from center.

    The larger axis always names the direction; the smaller one joins it
    ("high-left") when it is at least DIAGONAL_RATIO of the larger.
    Negative v is high (image rows grow downward).
    """
    t = thresholds or DEFAULT_THRESHOLDS
    u, v = _finite(mpi.u), _finite(mpi.v)
    if u == 0 and v == 0:
        return BiasDirection.CENTERED

    vertical = "high" if v < 0 else "low"
    horizontal = "left" if u < 0 else "right"
    major, minor = max(abs(u), abs(v)), min(abs(u), abs(v))

    if minor >= t.diagonal_ratio * major:
        return BiasDirection(f"{vertical}-{horizontal}")
    if abs(v) >= abs(u):
        return BiasDirection(vertical)
    return BiasDirection(horizontal)


def clock_position(mpi: NormalizedShot) -> int:
    """Clock hour of the MPI as seen on the target (12 = high, 3 = right)."""
    angle = mpi.angle_degrees
    adjusted = (90 - angle + 360) % 360
    hour = int(round(adjusted / 30.0)) % 12
    return 12 if hour == 0 else hour


def _group_geometry(result: Union[GroupResult, AggregatedMetrics]) -> tuple[NormalizedShot, float]:
    """Extract (MPI, radius), using origin/zero when data is missing."""
    if isinstance(result, AggregatedMetrics):
        if not result.has_data:
            return NormalizedShot(0.0, 0.0), 0.0
        return result.average_mpi, result.average_group_radius

    if result.is_suppressed or result.mpi is None:
        return NormalizedShot(0.0, 0.0), 0.0
    return result.mpi, result.group_radius or 0.0


def _spread(result: Union[GroupResult, AggregatedMetrics]) -> float:
    """RMS spread around the MPI, zero when unknown."""
    if isinstance(result, AggregatedMetrics):
        return result.average_std_dev
    return result.std_dev or 0.0


def _finite(value: float) -> float:
    """NaN becomes 0, infinities become unit-sized with their sign."""
    if math.isnan(value):
        return 0.0
    if math.isinf(value):
        return math.copysign(1.0, value)
    return value


def _clamp(value: float) -> float:
    """Map negative or non-finite values into the valid range."""
    if math.isnan(value) or value < 0:
        return 0.0
    return value

"""
Cross-target aggregation for Marksman.

Pools a filtered slice of history into one AggregatedMetrics:
  - Average MPI and group radius: one vote per target, so a 30-shot card
    does not drown out a 3-shot card
  - Outlier rate: per shot (it is a rate over individual shots)
  - Spread measures (RMS, extreme spread, group size): recomputed from
    each target's stored shots, one vote per target
  - Radius trend: one (timestamp, radius) point per target, oldest first,
    classified as improving / stable / worsening
"""

import logging
from collections import defaultdict
from datetime import datetime
from statistics import mean
from typing import Optional

from marksman import group_stats
from marksman.confidence import classify
from marksman.models.metrics import (
    AggregatedMetrics,
    PressureComparison,
    TrendDirection,
)
from marksman.models.session import SessionType
from marksman.models.shot import NormalizedShot, StoredTargetPattern
from marksman.utils.config import DEFAULT_THRESHOLDS, Thresholds
from marksman.utils.constants import SUPPRESSION_NO_DATA

logger = logging.getLogger(__name__)


def aggregate(patterns: list[StoredTargetPattern],
              thresholds: Optional[Thresholds] = None) -> AggregatedMetrics:
    """Pool stored targets into one set of metrics.

    Args:
        patterns: Targets to combine, in any order.
        thresholds: Calibration overrides (defaults from constants).

    Returns:
        AggregatedMetrics. An empty input gives all-zero metrics with
        session_count 0 and suppression_reason "no data".
    """
    t = thresholds or DEFAULT_THRESHOLDS
    if not patterns:
        return AggregatedMetrics(suppression_reason=SUPPRESSION_NO_DATA)

    total_shots = sum(p.shot_count for p in patterns)
    outlier_count = sum(p.outlier_count for p in patterns)

    shots_by_day: dict = defaultdict(int)
    for p in patterns:
        shots_by_day[p.timestamp.date()] += p.shot_count

    radius_trend = tuple(sorted(
        ((p.timestamp, p.group_radius) for p in patterns),
        key=lambda point: point[0],
    ))

    levels = {p.pressure_level for p in patterns}
    spreads = [group_stats.analyze(list(p.normalized_shots), t) for p in patterns]
    spreads = [s for s in spreads if not s.is_suppressed]

    return AggregatedMetrics(
        average_mpi=NormalizedShot(
            u=mean(p.mpi.u for p in patterns),
            v=mean(p.mpi.v for p in patterns),
        ),
        average_group_radius=mean(p.group_radius for p in patterns),
        outlier_rate=outlier_count / total_shots if total_shots else 0.0,
        outlier_count=outlier_count,
        total_shots=total_shots,
        session_count=len(patterns),
        radius_trend=radius_trend,
        trend=classify_trend(radius_trend, t),
        shots_by_day=dict(sorted(shots_by_day.items())),
        pressure_level=levels.pop() if len(levels) == 1 else None,
        confidence=classify(total_shots, t),
        average_std_dev=_mean_or_zero(s.std_dev for s in spreads),
        average_extreme_spread=_mean_or_zero(s.extreme_spread for s in spreads),
        average_group_size=_mean_or_zero(s.group_size for s in spreads),
    )


def _mean_or_zero(values) -> float:
    values = list(values)
    return mean(values) if values else 0.0


def classify_trend(radius_trend: tuple[tuple[datetime, float], ...] | list,
                   thresholds: Optional[Thresholds] = None) -> TrendDirection:
    """Compare the mean radius of the older half against the newer half.

    Needs at least 4 points, otherwise STABLE. With an odd count the
    middle point belongs to neither half. A change of 15% or more either
    way counts as a trend.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    if len(radius_trend) < t.trend_min_points:
        return TrendDirection.STABLE

    radii = [radius for _, radius in radius_trend]
    half = len(radii) // 2
    first = mean(radii[:half])
    second = mean(radii[-half:])

    if first <= 0:
        return TrendDirection.WORSENING if second > 0 else TrendDirection.STABLE

    change = (second - first) / first
    if change <= -t.trend_change_ratio:
        return TrendDirection.IMPROVING
    if change >= t.trend_change_ratio:
        return TrendDirection.WORSENING
    return TrendDirection.STABLE


# =============================================================================
# Pressure levels
# =============================================================================

def aggregate_by_pressure(patterns: list[StoredTargetPattern],
                          thresholds: Optional[Thresholds] = None) -> dict[int, AggregatedMetrics]:
    """Aggregate each pressure level separately (levels with data only).

    Returns:
        Metrics keyed by pressure level, lowest pressure first.
    """
    by_level: dict[int, AggregatedMetrics] = {}
    for session_type in SessionType.by_pressure():
        matching = [p for p in patterns if p.session_type is session_type]
        if matching:
            by_level[session_type.pressure_level] = aggregate(matching, thresholds)
    return by_level


def compare_pressure(patterns: list[StoredTargetPattern],
                     thresholds: Optional[Thresholds] = None) -> Optional[PressureComparison]:
    """Compare free practice against the most pressured context available.

    The higher-pressure side is competition when any competition targets
    exist, otherwise competition training.

    Returns:
        PressureComparison, or None unless both sides have at least one
        target.
    """
    by_level = aggregate_by_pressure(patterns, thresholds)
    low_level = SessionType.FREE_PRACTICE.pressure_level
    higher = [level for level in by_level if level > low_level]

    if low_level not in by_level or not higher:
        return None

    high_level = max(higher)
    comparison = PressureComparison(
        low=by_level[low_level],
        high=by_level[high_level],
        high_label=SessionType.from_pressure_level(high_level).display_name.lower(),
    )
    logger.debug(
        f"Pressure comparison: level {low_level} radius "
        f"{comparison.low.average_group_radius:.3f} vs level {high_level} "
        f"radius {comparison.high.average_group_radius:.3f}"
    )
    return comparison

"""
Analysis pipeline for Marksman.

Wires the single-target flow (normalize → statistics → label) and the
history flow (filter → aggregate → insights) behind one object the
surrounding application can hold on to.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from marksman import aggregation, group_stats, insights, labeler
from marksman.history import HistoryStore
from marksman.models.metrics import (
    AggregatedMetrics,
    Insights,
    PatternLabel,
    PressureComparison,
)
from marksman.models.session import DateFilter, SessionType
from marksman.models.shot import GroupResult, NormalizedShot, Shot, StoredTargetPattern
from marksman.normalizer import normalize_all
from marksman.utils.config import Config, Thresholds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetAnalysis:
    """Immediate feedback for one marked target."""
    shots: tuple[NormalizedShot, ...]
    result: GroupResult
    label: PatternLabel
    insights: Insights


@dataclass(frozen=True)
class HistorySummary:
    """Everything the history / insights screens display."""
    patterns: tuple[StoredTargetPattern, ...]
    metrics: AggregatedMetrics
    label: PatternLabel
    insights: Insights
    pressure: Optional[PressureComparison] = None
    session_counts: dict[SessionType, int] = field(default_factory=dict)


class ShotGroupAnalyzer:
    """Entry point for target analysis and history insights.

    Attributes:
        history: Store that recorded targets are appended to.
        thresholds: Calibration values used by every step.
    """

    def __init__(self, history: Optional[HistoryStore] = None,
                 thresholds: Optional[Thresholds] = None):
        self.history = history if history is not None else HistoryStore()
        self.thresholds = thresholds or Config.get_thresholds()

    def analyze_target(self, pixels: list[Shot], image_width: float,
                       image_height: float) -> TargetAnalysis:
        """Analyze one target without recording it.

        Raises:
            InvalidGeometry: If the image dimensions are not positive.
        """
        shots = normalize_all(pixels, image_width, image_height)
        result = group_stats.analyze(shots, self.thresholds)
        return TargetAnalysis(
            shots=tuple(shots),
            result=result,
            label=labeler.label(result, self.thresholds),
            insights=insights.generate_insights(result, thresholds=self.thresholds),
        )

    def record_target(
        self,
        pixels: list[Shot],
        image_width: float,
        image_height: float,
        session_type: SessionType = SessionType.FREE_PRACTICE,
        timestamp: Optional[datetime] = None,
    ) -> Optional[StoredTargetPattern]:
        """Analyze a finished target and append it to history.

        Returns:
            The stored pattern, or None when the group was suppressed
            (nothing is stored in that case).
        """
        analysis = self.analyze_target(pixels, image_width, image_height)
        pattern = StoredTargetPattern.from_result(
            analysis.result, list(analysis.shots), session_type, timestamp,
        )
        if pattern is None:
            logger.info(
                f"Target not recorded: {analysis.result.suppression_reason} "
                f"({analysis.result.shot_count} shots)"
            )
            return None

        self.history.append(pattern)
        logger.info(
            f"Target recorded: id={pattern.id} shots={pattern.shot_count} "
            f"radius={pattern.group_radius:.3f} type={session_type.value}"
        )
        return pattern

    def history_summary(
        self,
        date_filter: DateFilter = DateFilter.ALL_TIME,
        session_types: Optional[Iterable[SessionType]] = None,
        now: Optional[datetime] = None,
    ) -> HistorySummary:
        """Pool the filtered history and describe it."""
        types = set(session_types or ())
        patterns = self.history.query(date_filter, types, now)
        counts = self.history.session_type_distribution(date_filter, types, now)
        metrics = aggregation.aggregate(patterns, self.thresholds)
        pressure = aggregation.compare_pressure(patterns, self.thresholds)
        return HistorySummary(
            patterns=tuple(patterns),
            metrics=metrics,
            label=labeler.label(metrics, self.thresholds),
            insights=insights.generate_insights(metrics, pressure, self.thresholds,
                                                session_counts=counts),
            pressure=pressure,
            session_counts=counts,
        )

"""
Derived, display-facing models for Marksman.

AggregatedMetrics: Pooled statistics over several stored targets.
PatternLabel: Qualitative tightness / bias labels.
PressureComparison: Group size at low vs. higher pressure.
Suggestion: Prioritized coaching suggestion.
Insights: Coaching text and suggested drills.

None of these are persisted; they are recomputed from history on demand.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from marksman.models.shot import Confidence, NormalizedShot


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    WORSENING = "worsening"


class Tightness(str, Enum):
    TIGHT = "tight"
    MODERATE = "moderate"
    WIDE = "wide"


class BiasCategory(str, Enum):
    CENTERED = "centered"
    OFF_CENTER = "off-center"


class BiasDirection(str, Enum):
    CENTERED = "centered"
    HIGH = "high"
    LOW = "low"
    LEFT = "left"
    RIGHT = "right"
    HIGH_LEFT = "high-left"
    HIGH_RIGHT = "high-right"
    LOW_LEFT = "low-left"
    LOW_RIGHT = "low-right"

    @property
    def phrase(self) -> str:
        """Readable form, e.g. 'high and left'."""
        return self.value.replace("-", " and ")


class BiasSeverity(str, Enum):
    CENTERED = "centered"
    SLIGHT = "slight"
    SIGNIFICANT = "significant"


class Rating(str, Enum):
    """Four-step grade used for consistency and accuracy."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_WORK = "needs work"


class SuggestionPriority(int, Enum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class SuggestionCategory(str, Enum):
    SIGHT_ALIGNMENT = "sight_alignment"
    HOLD_CONTROL = "hold_control"
    TRIGGER_CONTROL = "trigger_control"
    MENTAL_FOCUS = "mental_focus"


@dataclass(frozen=True)
class PatternLabel:
    """Tightness and bias labels for a group.

    Attributes:
        tightness: tight / moderate / wide from the group radius.
        bias: centered / off-center from |MPI|.
        direction: Dominant direction of the MPI from center.
        severity: How far off center the MPI is.
        clock: Clock position of the MPI (12 = high) when off-center.
        consistency: Grade of the RMS spread around the MPI.
        accuracy: Grade of the MPI distance from center.
    """
    tightness: Tightness
    bias: BiasCategory
    direction: BiasDirection
    severity: BiasSeverity
    clock: Optional[int] = None
    consistency: Rating = Rating.EXCELLENT
    accuracy: Rating = Rating.EXCELLENT

    @property
    def description(self) -> str:
        if self.bias is BiasCategory.CENTERED:
            return f"{self.tightness.value.capitalize()} & Centered"
        return (f"{self.tightness.value.capitalize()} & "
                f"{self.severity.value.capitalize()} {self.direction.value}")


@dataclass(frozen=True)
class AggregatedMetrics:
    """Pooled statistics over a set of stored targets.

    A session_count of zero means "no data", not a zero-radius group.

    Attributes:
        average_mpi: Mean of per-target MPIs (equal weight per target).
        average_group_radius: Mean of per-target radii (equal weight).
        outlier_rate: Outliers / shots across all targets.
        outlier_count: Total outliers.
        total_shots: Total shots.
        session_count: Number of contributing targets.
        radius_trend: (timestamp, radius) per target, oldest first.
        trend: Classification of radius_trend.
        shots_by_day: Shot totals per calendar day.
        pressure_level: Set when every target shares one pressure level.
        average_std_dev: Mean of per-target RMS spread.
        average_extreme_spread: Mean of per-target extreme spread.
        average_group_size: Mean of per-target CEP90 diameters.
    """
    average_mpi: NormalizedShot = NormalizedShot(0.0, 0.0)
    average_group_radius: float = 0.0
    outlier_rate: float = 0.0
    outlier_count: int = 0
    total_shots: int = 0
    session_count: int = 0
    radius_trend: tuple[tuple[datetime, float], ...] = ()
    trend: TrendDirection = TrendDirection.STABLE
    shots_by_day: dict[date, int] = field(default_factory=dict)
    pressure_level: Optional[int] = None
    confidence: Confidence = Confidence.LOW
    suppression_reason: Optional[str] = None
    average_std_dev: float = 0.0
    average_extreme_spread: float = 0.0
    average_group_size: float = 0.0

    @property
    def has_data(self) -> bool:
        return self.session_count > 0

    @property
    def offset(self) -> float:
        """Distance from target center to the average MPI."""
        return math.hypot(self.average_mpi.u, self.average_mpi.v)

    @property
    def outlier_percentage(self) -> float:
        return self.outlier_rate * 100


@dataclass(frozen=True)
class PressureComparison:
    """Average group radius at low pressure vs. the higher-pressure context."""
    low: AggregatedMetrics
    high: AggregatedMetrics
    high_label: str

    @property
    def percent_change(self) -> Optional[float]:
        """(high - low) / low × 100; None when the low baseline is zero."""
        base = self.low.average_group_radius
        if base <= 0:
            return None
        return (self.high.average_group_radius - base) / base * 100


@dataclass(frozen=True)
class Suggestion:
    """A prioritized coaching suggestion with its drills."""
    priority: SuggestionPriority
    category: SuggestionCategory
    title: str
    description: str
    drills: tuple[str, ...] = ()


@dataclass(frozen=True)
class Insights:
    """Coaching output for display.

    Attributes:
        observation: What the group looks like.
        trend: How group size has moved over time.
        outlier: Note about shots outside the main group.
        bias: Note about where the group sits relative to center.
        pressure: Comparison across pressure levels.
        practice_focus: What to work on next.
        drills: Suggested drills, in display order.
        suggestions: Prioritized suggestions, highest priority first.
        session_mix: Notes on the balance of session types and on how
                     much data backs the insights.
    """
    observation: str
    trend: Optional[str] = None
    outlier: Optional[str] = None
    bias: Optional[str] = None
    pressure: Optional[str] = None
    practice_focus: Optional[str] = None
    drills: tuple[str, ...] = ()
    suggestions: tuple[Suggestion, ...] = ()
    session_mix: tuple[str, ...] = ()

    @property
    def combined_text(self) -> str:
        parts = [self.observation, self.trend, self.outlier, self.bias,
                 self.pressure, *self.session_mix]
        return " ".join(p for p in parts if p)

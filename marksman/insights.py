"""
Coaching insights for Marksman.

Turns a single-target GroupResult or pooled AggregatedMetrics into short
observational text, a deterministic list of drills and prioritized
improvement suggestions. Optionally compares group size across pressure
levels and comments on the mix of session types behind a history summary.

Wording is observational (what the group does), never a technique
diagnosis. Low-confidence results are phrased as an early read.
"""

from typing import Optional, Union

from marksman import labeler
from marksman.models.metrics import (
    AggregatedMetrics,
    BiasCategory,
    BiasSeverity,
    Insights,
    PatternLabel,
    PressureComparison,
    Rating,
    Suggestion,
    SuggestionCategory,
    SuggestionPriority,
    Tightness,
    TrendDirection,
)
from marksman.models.shot import Confidence, GroupResult
from marksman.models.session import SessionType
from marksman.utils.config import DEFAULT_THRESHOLDS, Thresholds
from marksman.utils.constants import (
    DRILL_PRIORITY,
    DRILLS,
    MIX_COMPETITION_MIN,
    MIX_FREE_PRACTICE_ONLY_MIN,
    MIX_SUFFICIENT_TARGETS,
    MIX_TRAINING_MIN,
)

ENCOURAGEMENT = "Start practicing to see your shot patterns!"
NEED_MORE_SHOTS = "Mark at least 2 shots to see how your group is forming."

ADD_TRAINING = (
    "Consider adding some competition training sessions to practice under pressure."
)
BRIDGE_THE_GAP = (
    "Competition training sessions can bridge the gap between free practice "
    "and competitions."
)
MORE_DATA = "Keep practicing! More data will provide more accurate insights."
KEEP_GOING = "Keep up the consistent practice across different contexts."

PRACTICE_FOCUS = {
    (Tightness.TIGHT, BiasSeverity.CENTERED):
        "Excellent consistency. Focus on keeping your routine relaxed and repeatable.",
    (Tightness.TIGHT, BiasSeverity.SLIGHT):
        "Great grouping. With a cluster this tight, small adjustments to your "
        "natural point of aim often center the group.",
    (Tightness.TIGHT, BiasSeverity.SIGNIFICANT):
        "Your shots land together, which is the first goal. Explore your "
        "natural point of aim to shift the group toward center.",
    (Tightness.MODERATE, BiasSeverity.CENTERED):
        "Good habits with shots balanced around center. A consistent shot "
        "routine often helps tighten the group.",
    (Tightness.MODERATE, BiasSeverity.SLIGHT):
        "Building consistency is the focus at this stage. Slow down and work "
        "on one element at a time.",
    (Tightness.MODERATE, BiasSeverity.SIGNIFICANT):
        "Building consistency is the focus at this stage. Slow down and work "
        "on one element at a time.",
    (Tightness.WIDE, BiasSeverity.CENTERED):
        "Shots are balanced around center, a good foundation. Work on "
        "stability and a repeatable routine to tighten the group.",
    (Tightness.WIDE, BiasSeverity.SLIGHT):
        "Develop a steady, repeatable routine and take your time between shots.",
    (Tightness.WIDE, BiasSeverity.SIGNIFICANT):
        "Develop a steady, repeatable routine and take your time between shots.",
}


def generate_insights(
    current: Union[GroupResult, AggregatedMetrics],
    comparison_context: Optional[Union[AggregatedMetrics, PressureComparison]] = None,
    thresholds: Optional[Thresholds] = None,
    session_counts: Optional[dict[SessionType, int]] = None,
) -> Insights:
    """Build coaching text for a target or a slice of history.

    Args:
        current: Single-target result or pooled history metrics. When a
                 comparison context is given, this is the low-pressure
                 baseline.
        comparison_context: Higher-pressure metrics to compare against
                            ``current``, or a ready PressureComparison.
        thresholds: Calibration overrides (defaults from constants).
        session_counts: Targets per session type in the analyzed slice of
                        history. Enables the session-mix notes.

    Returns:
        Insights. With no data there is a single encouragement string and
        no drills.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    metrics = _as_metrics(current)

    if not metrics.has_data:
        observation = ENCOURAGEMENT
        if isinstance(current, GroupResult) and current.shot_count > 0:
            observation = NEED_MORE_SHOTS
        return Insights(observation=observation)

    pattern = labeler.label(metrics, t)
    confidence = metrics.confidence

    comparison = comparison_context
    if isinstance(comparison_context, AggregatedMetrics):
        comparison = _build_comparison(metrics, comparison_context)

    pressure = pressure_insight(comparison, t) if comparison else None
    session_mix = ()
    if session_counts is not None:
        session_mix = session_mix_insights(session_counts, has_pressure_note=bool(pressure))

    return Insights(
        observation=_hedge(_observation(metrics, pattern, isinstance(current, GroupResult)),
                           confidence),
        trend=_trend_text(metrics, t) if isinstance(current, AggregatedMetrics) else None,
        outlier=_outlier_text(metrics),
        bias=_bias_text(pattern, confidence),
        pressure=pressure,
        practice_focus=PRACTICE_FOCUS[(pattern.tightness, pattern.severity)],
        drills=suggest_drills(metrics, pattern, t),
        suggestions=suggest_improvements(metrics, pattern, t),
        session_mix=session_mix,
    )


def pressure_insight(comparison: PressureComparison,
                     thresholds: Optional[Thresholds] = None) -> Optional[str]:
    """Describe how group size changes under pressure.

    Returns None unless both sides have data and the low-pressure radius
    is non-zero.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    if not (comparison.low.has_data and comparison.high.has_data):
        return None
    pct = comparison.percent_change
    if pct is None:
        return None

    label = comparison.high_label
    if pct > t.pressure_widen_pct:
        return (f"Your groups widen by {pct:.0f}% under {label} pressure. "
                f"Mental preparation exercises may help.")
    if pct < t.pressure_tighten_pct:
        return (f"You shoot {abs(pct):.0f}% tighter groups under {label} pressure "
                f"- you may thrive with some stakes!")
    return ("Your consistency stays steady across pressure levels "
            "- a great sign of mental resilience.")


def suggest_drills(metrics: AggregatedMetrics, pattern: PatternLabel,
                   thresholds: Optional[Thresholds] = None) -> tuple[str, ...]:
    """Pick drills from the fixed table by which thresholds fired."""
    t = thresholds or DEFAULT_THRESHOLDS
    fired = set()

    if pattern.tightness is Tightness.WIDE:
        fired.add("wide")
    elif pattern.tightness is Tightness.MODERATE:
        fired.add("moderate")
    elif pattern.bias is BiasCategory.CENTERED:
        fired.add("tight_centered")

    if pattern.bias is BiasCategory.OFF_CENTER:
        fired.add("off_center")
    if metrics.outlier_rate > t.high_outlier_rate:
        fired.add("high_outlier_rate")
    if metrics.average_extreme_spread > t.extreme_spread_max:
        fired.add("extreme_spread")

    drills: list[str] = []
    for key in DRILL_PRIORITY:
        if key in fired:
            drills.extend(d for d in DRILLS[key] if d not in drills)
    return tuple(drills)


def suggest_improvements(metrics: AggregatedMetrics, pattern: PatternLabel,
                         thresholds: Optional[Thresholds] = None) -> tuple[Suggestion, ...]:
    """Prioritized suggestions from the accuracy and consistency grades,
    directional bias and extreme spread.

    Returns:
        Suggestions sorted highest priority first; ties keep the order
        accuracy, consistency, bias, extreme spread.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    suggestions = []

    if pattern.accuracy in (Rating.FAIR, Rating.NEEDS_WORK):
        suggestions.append(Suggestion(
            priority=SuggestionPriority.HIGH,
            category=SuggestionCategory.SIGHT_ALIGNMENT,
            title="Sight Alignment",
            description="Your group sits away from center. Focus on sight "
                        "alignment and confirm your zero.",
            drills=("Dry fire practice with focus on sight picture",
                    "Confirm zero at known distance"),
        ))

    if pattern.consistency is Rating.NEEDS_WORK:
        suggestions.append(Suggestion(
            priority=SuggestionPriority.HIGH,
            category=SuggestionCategory.HOLD_CONTROL,
            title="Hold Control",
            description=f"Shot spread is large: 90% of shots fall within a "
                        f"{metrics.average_group_size:.2f} diameter. Work on a "
                        f"steady hold and breathing.",
            drills=("Balance exercises", "Extended hold drills",
                    "Breathing rhythm practice"),
        ))
    elif pattern.consistency is Rating.FAIR:
        suggestions.append(Suggestion(
            priority=SuggestionPriority.MEDIUM,
            category=SuggestionCategory.HOLD_CONTROL,
            title="Improve Consistency",
            description="Good baseline consistency, with room to tighten.",
            drills=("Slow fire practice", "Focus on trigger control"),
        ))

    if pattern.bias is BiasCategory.OFF_CENTER:
        strong = metrics.offset > t.strong_bias_offset
        suggestions.append(Suggestion(
            priority=SuggestionPriority.HIGH if strong else SuggestionPriority.MEDIUM,
            category=SuggestionCategory.TRIGGER_CONTROL,
            title="Correct Directional Bias",
            description=_bias_text(pattern, metrics.confidence),
            drills=("Dry fire with wall drill", "Ball and dummy drill"),
        ))

    if metrics.average_extreme_spread > t.extreme_spread_max:
        suggestions.append(Suggestion(
            priority=SuggestionPriority.MEDIUM,
            category=SuggestionCategory.MENTAL_FOCUS,
            title="Shot Discipline",
            description="Large variation between best and worst shots. Focus "
                        "on a consistent pre-shot routine.",
            drills=tuple(DRILLS["extreme_spread"]),
        ))

    return tuple(sorted(suggestions, key=lambda s: s.priority, reverse=True))


def session_mix_insights(session_counts: dict[SessionType, int],
                         has_pressure_note: bool = False) -> tuple[str, ...]:
    """Notes on the balance of practice contexts and the amount of data.

    Args:
        session_counts: Targets per session type.
        has_pressure_note: Whether a pressure comparison is already shown;
                           the fallback note is only added without one.
    """
    free = session_counts.get(SessionType.FREE_PRACTICE, 0)
    training = session_counts.get(SessionType.COMPETITION_TRAINING, 0)
    competition = session_counts.get(SessionType.COMPETITION, 0)

    notes = []
    if free > MIX_FREE_PRACTICE_ONLY_MIN and training == 0 and competition == 0:
        notes.append(ADD_TRAINING)
    if competition >= MIX_COMPETITION_MIN and training < MIX_TRAINING_MIN:
        notes.append(BRIDGE_THE_GAP)
    if free + training + competition < MIX_SUFFICIENT_TARGETS:
        notes.append(MORE_DATA)
    if not notes and not has_pressure_note:
        notes.append(KEEP_GOING)
    return tuple(notes)


# =============================================================================
# Text helpers
# =============================================================================

def _as_metrics(current: Union[GroupResult, AggregatedMetrics]) -> AggregatedMetrics:
    """View a single-target result as one-target metrics."""
    if isinstance(current, AggregatedMetrics):
        return current
    if current.is_suppressed:
        return AggregatedMetrics(total_shots=current.shot_count,
                                 confidence=current.confidence,
                                 suppression_reason=current.suppression_reason)
    return AggregatedMetrics(
        average_mpi=current.mpi,
        average_group_radius=current.group_radius,
        outlier_rate=current.outlier_rate,
        outlier_count=current.outlier_count,
        total_shots=current.shot_count,
        session_count=1,
        confidence=current.confidence,
        average_std_dev=current.std_dev or 0.0,
        average_extreme_spread=current.extreme_spread or 0.0,
        average_group_size=current.group_size or 0.0,
    )


def _build_comparison(low: AggregatedMetrics,
                      high: AggregatedMetrics) -> PressureComparison:
    if high.pressure_level is not None:
        label = SessionType.from_pressure_level(high.pressure_level).display_name.lower()
    else:
        label = "higher"
    return PressureComparison(low=low, high=high, high_label=label)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _observation(metrics: AggregatedMetrics, pattern: PatternLabel,
                 single_target: bool) -> str:
    shots = _plural(metrics.total_shots, "shot")
    if single_target:
        scope = f"Your {shots}"
    else:
        scope = f"{shots} across {_plural(metrics.session_count, 'target')}"

    if pattern.tightness is Tightness.TIGHT:
        return f"{scope} form a tight cluster."
    if pattern.tightness is Tightness.MODERATE:
        return f"{scope} show a moderate spread."
    return f"{scope} are widely distributed."


def _hedge(text: str, confidence: Confidence) -> str:
    if confidence is Confidence.LOW:
        return f"Early read: {text}"
    return text


def _trend_text(metrics: AggregatedMetrics, t: Thresholds) -> Optional[str]:
    if len(metrics.radius_trend) < t.trend_min_points:
        return None
    if metrics.trend is TrendDirection.IMPROVING:
        return "Recent targets show tighter groups than earlier ones."
    if metrics.trend is TrendDirection.WORSENING:
        return "Recent targets show wider groups than earlier ones."
    return "Group size has been consistent across targets."


def _outlier_text(metrics: AggregatedMetrics) -> Optional[str]:
    count = metrics.outlier_count
    if count == 0:
        return None
    pct = metrics.outlier_percentage
    if pct < 10:
        return f"{_plural(count, 'shot')} landed outside the main group."
    if pct < 20:
        return f"{count} shots ({pct:.0f}%) fell outside your main group."
    return f"About {pct:.0f}% of shots landed away from the main group."


def _bias_text(pattern: PatternLabel, confidence: Confidence) -> Optional[str]:
    if pattern.bias is BiasCategory.CENTERED:
        return None
    phrase = pattern.direction.phrase
    if confidence is Confidence.LOW:
        return f"Shots may be drifting {phrase} - mark more shots to confirm."
    if pattern.severity is BiasSeverity.SIGNIFICANT:
        return f"Your average impact point is {phrase} of center."
    return f"Shots tend toward the {phrase} side of the target."

"""
Confidence grading for Marksman.

Reliability depends only on how many shots back a number, not on how
tight the group is.
"""

from typing import Optional

from marksman.models.shot import Confidence
from marksman.utils.config import DEFAULT_THRESHOLDS, Thresholds


def classify(shot_count: int, thresholds: Optional[Thresholds] = None) -> Confidence:
    """Grade reliability from sample size.

    Fewer than 5 shots is low, 5-14 is medium, 15 or more is high.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    if shot_count >= t.confidence_high_min_shots:
        return Confidence.HIGH
    if shot_count >= t.confidence_medium_min_shots:
        return Confidence.MEDIUM
    return Confidence.LOW


def explain(shot_count: int, session_count: int = 1,
            thresholds: Optional[Thresholds] = None) -> str:
    """Short display text explaining the confidence grade."""
    confidence = classify(shot_count, thresholds)
    targets = f"{session_count} target{'' if session_count == 1 else 's'}"

    if confidence is Confidence.HIGH:
        return f"Based on {shot_count} shots across {targets}"
    if confidence is Confidence.MEDIUM:
        return f"Based on {shot_count} shots - more practice will sharpen this picture"
    return f"Limited data ({shot_count} shots) - keep practicing for better insights"

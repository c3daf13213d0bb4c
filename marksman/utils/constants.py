"""
Analysis thresholds, session taxonomy, and coaching tables for Marksman.

All distances are in normalized target-radius units: 1.0 is the distance
from the target center to the nearest image edge.
"""

# =============================================================================
# Group Statistics
# =============================================================================

MIN_SHOTS_FOR_STATS = 2        # Below this the group is suppressed
OUTLIER_MULTIPLIER = 2.0       # distance > k × group radius = outlier
CEP50_PERCENTILE = 0.50
CEP90_PERCENTILE = 0.90

SUPPRESSION_INSUFFICIENT_DATA = "insufficient data"
SUPPRESSION_NO_DATA = "no data"

# =============================================================================
# Confidence Grading (by shot count)
# =============================================================================

CONFIDENCE_MEDIUM_MIN_SHOTS = 5
CONFIDENCE_HIGH_MIN_SHOTS = 15

# =============================================================================
# Pattern Labels
# =============================================================================

# Group radius buckets
TIGHT_GROUP_MAX = 0.15         # radius < this = tight
MODERATE_GROUP_MAX = 0.35      # radius <= this = moderate, above = wide

# |MPI| buckets
CENTERED_OFFSET_MAX = 0.10     # |MPI| < this = centered
SLIGHT_OFFSET_MAX = 0.15       # |MPI| <= this = slight, above = significant

# Minor axis joins the direction ("high-left") when it is at least this
# fraction of the major axis.
DIAGONAL_RATIO = 0.5

# Consistency (RMS spread) and accuracy (|MPI|) grades: upper bounds for
# excellent, good and fair; anything above is "needs work".
CONSISTENCY_LIMITS = (0.05, 0.10, 0.15)
ACCURACY_LIMITS = (0.05, 0.10, 0.20)

EXTREME_SPREAD_MAX = 0.40      # > this = shot discipline drills
STRONG_BIAS_OFFSET = 0.20      # |MPI| > this = high-priority bias suggestion

# =============================================================================
# Trends & Aggregation
# =============================================================================

TREND_MIN_POINTS = 4
TREND_CHANGE_RATIO = 0.15      # ±15% between half means

# =============================================================================
# Insights
# =============================================================================

PRESSURE_WIDEN_PCT = 15.0      # > this = groups widen under pressure
PRESSURE_TIGHTEN_PCT = -10.0   # < this = tighter under pressure
HIGH_OUTLIER_RATE = 0.15       # > this fraction of shots = trigger-control drills

# Session mix (counts of targets in the filtered history)
MIX_FREE_PRACTICE_ONLY_MIN = 10    # > this with no pressured targets = add training
MIX_COMPETITION_MIN = 5            # >= this competitions ...
MIX_TRAINING_MIN = 3               # ... with fewer training targets = bridge the gap
MIX_SUFFICIENT_TARGETS = 10        # < this = more data needed

# =============================================================================
# Session Types
# =============================================================================

# name: (pressure level, display name, description)
SESSION_TYPES = {
    "free_practice": (
        1, "Free Practice", "Relaxed practice with no scoring pressure",
    ),
    "competition_training": (
        2, "Competition Training",
        "Practice under simulated competition conditions",
    ),
    "competition": (
        3, "Competition", "Actual competition scoring",
    ),
}

# =============================================================================
# Drill Table
# =============================================================================

# Keyed by the threshold that fired. Order within a list is display order.
DRILLS = {
    "wide": [
        "Stability hold drill",
        "Balance and stance check",
    ],
    "moderate": [
        "Develop a shot routine checklist",
        "Breathing and settle drill",
    ],
    "tight_centered": [
        "Maintain your current routine",
    ],
    "off_center": [
        "Dry fire practice with focus on sight picture",
        "Natural point of aim check",
    ],
    "high_outlier_rate": [
        "Smooth trigger control practice",
        "Ball and dummy drill",
    ],
    "extreme_spread": [
        "Develop consistent routine",
        "Mental rehearsal",
    ],
}

# Order in which drill groups are emitted
DRILL_PRIORITY = [
    "wide",
    "moderate",
    "tight_centered",
    "off_center",
    "high_outlier_rate",
    "extreme_spread",
]

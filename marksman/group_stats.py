"""
Group statistics engine for Marksman.

Computes, for one target:
  - Mean point of impact (MPI): per-axis centroid of all shots
  - Group radius: mean distance from each shot to the MPI
  - Outliers: shots further than OUTLIER_MULTIPLIER × group radius
  - Supporting spread measures: RMS spread, extreme spread, CEP50/CEP90

MPI and radius always use every shot. Outliers are reported alongside,
never filtered out, so the headline number does not jump when one shot
crosses the outlier line.
"""

import logging
from typing import Optional

import numpy as np

from marksman.confidence import classify
from marksman.models.shot import GroupResult, NormalizedShot
from marksman.utils.config import DEFAULT_THRESHOLDS, Thresholds
from marksman.utils.constants import (
    CEP50_PERCENTILE,
    CEP90_PERCENTILE,
    MIN_SHOTS_FOR_STATS,
    SUPPRESSION_INSUFFICIENT_DATA,
)

logger = logging.getLogger(__name__)


def analyze(shots: list[NormalizedShot],
            thresholds: Optional[Thresholds] = None) -> GroupResult:
    """Analyze one target's group.

    Args:
        shots: Normalized shot positions.
        thresholds: Calibration overrides (defaults from constants).

    Returns:
        GroupResult. With fewer than 2 shots the result is suppressed and
        carries no MPI or radius.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    count = len(shots)
    confidence = classify(count, t)

    if count < MIN_SHOTS_FOR_STATS:
        return GroupResult(
            shot_count=count,
            confidence=confidence,
            suppression_reason=SUPPRESSION_INSUFFICIENT_DATA,
        )

    points = np.array([(s.u, s.v) for s in shots], dtype=float)
    center = points.mean(axis=0)
    distances = np.linalg.norm(points - center, axis=1)
    radius = float(distances.mean())

    limit = t.outlier_multiplier * radius
    outliers = tuple(int(i) for i in np.flatnonzero(distances > limit))

    if outliers:
        logger.debug(f"{len(outliers)} of {count} shots flagged as outliers")

    return GroupResult(
        shot_count=count,
        confidence=confidence,
        mpi=NormalizedShot(u=float(center[0]), v=float(center[1])),
        group_radius=radius,
        outlier_indices=outliers,
        std_dev=float(np.sqrt(np.mean(distances ** 2))),
        extreme_spread=_extreme_spread(points),
        cep50=_cep(distances, CEP50_PERCENTILE),
        cep90=_cep(distances, CEP90_PERCENTILE),
    )


# =============================================================================
# Spread helpers
# =============================================================================

def _extreme_spread(points: np.ndarray) -> float:
    """Largest distance between any two shots."""
    diffs = points[:, None, :] - points[None, :, :]
    return float(np.linalg.norm(diffs, axis=2).max())


def _cep(distances: np.ndarray, percentile: float) -> float:
    """Distance from the MPI that covers the given share of shots."""
    ordered = np.sort(distances)
    index = min(int(len(ordered) * percentile), len(ordered) - 1)
    return float(ordered[index])

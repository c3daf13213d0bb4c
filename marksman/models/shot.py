"""
Data models for marked shots and single-target analysis in Marksman.

Shot: Hole position as marked on the photo (pixels).
NormalizedShot: Hole position relative to the target center.
GroupResult: Statistics for one target's group.
StoredTargetPattern: Analyzed target kept in history.
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from marksman.models.session import SessionType, local_naive


class Confidence(str, Enum):
    """Statistical reliability of an analysis, graded by sample size."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Shot:
    """A marked hole in image pixel coordinates (origin top-left, y down)."""
    x: float
    y: float


@dataclass(frozen=True)
class NormalizedShot:
    """A hole in target-relative unit coordinates.

    Attributes:
        u: Horizontal offset from center (positive = right).
        v: Vertical offset from center (positive = low, image convention).

    A distance of 1.0 from the origin is one target radius.
    """
    u: float
    v: float

    @property
    def radial_distance(self) -> float:
        return math.hypot(self.u, self.v)

    @property
    def angle_degrees(self) -> float:
        """Angle in degrees, 0 = right, 90 = high (v is flipped)."""
        return math.degrees(math.atan2(-self.v, self.u))

    def distance_to(self, other: "NormalizedShot") -> float:
        return math.hypot(self.u - other.u, self.v - other.v)


@dataclass(frozen=True)
class GroupResult:
    """Analysis of one target's shots.

    Attributes:
        shot_count: Number of shots analyzed.
        confidence: Reliability grade from the shot count.
        mpi: Mean point of impact (None when suppressed).
        group_radius: Mean distance from each shot to the MPI
                      (None when suppressed).
        outlier_indices: Indices into the analyzed shot list of shots
                         further than the outlier multiplier × radius.
        std_dev: RMS distance from the MPI.
        extreme_spread: Largest distance between any two shots.
        cep50: Radius around the MPI containing half of the shots.
        cep90: Radius around the MPI containing 90% of the shots.
        suppression_reason: Why statistics were withheld, if they were.
    """
    shot_count: int
    confidence: Confidence
    mpi: Optional[NormalizedShot] = None
    group_radius: Optional[float] = None
    outlier_indices: tuple[int, ...] = ()
    std_dev: Optional[float] = None
    extreme_spread: Optional[float] = None
    cep50: Optional[float] = None
    cep90: Optional[float] = None
    suppression_reason: Optional[str] = None

    @property
    def is_suppressed(self) -> bool:
        return self.suppression_reason is not None

    @property
    def outlier_count(self) -> int:
        return len(self.outlier_indices)

    @property
    def outlier_rate(self) -> float:
        if self.shot_count == 0:
            return 0.0
        return self.outlier_count / self.shot_count

    @property
    def group_size(self) -> Optional[float]:
        """Diameter holding 90% of the shots (2 × CEP90)."""
        if self.cep90 is None:
            return None
        return self.cep90 * 2


@dataclass(frozen=True)
class StoredTargetPattern:
    """An analyzed target kept in history.

    Immutable once created. The id doubles as the key for the target
    thumbnail, which is stored separately. Timestamps are kept as naive
    local time; timezone-aware values are converted on construction.
    """
    session_type: SessionType
    normalized_shots: tuple[NormalizedShot, ...]
    mpi: NormalizedShot
    group_radius: float
    outlier_count: int
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        object.__setattr__(self, "timestamp", local_naive(self.timestamp))

    @property
    def shot_count(self) -> int:
        return len(self.normalized_shots)

    @property
    def pressure_level(self) -> int:
        return self.session_type.pressure_level

    @classmethod
    def from_result(
        cls,
        result: GroupResult,
        shots: list[NormalizedShot],
        session_type: SessionType,
        timestamp: Optional[datetime] = None,
    ) -> Optional["StoredTargetPattern"]:
        """Build a history entry from an analysis; None if it was suppressed."""
        if result.is_suppressed:
            return None
        return cls(
            session_type=session_type,
            normalized_shots=tuple(shots),
            mpi=result.mpi,
            group_radius=result.group_radius,
            outlier_count=result.outlier_count,
            timestamp=timestamp or datetime.now(),
        )

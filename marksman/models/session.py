"""
Session context and history filters for Marksman.

A session type tags every stored target with the practice context it was
shot in, so history can be compared across pressure levels.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from marksman.utils.constants import SESSION_TYPES


def local_naive(moment: datetime) -> datetime:
    """Express a timestamp as naive local time.

    History compares timestamps against local midnights, so aware values
    are converted to the local zone and their tzinfo dropped.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


class SessionType(str, Enum):
    """Practice context, ordered by pressure level (1 = lowest stress)."""
    FREE_PRACTICE = "free_practice"
    COMPETITION_TRAINING = "competition_training"
    COMPETITION = "competition"

    @property
    def pressure_level(self) -> int:
        return SESSION_TYPES[self.value][0]

    @property
    def display_name(self) -> str:
        return SESSION_TYPES[self.value][1]

    @property
    def description(self) -> str:
        return SESSION_TYPES[self.value][2]

    @classmethod
    def by_pressure(cls) -> list["SessionType"]:
        """All session types, lowest pressure first."""
        return sorted(cls, key=lambda t: t.pressure_level)

    @classmethod
    def from_pressure_level(cls, level: int) -> "SessionType":
        for session_type in cls:
            if session_type.pressure_level == level:
                return session_type
        raise ValueError(f"Unknown pressure level: {level}")


class DateFilter(str, Enum):
    """Time window selector for history queries."""
    LAST_TARGET = "last_target"
    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    ALL_TIME = "all_time"

    def window_start(self, now: Optional[datetime] = None) -> Optional[datetime]:
        """Earliest timestamp included by this filter.

        Returns None for filters that are not bounded by a start time
        (ALL_TIME, and LAST_TARGET which is resolved by the store).
        Weeks start on Monday.
        """
        now = local_naive(now) if now else datetime.now()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

        if self is DateFilter.TODAY:
            return midnight
        if self is DateFilter.THIS_WEEK:
            return midnight - timedelta(days=now.weekday())
        if self is DateFilter.THIS_MONTH:
            return midnight.replace(day=1)
        return None

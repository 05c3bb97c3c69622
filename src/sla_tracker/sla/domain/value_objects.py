"""
SLA Value Objects
==================

Immutable value objects for the SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from sla_tracker.config import Priority, SLAClockState


def to_utc(instant: datetime) -> datetime:
    """
    Normalize an aware instant to UTC; naive instants are returned unchanged.

    Aware datetimes sharing a tzinfo are compared and subtracted on wall-clock
    time by Python, so every comparison in the domain goes through UTC.
    """
    if instant.tzinfo is None or instant.utcoffset() is None:
        return instant
    return instant.astimezone(timezone.utc)


class SLAPolicy:
    """
    Fixed mapping from ticket priority to resolution window.

    Stateless utility class - all SLA deadline arithmetic lives here.
    """

    SLA_HOURS: Dict[str, int] = {
        Priority.CRITICAL.value: 4,
        Priority.HIGH.value: 8,
        Priority.MEDIUM.value: 24,
        Priority.LOW.value: 72,
    }
    DEFAULT_SLA_HOURS = 24

    @classmethod
    def sla_hours(cls, priority: Any) -> int:
        """
        Get the SLA window in hours for a priority.

        Unknown values fall back to DEFAULT_SLA_HOURS instead of failing.
        This masks bad input; ticket creation validates priorities before
        it gets here.
        """
        if isinstance(priority, Priority):
            priority = priority.value
        try:
            return cls.SLA_HOURS.get(priority, cls.DEFAULT_SLA_HOURS)
        except TypeError:
            # unhashable input
            return cls.DEFAULT_SLA_HOURS

    @classmethod
    def compute_deadline(cls, created_at: datetime, priority: Any) -> datetime:
        """
        Calculate the SLA deadline for a ticket.

        Args:
            created_at: When the ticket was created
            priority: Ticket priority

        Returns:
            The deadline, in the same timezone as created_at. Aware instants
            are shifted in UTC so the window is exact across DST changes.
        """
        delta = timedelta(hours=cls.sla_hours(priority))
        if created_at.tzinfo is None or created_at.utcoffset() is None:
            return created_at + delta
        return (created_at.astimezone(timezone.utc) + delta).astimezone(created_at.tzinfo)


@dataclass(frozen=True)
class Duration:
    """Elapsed time as whole hours plus remaining whole minutes (floored)."""
    hours: int
    minutes: int

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> "Duration":
        total_seconds = abs(delta) // timedelta(seconds=1)
        return cls(hours=total_seconds // 3600, minutes=(total_seconds % 3600) // 60)

    @classmethod
    def between(cls, start: datetime, end: datetime) -> "Duration":
        """Absolute distance between two instants."""
        return cls.from_timedelta(to_utc(end) - to_utc(start))

    @property
    def as_hours(self) -> float:
        """Fractional hours, as used by the average resolution KPI."""
        return self.hours + self.minutes / 60

    def to_dict(self) -> dict:
        return {"hours": self.hours, "minutes": self.minutes}


@dataclass(frozen=True)
class SLAClock:
    """
    A ticket's SLA duration together with how it should be read.

    `remaining` and `overdue` measure the distance to the deadline;
    `resolved` carries the resolution time.
    """
    state: SLAClockState
    duration: Duration

    def to_dict(self) -> dict:
        return {"state": self.state.value, "duration": self.duration.to_dict()}

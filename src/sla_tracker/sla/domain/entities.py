"""
SLA Domain Entities
====================

Pure Python domain entities for ticket lifecycle tracking.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from sla_tracker.config import Category, Priority, TicketStatus
from sla_tracker.core import DomainException
from sla_tracker.sla.domain.value_objects import to_utc


@dataclass(frozen=True)
class Ticket:
    """
    Ticket entity representing a support ticket.

    Tickets are immutable values: a status change produces a new Ticket
    (see `with_status`) which the store swaps in atomically. Breach status
    is deliberately not a field; it depends on the evaluation instant.
    """

    # Core attributes
    id: str
    title: str
    priority: Priority
    category: Category
    status: TicketStatus

    # Timestamps
    created_at: datetime
    sla_deadline: datetime

    # Optional attributes
    description: str = ""
    assignee: str = ""
    resolved_at: Optional[datetime] = None

    def __post_init__(self):
        """Coerce enum fields and validate ticket invariants."""
        try:
            object.__setattr__(self, "priority", Priority(self.priority))
            object.__setattr__(self, "category", Category(self.category))
            object.__setattr__(self, "status", TicketStatus(self.status))
        except ValueError as e:
            raise DomainException(str(e), {"ticket_id": self.id})

        if to_utc(self.sla_deadline) < to_utc(self.created_at):
            raise DomainException(
                "sla_deadline cannot be before created_at",
                {"ticket_id": self.id}
            )

        if (self.resolved_at is not None) != (self.status == TicketStatus.RESOLVED):
            raise DomainException(
                "resolved_at must be set if and only if the ticket is resolved",
                {"ticket_id": self.id, "status": self.status.value}
            )

    @property
    def is_resolved(self) -> bool:
        """Check if ticket has been resolved."""
        return self.status == TicketStatus.RESOLVED

    @property
    def is_assigned(self) -> bool:
        return bool(self.assignee and self.assignee.strip())

    def with_status(self, status: TicketStatus, timestamp: datetime) -> "Ticket":
        """
        Return a copy moved to `status`.

        Resolving stamps resolved_at with `timestamp` (also when the ticket
        is already resolved); any other status clears it.
        """
        resolved_at = timestamp if status == TicketStatus.RESOLVED else None
        return replace(self, status=status, resolved_at=resolved_at)


@dataclass(frozen=True)
class KPISummary:
    """
    Fleet-wide ticket statistics at one evaluation instant.

    sla_compliance is 100.0 when no ticket is resolved; that means
    "no data", not "fully compliant".
    """

    total: int
    open: int
    in_progress: int
    resolved: int
    breached: int
    sla_compliance: float
    avg_resolution_time: float

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "total": self.total,
            "open": self.open,
            "in_progress": self.in_progress,
            "resolved": self.resolved,
            "breached": self.breached,
            "sla_compliance": self.sla_compliance,
            "avg_resolution_time": self.avg_resolution_time,
        }

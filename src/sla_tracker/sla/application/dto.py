"""
SLA Application DTOs
=====================

Data Transfer Objects for the API and persistence boundaries.

These Pydantic models handle serialization/deserialization and validation.
Responses carry structured values only (hour/minute pairs, percentages);
formatting them for display is the client's job.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from sla_tracker.sla.domain import (
    Duration,
    KPISummary,
    SLAAggregator,
    SLAClock,
    Ticket,
)


# ========== Type Aliases for Literals ==========
PriorityStr = Literal["critical", "high", "medium", "low"]
CategoryStr = Literal["technical", "access", "hardware", "software", "network"]
TicketStatusStr = Literal["open", "in_progress", "resolved"]
TicketFilterStr = Literal["all", "open", "in_progress", "resolved", "breached"]
SLAClockStateStr = Literal["remaining", "overdue", "resolved"]


# ========== Request DTOs ==========

class TicketCreateDTO(BaseModel):
    """DTO for creating a single ticket."""
    title: str = Field(..., description="Ticket title (must not be blank)")
    description: str = Field(default="", description="Ticket description")
    priority: PriorityStr = Field(default="medium", description="Ticket priority")
    category: CategoryStr = Field(default="technical", description="Ticket category")
    assignee: str = Field(default="", description="Assigned staff member, empty if unassigned")


class TicketStatusUpdateDTO(BaseModel):
    """DTO for moving a ticket through its lifecycle."""
    status: TicketStatusStr = Field(..., description="Target status")


# ========== Response DTOs ==========

class DurationResponse(BaseModel):
    """Whole hours plus remaining minutes."""
    hours: int = Field(..., ge=0)
    minutes: int = Field(..., ge=0, lt=60)

    @classmethod
    def from_domain(cls, duration: Duration) -> "DurationResponse":
        return cls(hours=duration.hours, minutes=duration.minutes)


class SLAClockResponse(BaseModel):
    """Distance to the deadline (or resolution time) and how to read it."""
    state: SLAClockStateStr
    duration: DurationResponse

    @classmethod
    def from_domain(cls, clock: SLAClock) -> "SLAClockResponse":
        return cls(state=clock.state.value, duration=DurationResponse.from_domain(clock.duration))


class TicketResponse(BaseModel):
    """Response model for a ticket with its SLA fields evaluated at request time."""
    id: str
    title: str
    description: str
    priority: PriorityStr
    category: CategoryStr
    assignee: str
    status: TicketStatusStr
    created_at: datetime
    sla_deadline: datetime
    resolved_at: Optional[datetime] = None

    # Derived, never stored
    is_breached: bool = Field(..., description="Whether the SLA deadline was missed")
    sla_clock: SLAClockResponse = Field(..., description="Remaining/overdue/resolution time")
    resolution_time: Optional[DurationResponse] = Field(None, description="Set for resolved tickets")

    @classmethod
    def from_domain(cls, ticket: Ticket, now: datetime) -> "TicketResponse":
        resolution_time = SLAAggregator.resolution_time(ticket)
        return cls(
            id=ticket.id,
            title=ticket.title,
            description=ticket.description,
            priority=ticket.priority.value,
            category=ticket.category.value,
            assignee=ticket.assignee,
            status=ticket.status.value,
            created_at=ticket.created_at,
            sla_deadline=ticket.sla_deadline,
            resolved_at=ticket.resolved_at,
            is_breached=SLAAggregator.is_breached(ticket, now),
            sla_clock=SLAClockResponse.from_domain(SLAAggregator.sla_clock(ticket, now)),
            resolution_time=DurationResponse.from_domain(resolution_time) if resolution_time else None,
        )


class KPISummaryResponse(BaseModel):
    """KPI summary over all tickets."""
    total: int
    open: int
    in_progress: int
    resolved: int
    breached: int
    sla_compliance: float = Field(..., description="Percent of resolved tickets within SLA; 100 when none resolved")
    avg_resolution_time: float = Field(..., description="Mean resolution time in hours; 0 when none resolved")

    @classmethod
    def from_domain(cls, summary: KPISummary) -> "KPISummaryResponse":
        return cls(**summary.to_dict())


class TicketListResponse(BaseModel):
    """Response model for a filtered ticket list."""
    tickets: List[TicketResponse]
    total_count: int = Field(..., description="Number of tickets in this view")
    filter: TicketFilterStr = "all"


class DashboardResponse(BaseModel):
    """Filtered tickets plus KPIs computed over the full collection."""
    tickets: List[TicketResponse]
    total_count: int
    filter: TicketFilterStr = "all"
    kpis: KPISummaryResponse
    evaluated_at: datetime


# ========== Persistence DTOs ==========

class TicketEntityDTO(BaseModel):
    """
    Stored form of a ticket.

    Holds only the ticket's own fields; breach status and durations are
    recomputed after loading.
    """
    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    priority: PriorityStr
    category: CategoryStr
    assignee: str = ""
    status: TicketStatusStr
    created_at: datetime
    sla_deadline: datetime
    resolved_at: Optional[datetime] = None

    def to_domain(self) -> Ticket:
        """Convert to domain entity."""
        return Ticket(
            id=self.id,
            title=self.title,
            description=self.description,
            priority=self.priority,
            category=self.category,
            assignee=self.assignee,
            status=self.status,
            created_at=self.created_at,
            sla_deadline=self.sla_deadline,
            resolved_at=self.resolved_at,
        )

    @classmethod
    def from_domain(cls, ticket: Ticket) -> "TicketEntityDTO":
        """Create from domain entity."""
        return cls(
            id=ticket.id,
            title=ticket.title,
            description=ticket.description,
            priority=ticket.priority.value,
            category=ticket.category.value,
            assignee=ticket.assignee,
            status=ticket.status.value,
            created_at=ticket.created_at,
            sla_deadline=ticket.sla_deadline,
            resolved_at=ticket.resolved_at,
        )


class TicketSnapshotDTO(BaseModel):
    """Full ticket collection as written to storage, newest first."""
    version: int = 1
    saved_at: Optional[datetime] = None
    tickets: List[TicketEntityDTO] = Field(default_factory=list)

"""
SLA Application Layer
======================

Application layer for ticket tracking.

Contains:
- Services: Orchestrate the store, aggregator and repositories
- DTOs: Data transfer objects for API and storage serialization

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from sla_tracker.sla.application.dto import (
    TicketCreateDTO,
    TicketStatusUpdateDTO,
    DurationResponse,
    SLAClockResponse,
    TicketResponse,
    KPISummaryResponse,
    TicketListResponse,
    DashboardResponse,
    TicketEntityDTO,
    TicketSnapshotDTO,
)
from sla_tracker.sla.application.services import (
    TicketService,
    ITicketRepository,
)

__all__ = [
    # DTOs
    "TicketCreateDTO",
    "TicketStatusUpdateDTO",
    "DurationResponse",
    "SLAClockResponse",
    "TicketResponse",
    "KPISummaryResponse",
    "TicketListResponse",
    "DashboardResponse",
    "TicketEntityDTO",
    "TicketSnapshotDTO",
    # Services
    "TicketService",
    # Repository Interfaces
    "ITicketRepository",
]

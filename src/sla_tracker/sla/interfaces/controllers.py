"""
SLA Controllers (API Routes)
=============================

FastAPI routes for ticket tracking and the SLA dashboard.

Controllers are thin - they delegate to the TicketService. Every derived
value (breach, remaining time, KPIs) is evaluated once per request at the
same instant.
"""

from fastapi import APIRouter, Depends, Query, Request, Response, status

from sla_tracker.sla.application import (
    DashboardResponse,
    KPISummaryResponse,
    TicketCreateDTO,
    TicketListResponse,
    TicketResponse,
    TicketService,
    TicketStatusUpdateDTO,
)
from sla_tracker.sla.application.dto import TicketFilterStr
from sla_tracker.shared.infrastructure.logging import get_context_logger

router = APIRouter(tags=["Tickets"])


# ========== Example payloads for Swagger ==========

TICKET_CREATE_EXAMPLE = {
    "title": "VPN drops every few minutes",
    "description": "Remote staff lose the VPN tunnel roughly every 5 minutes.",
    "priority": "high",
    "category": "network",
    "assignee": "Jane Doe"
}

DASHBOARD_RESPONSE_EXAMPLE = {
    "tickets": [],
    "total_count": 0,
    "filter": "all",
    "kpis": {
        "total": 0,
        "open": 0,
        "in_progress": 0,
        "resolved": 0,
        "breached": 0,
        "sla_compliance": 100.0,
        "avg_resolution_time": 0.0
    },
    "evaluated_at": "2024-01-15T10:00:00Z"
}


# ========== Dependencies ==========

def get_ticket_service(request: Request) -> TicketService:
    """Get the ticket service owned by this application instance."""
    return request.app.state.ticket_service


# ========== Route Handlers ==========

@router.post(
    "/tickets",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a ticket",
    description="""
    Open a new ticket. The SLA deadline is derived from the priority:

    | Priority | SLA |
    |----------|-----|
    | critical | 4h  |
    | high     | 8h  |
    | medium   | 24h |
    | low      | 72h |

    A blank title is rejected with 422.
    """,
    responses={201: {"content": {"application/json": {"example": TICKET_CREATE_EXAMPLE}}}}
)
def create_ticket(
    payload: TicketCreateDTO,
    request: Request,
    service: TicketService = Depends(get_ticket_service)
):
    logger = get_context_logger(__name__, getattr(request.state, "correlation_id", None))
    ticket = service.create_ticket(payload)
    logger.debug("Ticket created via API", extra={"ticket_id": ticket.id})
    return TicketResponse.from_domain(ticket, service.now())


@router.get(
    "/tickets",
    response_model=TicketListResponse,
    summary="List tickets",
    description="List tickets newest first. `breached` is evaluated at request time."
)
def list_tickets(
    ticket_filter: TicketFilterStr = Query("all", alias="filter", description="all, open, in_progress, resolved or breached"),
    service: TicketService = Depends(get_ticket_service)
):
    now = service.now()
    tickets = service.list_tickets(ticket_filter, now)
    return TicketListResponse(
        tickets=[TicketResponse.from_domain(t, now) for t in tickets],
        total_count=len(tickets),
        filter=ticket_filter,
    )


@router.get(
    "/tickets/{ticket_id}",
    response_model=TicketResponse,
    summary="Get a ticket",
    responses={404: {"description": "Ticket not found"}}
)
def get_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service)
):
    return TicketResponse.from_domain(service.get_ticket(ticket_id), service.now())


@router.patch(
    "/tickets/{ticket_id}/status",
    response_model=TicketResponse,
    summary="Change ticket status",
    description="""
    Move a ticket to `open`, `in_progress` or `resolved`.

    Resolving stamps `resolved_at` (again, if already resolved); any other
    status clears it.
    """,
    responses={404: {"description": "Ticket not found"}}
)
def update_ticket_status(
    ticket_id: str,
    payload: TicketStatusUpdateDTO,
    service: TicketService = Depends(get_ticket_service)
):
    ticket = service.transition_ticket(ticket_id, payload.status)
    return TicketResponse.from_domain(ticket, service.now())


@router.delete(
    "/tickets/{ticket_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a ticket",
    description="Deleting an unknown ticket is not an error."
)
def delete_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service)
):
    service.delete_ticket(ticket_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Get SLA dashboard",
    description="""
    Filtered ticket view plus KPIs computed over **all** tickets.

    `sla_compliance` is 100 when no ticket has been resolved yet; read it
    as "no data" in that case.
    """,
    responses={200: {"content": {"application/json": {"example": DASHBOARD_RESPONSE_EXAMPLE}}}}
)
def get_dashboard(
    ticket_filter: TicketFilterStr = Query("all", alias="filter"),
    service: TicketService = Depends(get_ticket_service)
):
    now = service.now()
    tickets = service.list_tickets(ticket_filter, now)
    return DashboardResponse(
        tickets=[TicketResponse.from_domain(t, now) for t in tickets],
        total_count=len(tickets),
        filter=ticket_filter,
        kpis=KPISummaryResponse.from_domain(service.summary(now)),
        evaluated_at=now,
    )


# Export router for inclusion in main app
ticket_router = router

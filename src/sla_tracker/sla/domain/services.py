"""
SLA Domain Services
===================

Stateless breach detection and KPI aggregation.

Everything here is a pure function of a ticket collection and an
evaluation instant; nothing is cached on the tickets.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Union

from sla_tracker.config import VALID_FILTERS, SLAClockState, TicketFilter, TicketStatus
from sla_tracker.sla.domain.entities import KPISummary, Ticket
from sla_tracker.sla.domain.value_objects import Duration, SLAClock, to_utc


def round_half_up(value: float, places: int = 1) -> float:
    """Round to `places` decimals, halves away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


class SLAAggregator:
    """
    Pure functions for SLA evaluation.

    Stateless utility class - all breach and KPI logic in one place.
    """

    @staticmethod
    def is_breached(ticket: Ticket, now: datetime) -> bool:
        """
        Check whether a ticket missed its deadline.

        Resolved tickets are judged on resolved_at, open ones on `now`;
        both must be strictly after the deadline.
        """
        if ticket.status == TicketStatus.RESOLVED:
            return to_utc(ticket.resolved_at) > to_utc(ticket.sla_deadline)
        return to_utc(now) > to_utc(ticket.sla_deadline)

    @staticmethod
    def resolution_time(ticket: Ticket) -> Optional[Duration]:
        """Time from creation to resolution, or None while unresolved."""
        if ticket.resolved_at is None:
            return None
        return Duration.between(ticket.created_at, ticket.resolved_at)

    @classmethod
    def time_remaining(cls, ticket: Ticket, now: datetime) -> Duration:
        """
        Distance to the deadline for unresolved tickets (remaining or
        overdue), resolution time for resolved ones.
        """
        if ticket.is_resolved:
            return cls.resolution_time(ticket)
        return Duration.between(now, ticket.sla_deadline)

    @classmethod
    def sla_clock(cls, ticket: Ticket, now: datetime) -> SLAClock:
        if ticket.is_resolved:
            state = SLAClockState.RESOLVED
        elif cls.is_breached(ticket, now):
            state = SLAClockState.OVERDUE
        else:
            state = SLAClockState.REMAINING
        return SLAClock(state=state, duration=cls.time_remaining(ticket, now))

    @classmethod
    def filter_tickets(
        cls,
        tickets: Iterable[Ticket],
        predicate: Union[TicketFilter, str],
        now: datetime
    ) -> List[Ticket]:
        """
        Select tickets for a view, preserving order.

        `breached` is evaluated at `now`; unknown predicates select all.
        """
        predicate = TicketFilter(predicate) if predicate in VALID_FILTERS else TicketFilter.ALL

        if predicate == TicketFilter.ALL:
            return list(tickets)
        if predicate == TicketFilter.BREACHED:
            return [t for t in tickets if cls.is_breached(t, now)]

        status = TicketStatus(predicate.value)
        return [t for t in tickets if t.status == status]

    @classmethod
    def summarize(cls, tickets: Iterable[Ticket], now: datetime) -> KPISummary:
        """
        Compute KPIs over the full collection at `now`.

        Returns:
            KPISummary with counts, compliance percentage and average
            resolution hours (both rounded to one decimal)
        """
        tickets = list(tickets)
        resolved = [t for t in tickets if t.status == TicketStatus.RESOLVED]

        if resolved:
            compliant = sum(1 for t in resolved if not cls.is_breached(t, now))
            sla_compliance = round_half_up(compliant / len(resolved) * 100)
            total_hours = sum(cls.resolution_time(t).as_hours for t in resolved)
            avg_resolution_time = round_half_up(total_hours / len(resolved))
        else:
            sla_compliance = 100.0
            avg_resolution_time = 0.0

        return KPISummary(
            total=len(tickets),
            open=sum(1 for t in tickets if t.status == TicketStatus.OPEN),
            in_progress=sum(1 for t in tickets if t.status == TicketStatus.IN_PROGRESS),
            resolved=len(resolved),
            breached=sum(1 for t in tickets if cls.is_breached(t, now)),
            sla_compliance=sla_compliance,
            avg_resolution_time=avg_resolution_time,
        )

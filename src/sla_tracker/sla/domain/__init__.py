"""
SLA Domain Layer
================

Domain layer for ticket lifecycle and SLA accounting.

Contains:
- Entities: Core business objects (Ticket, KPISummary)
- Value Objects: Immutable values and policy (SLAPolicy, Duration, SLAClock)
- Domain Services: Stateless business logic (SLAAggregator)
- Store: The ordered ticket collection (TicketStore)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from sla_tracker.sla.domain.entities import Ticket, KPISummary
from sla_tracker.sla.domain.value_objects import (
    SLAPolicy,
    Duration,
    SLAClock,
    to_utc,
)
from sla_tracker.sla.domain.services import SLAAggregator, round_half_up
from sla_tracker.sla.domain.store import TicketStore, Clock, utc_now

__all__ = [
    # Entities
    "Ticket",
    "KPISummary",
    # Value Objects & Services
    "SLAPolicy",
    "Duration",
    "SLAClock",
    "SLAAggregator",
    "round_half_up",
    "to_utc",
    # Store
    "TicketStore",
    "Clock",
    "utc_now",
]

"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for ticket persistence:
- Models: SQLAlchemy ORM models
- Repositories: JSON file, in-memory and SQL snapshot repositories
"""

from sla_tracker.sla.infrastructure.models import TicketModel
from sla_tracker.sla.infrastructure.repositories import (
    InMemoryTicketRepository,
    JSONFileTicketRepository,
    SQLAlchemyTicketRepository,
    serialize_tickets,
    deserialize_tickets,
)

__all__ = [
    "TicketModel",
    "InMemoryTicketRepository",
    "JSONFileTicketRepository",
    "SQLAlchemyTicketRepository",
    "serialize_tickets",
    "deserialize_tickets",
]

"""
Ticket Store
============

In-memory, ordered ticket collection enforcing the ticket lifecycle.

The store is an explicit object owned by its caller; persistence is left to
whoever drives it (see TicketService). Mutations are serialized so a ticket
is never observed with a status and a stale resolved_at.
"""

import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Type
from uuid import uuid4

from sla_tracker.config import (
    VALID_CATEGORIES,
    VALID_PRIORITIES,
    VALID_STATUSES,
    Category,
    Priority,
    TicketStatus,
)
from sla_tracker.core import (
    DomainException,
    ResourceNotFoundException,
    ValidationException,
)
from sla_tracker.sla.domain.entities import Ticket
from sla_tracker.sla.domain.value_objects import SLAPolicy, to_utc

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_ticket_id() -> str:
    return str(uuid4())


def _parse_choice(enum_type: Type[Enum], value: Any, field_name: str, allowed: List[str]):
    if value not in allowed:
        raise ValidationException(
            f"{field_name} must be one of {allowed}",
            {"field": field_name, "value": str(value)}
        )
    return enum_type(value)


class TicketStore:
    """
    Newest-first collection of tickets.

    Args:
        clock: Returns the current instant; defaults to UTC wall time
        id_factory: Returns a fresh ticket id; defaults to uuid4 text
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        id_factory: Optional[Callable[[], str]] = None
    ):
        self._clock = clock or utc_now
        self._id_factory = id_factory or new_ticket_id
        self._tickets: List[Ticket] = []
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        """Lock serializing mutations; held by callers that must persist atomically."""
        return self._lock

    def now(self) -> datetime:
        return to_utc(self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._tickets)

    def __contains__(self, ticket_id: object) -> bool:
        with self._lock:
            return self._index_of(ticket_id) >= 0

    def _index_of(self, ticket_id: object) -> int:
        for index, ticket in enumerate(self._tickets):
            if ticket.id == ticket_id:
                return index
        return -1

    def create(
        self,
        title: str,
        description: Optional[str] = "",
        priority: Any = Priority.MEDIUM,
        category: Any = Category.TECHNICAL,
        assignee: Optional[str] = ""
    ) -> Ticket:
        """
        Open a new ticket and put it at the front of the collection.

        Raises:
            ValidationException: blank title, or unknown priority/category
        """
        if not title or not title.strip():
            raise ValidationException("Ticket title cannot be empty", {"field": "title"})

        priority = _parse_choice(Priority, priority, "priority", VALID_PRIORITIES)
        category = _parse_choice(Category, category, "category", VALID_CATEGORIES)

        with self._lock:
            ticket_id = self._id_factory()
            if self._index_of(ticket_id) >= 0:
                raise DomainException(f"Duplicate ticket id {ticket_id}", {"ticket_id": ticket_id})

            created_at = self.now()
            ticket = Ticket(
                id=ticket_id,
                title=title,
                description=description or "",
                priority=priority,
                category=category,
                assignee=assignee or "",
                status=TicketStatus.OPEN,
                created_at=created_at,
                sla_deadline=SLAPolicy.compute_deadline(created_at, priority),
                resolved_at=None,
            )
            self._tickets.insert(0, ticket)
            return ticket

    def transition(self, ticket_id: str, new_status: Any) -> Ticket:
        """
        Move a ticket to `new_status`.

        Resolving stamps resolved_at with the current instant, even when the
        ticket is already resolved. Any other status clears resolved_at, so
        reopening a ticket forgets its resolution time.

        Raises:
            ValidationException: unknown status value
            ResourceNotFoundException: no ticket with this id
        """
        status = _parse_choice(TicketStatus, new_status, "status", VALID_STATUSES)

        with self._lock:
            index = self._index_of(ticket_id)
            if index < 0:
                raise ResourceNotFoundException("Ticket", ticket_id)

            updated = self._tickets[index].with_status(status, self.now())
            self._tickets[index] = updated
            return updated

    def delete(self, ticket_id: str) -> bool:
        """Remove a ticket. Unknown ids are ignored; returns whether one was removed."""
        with self._lock:
            index = self._index_of(ticket_id)
            if index < 0:
                return False
            del self._tickets[index]
            return True

    def get(self, ticket_id: str) -> Ticket:
        with self._lock:
            index = self._index_of(ticket_id)
            if index < 0:
                raise ResourceNotFoundException("Ticket", ticket_id)
            return self._tickets[index]

    def list(self) -> List[Ticket]:
        """Snapshot of all tickets, newest first."""
        with self._lock:
            return list(self._tickets)

    def load(self, tickets: Iterable[Ticket]) -> None:
        """
        Replace the collection with previously saved tickets, kept in the
        given (newest-first) order.

        Raises:
            ValidationException: the same id appears twice
        """
        tickets = list(tickets)
        seen = set()
        for ticket in tickets:
            if ticket.id in seen:
                raise ValidationException(
                    f"Duplicate ticket id {ticket.id} in snapshot",
                    {"ticket_id": ticket.id}
                )
            seen.add(ticket.id)

        with self._lock:
            self._tickets = tickets

"""
SLA Application Services
=========================

Application services orchestrate the ticket store, the aggregator and the
snapshot repository.

Following SOLID principles:
- Single Responsibility: the store owns lifecycle rules, the service owns
  persistence and logging around them
- Dependency Inversion: persistence goes through ITicketRepository
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Union

from sla_tracker.config import TicketFilter
from sla_tracker.core import RepositoryException
from sla_tracker.sla.application.dto import TicketCreateDTO
from sla_tracker.sla.domain import KPISummary, SLAAggregator, Ticket, TicketStore
from sla_tracker.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class ITicketRepository(ABC):
    """Interface for saving and restoring the whole ticket collection."""

    @abstractmethod
    def load(self) -> List[Ticket]:
        """Load the saved tickets, newest first. Empty when nothing was saved."""

    @abstractmethod
    def save(self, tickets: List[Ticket]) -> None:
        """Replace the saved collection with `tickets`."""


# ========== Application Services ==========

class TicketService:
    """
    Service for ticket lifecycle operations and SLA reporting.

    Every successful mutation is followed by a snapshot save while the
    store lock is still held, so the stored collection always matches a
    state the store actually passed through.
    """

    def __init__(
        self,
        store: TicketStore,
        repository: Optional[ITicketRepository] = None
    ):
        self._store = store
        self._repository = repository

    @property
    def store(self) -> TicketStore:
        return self._store

    def now(self) -> datetime:
        return self._store.now()

    def load(self) -> int:
        """
        Restore the collection from the repository.

        Returns:
            Number of tickets loaded
        """
        if self._repository is None:
            return 0

        tickets = self._repository.load()
        self._store.load(tickets)
        logger.info("Tickets loaded", extra={"ticket_count": len(tickets)})
        return len(tickets)

    def _persist(self, before: List[Ticket]) -> None:
        """
        Save the current collection.

        On a failed save the store is put back to `before` so memory never
        holds a mutation that storage rejected.
        """
        if self._repository is None:
            return
        try:
            self._repository.save(self._store.list())
        except RepositoryException as e:
            self._store.load(before)
            logger.error("Snapshot save failed, mutation rolled back", extra={"error": e.message})
            raise

    def create_ticket(self, request: TicketCreateDTO) -> Ticket:
        with self._store.lock:
            before = self._store.list()
            ticket = self._store.create(
                title=request.title,
                description=request.description,
                priority=request.priority,
                category=request.category,
                assignee=request.assignee,
            )
            self._persist(before)

        logger.info(
            "Ticket created",
            extra={
                "ticket_id": ticket.id,
                "priority": ticket.priority.value,
                "category": ticket.category.value,
                "sla_deadline": ticket.sla_deadline.isoformat(),
            }
        )
        return ticket

    def transition_ticket(self, ticket_id: str, status: str) -> Ticket:
        with self._store.lock:
            before = self._store.list()
            ticket = self._store.transition(ticket_id, status)
            self._persist(before)

        logger.info(
            "Ticket status changed",
            extra={
                "ticket_id": ticket.id,
                "status": ticket.status.value,
                "resolved_at": ticket.resolved_at.isoformat() if ticket.resolved_at else None,
            }
        )
        return ticket

    def delete_ticket(self, ticket_id: str) -> bool:
        with self._store.lock:
            before = self._store.list()
            removed = self._store.delete(ticket_id)
            if removed:
                self._persist(before)

        if removed:
            logger.info("Ticket deleted", extra={"ticket_id": ticket_id})
        else:
            logger.debug("Delete ignored for unknown ticket", extra={"ticket_id": ticket_id})
        return removed

    def get_ticket(self, ticket_id: str) -> Ticket:
        return self._store.get(ticket_id)

    def list_tickets(
        self,
        predicate: Union[TicketFilter, str] = TicketFilter.ALL,
        now: Optional[datetime] = None
    ) -> List[Ticket]:
        """Tickets matching a view, newest first, evaluated at `now`."""
        now = now or self.now()
        return SLAAggregator.filter_tickets(self._store.list(), predicate, now)

    def summary(self, now: Optional[datetime] = None) -> KPISummary:
        """KPIs over every ticket, evaluated at `now`."""
        now = now or self.now()
        return SLAAggregator.summarize(self._store.list(), now)

"""
SLA Infrastructure Repositories
=================================

Concrete implementations of ITicketRepository.

Each repository stores the complete ticket collection as a snapshot:
only the tickets' own fields are written, derived SLA values are
recomputed after loading.
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from sla_tracker.core import DomainException, RepositoryException
from sla_tracker.infrastructure.database import session_scope
from sla_tracker.sla.application import (
    ITicketRepository,
    TicketEntityDTO,
    TicketSnapshotDTO,
)
from sla_tracker.sla.domain import Ticket, to_utc
from sla_tracker.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)


def serialize_tickets(tickets: List[Ticket]) -> str:
    """Render a ticket collection as a JSON snapshot document."""
    snapshot = TicketSnapshotDTO(
        saved_at=datetime.now(timezone.utc),
        tickets=[TicketEntityDTO.from_domain(t) for t in tickets],
    )
    return snapshot.model_dump_json(indent=2)


def deserialize_tickets(payload: Union[str, bytes]) -> List[Ticket]:
    """
    Rebuild tickets from a JSON snapshot document.

    Raises:
        RepositoryException: malformed document or a ticket violating
            its invariants
    """
    try:
        snapshot = TicketSnapshotDTO.model_validate_json(payload)
        return [dto.to_domain() for dto in snapshot.tickets]
    except (ValidationError, DomainException) as e:
        raise RepositoryException(f"Invalid ticket snapshot: {e}")


class InMemoryTicketRepository(ITicketRepository):
    """
    Repository keeping the serialized snapshot in memory.

    Goes through the same JSON encoding as the file repository, which makes
    it useful for ephemeral sessions and round-trip checks.
    """

    def __init__(self, payload: Optional[str] = None):
        self._payload = payload

    @property
    def payload(self) -> Optional[str]:
        return self._payload

    def load(self) -> List[Ticket]:
        if self._payload is None:
            return []
        return deserialize_tickets(self._payload)

    def save(self, tickets: List[Ticket]) -> None:
        self._payload = serialize_tickets(tickets)


class JSONFileTicketRepository(ITicketRepository):
    """
    Repository storing the snapshot in a JSON file.

    Writes go to a sibling temp file first and then replace the target,
    so a crash never leaves a half-written snapshot.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> List[Ticket]:
        if not self._path.exists():
            logger.info("No ticket snapshot found, starting empty", extra={"path": str(self._path)})
            return []

        try:
            payload = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise RepositoryException(f"Cannot read {self._path}: {e}")

        return deserialize_tickets(payload)

    def save(self, tickets: List[Ticket]) -> None:
        payload = serialize_tickets(tickets)
        tmp_path = self._path.with_name(self._path.name + ".tmp")

        with log_latency(logger, "snapshot_save", path=str(self._path), ticket_count=len(tickets)):
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path.write_text(payload, encoding="utf-8")
                os.replace(tmp_path, self._path)
            except OSError as e:
                raise RepositoryException(f"Cannot write {self._path}: {e}")


def _as_aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo; stored instants are always UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SQLAlchemyTicketRepository(ITicketRepository):
    """
    SQLAlchemy implementation of ticket repository.

    Instants are written in UTC. A save replaces every row in a single
    transaction.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def load(self) -> List[Ticket]:
        from sla_tracker.sla.infrastructure.models import TicketModel

        try:
            with session_scope(self._session_factory) as session:
                stmt = select(TicketModel).order_by(TicketModel.position.asc())
                models = session.execute(stmt).scalars().all()
                dtos = [
                    TicketEntityDTO(
                        id=model.id,
                        title=model.title,
                        description=model.description,
                        priority=model.priority,
                        category=model.category,
                        assignee=model.assignee,
                        status=model.status,
                        created_at=_as_aware(model.created_at),
                        sla_deadline=_as_aware(model.sla_deadline),
                        resolved_at=_as_aware(model.resolved_at),
                    )
                    for model in models
                ]
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to load tickets: {e}")

        try:
            return [dto.to_domain() for dto in dtos]
        except (ValidationError, DomainException) as e:
            raise RepositoryException(f"Invalid ticket row: {e}")

    def save(self, tickets: List[Ticket]) -> None:
        from sla_tracker.sla.infrastructure.models import TicketModel

        try:
            with session_scope(self._session_factory) as session:
                session.execute(delete(TicketModel))
                session.add_all([
                    TicketModel(
                        id=ticket.id,
                        position=position,
                        title=ticket.title,
                        description=ticket.description,
                        assignee=ticket.assignee,
                        priority=ticket.priority.value,
                        category=ticket.category.value,
                        status=ticket.status.value,
                        created_at=to_utc(ticket.created_at),
                        sla_deadline=to_utc(ticket.sla_deadline),
                        resolved_at=to_utc(ticket.resolved_at) if ticket.resolved_at else None,
                    )
                    for position, ticket in enumerate(tickets)
                ])
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to save tickets: {e}")

        logger.debug("Tickets saved", extra={"ticket_count": len(tickets)})

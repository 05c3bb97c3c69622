"""Shared fixtures for the SLA Tracker test suite."""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from sla_tracker.config import Settings
from sla_tracker.main import create_app
from sla_tracker.sla.application import TicketService
from sla_tracker.sla.domain import SLAPolicy, Ticket, TicketStore
from sla_tracker.sla.infrastructure import InMemoryTicketRepository

T0 = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock injected into the store."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current

    def set(self, instant: datetime) -> None:
        self.current = instant


def make_ticket(
    ticket_id="t-1",
    priority="medium",
    status="open",
    created_at=T0,
    resolved_after=None,
    **overrides
) -> Ticket:
    """Build a ticket directly; `resolved_after` is a timedelta from creation."""
    resolved_at = created_at + resolved_after if resolved_after is not None else None
    fields = dict(
        id=ticket_id,
        title=f"Ticket {ticket_id}",
        priority=priority,
        category="technical",
        status="resolved" if resolved_at else status,
        created_at=created_at,
        sla_deadline=SLAPolicy.compute_deadline(created_at, priority),
        resolved_at=resolved_at,
    )
    fields.update(overrides)
    return Ticket(**fields)


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def store(clock):
    return TicketStore(clock=clock)


@pytest.fixture
def repository():
    return InMemoryTicketRepository()


@pytest.fixture
def service(store, repository):
    return TicketService(store, repository)


@pytest.fixture
def settings(tmp_path):
    return Settings(storage_path=tmp_path / "tickets.json", database_url=None)


@pytest.fixture
def client(settings, clock):
    app = create_app(settings=settings, clock=clock, configure_logging=False)
    with TestClient(app) as c:
        yield c

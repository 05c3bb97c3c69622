"""Tests for snapshot repositories and the ticket service around them."""
import json
from datetime import timedelta

import pytest

from conftest import T0
from sla_tracker.core import RepositoryException, ResourceNotFoundException
from sla_tracker.infrastructure.database import (
    close_database,
    create_session_factory,
    create_tables,
    init_database,
)
from sla_tracker.sla.application import TicketCreateDTO, TicketService
from sla_tracker.sla.domain import SLAAggregator, TicketStore
from sla_tracker.sla.infrastructure import (
    InMemoryTicketRepository,
    JSONFileTicketRepository,
    SQLAlchemyTicketRepository,
    deserialize_tickets,
    serialize_tickets,
)


@pytest.fixture
def populated_store(store, clock):
    """Store holding tickets in every lifecycle state."""
    a = store.create("Mail bounce", "Outbound mail rejected", "critical", "software", "Ana")
    b = store.create("New badge", priority="low", category="access")
    c = store.create("Switch fan noise", priority="high", category="hardware")
    store.create("Wi-Fi on floor 2", priority="medium", category="network")
    clock.advance(hours=2, minutes=7, seconds=13)
    store.transition(a.id, "resolved")
    store.transition(b.id, "in_progress")
    clock.advance(hours=9)
    store.transition(c.id, "resolved")
    return store


@pytest.fixture
def sql_repository(tmp_path):
    engine = init_database(f"sqlite:///{tmp_path / 'tickets.db'}")
    create_tables(engine)
    yield SQLAlchemyTicketRepository(create_session_factory(engine))
    close_database(engine)


def assert_same_view(original, restored, now):
    assert restored == original
    assert SLAAggregator.summarize(restored, now) == SLAAggregator.summarize(original, now)
    for before, after in zip(original, restored):
        assert SLAAggregator.is_breached(after, now) == SLAAggregator.is_breached(before, now)
        assert SLAAggregator.sla_clock(after, now) == SLAAggregator.sla_clock(before, now)


# ── round trips ─────────────────────────────────────────────────────────────
def test_in_memory_round_trip(populated_store, clock):
    repository = InMemoryTicketRepository()
    original = populated_store.list()
    repository.save(original)

    restored_store = TicketStore()
    restored_store.load(repository.load())
    now = clock() + timedelta(hours=30)
    assert_same_view(original, restored_store.list(), now)


def test_json_file_round_trip(populated_store, clock, tmp_path):
    path = tmp_path / "data" / "tickets.json"
    repository = JSONFileTicketRepository(path)
    original = populated_store.list()
    repository.save(original)

    assert path.exists()
    assert not path.with_name("tickets.json.tmp").exists()
    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["version"] == 1
    assert [t["id"] for t in document["tickets"]] == [t.id for t in original]
    assert "is_breached" not in document["tickets"][0]

    assert_same_view(original, JSONFileTicketRepository(path).load(), clock())


def test_sql_round_trip(populated_store, clock, sql_repository):
    original = populated_store.list()
    sql_repository.save(original)
    restored = sql_repository.load()
    assert [t.id for t in restored] == [t.id for t in original]
    assert_same_view(original, restored, clock() + timedelta(days=4))


def test_sql_save_replaces_previous_rows(populated_store, sql_repository):
    sql_repository.save(populated_store.list())
    sql_repository.save(populated_store.list()[:1])
    assert len(sql_repository.load()) == 1


def test_serialize_helpers_round_trip(populated_store):
    original = populated_store.list()
    assert deserialize_tickets(serialize_tickets(original)) == original


# ── failure modes ───────────────────────────────────────────────────────────
def test_missing_file_loads_empty(tmp_path):
    assert JSONFileTicketRepository(tmp_path / "absent.json").load() == []
    assert InMemoryTicketRepository().load() == []


def test_malformed_file_raises(tmp_path):
    path = tmp_path / "tickets.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(RepositoryException):
        JSONFileTicketRepository(path).load()


def test_snapshot_violating_invariants_raises():
    payload = json.dumps({
        "version": 1,
        "tickets": [{
            "id": "t-1",
            "title": "Broken",
            "priority": "high",
            "category": "technical",
            "status": "resolved",
            "created_at": T0.isoformat(),
            "sla_deadline": (T0 + timedelta(hours=8)).isoformat(),
            "resolved_at": None,
        }],
    })
    with pytest.raises(RepositoryException):
        deserialize_tickets(payload)


# ── service persistence ─────────────────────────────────────────────────────
def test_service_saves_after_each_mutation(service, repository, clock):
    ticket = service.create_ticket(TicketCreateDTO(title="Reset password", priority="high"))
    assert [t.id for t in repository.load()] == [ticket.id]

    clock.advance(hours=1)
    service.transition_ticket(ticket.id, "resolved")
    assert repository.load()[0].resolved_at == T0 + timedelta(hours=1)

    assert service.delete_ticket(ticket.id) is True
    assert repository.load() == []


def test_service_does_not_save_failed_mutations(service, repository):
    service.create_ticket(TicketCreateDTO(title="Kept"))
    payload = repository.payload

    with pytest.raises(ResourceNotFoundException):
        service.transition_ticket("missing", "resolved")
    assert service.delete_ticket("missing") is False
    assert repository.payload == payload


def test_service_load_restores_session(service, repository, clock):
    service.create_ticket(TicketCreateDTO(title="Carry over", priority="critical"))
    clock.advance(hours=5)

    next_session = TicketService(TicketStore(clock=clock), repository)
    assert next_session.load() == 1
    assert next_session.list_tickets("breached")[0].title == "Carry over"
    assert next_session.summary() == service.summary()


def test_service_without_repository(store):
    service = TicketService(store)
    assert service.load() == 0
    service.create_ticket(TicketCreateDTO(title="Ephemeral"))
    assert len(service.list_tickets()) == 1


# ── failed saves ────────────────────────────────────────────────────────────
class FlakyRepository(InMemoryTicketRepository):
    """In-memory repository whose saves can be switched to fail."""

    def __init__(self):
        super().__init__()
        self.failing = False

    def save(self, tickets):
        if self.failing:
            raise RepositoryException("disk full")
        super().save(tickets)


@pytest.fixture
def flaky_repository():
    return FlakyRepository()


@pytest.fixture
def flaky_service(store, flaky_repository):
    return TicketService(store, flaky_repository)


def test_failed_save_rolls_back_create(flaky_service, flaky_repository, store):
    flaky_repository.failing = True
    with pytest.raises(RepositoryException):
        flaky_service.create_ticket(TicketCreateDTO(title="Never stored"))
    assert len(store) == 0


def test_failed_save_rolls_back_transition(flaky_service, flaky_repository, store, clock):
    ticket = flaky_service.create_ticket(TicketCreateDTO(title="Stays open", priority="critical"))
    saved = flaky_repository.payload
    clock.advance(hours=1)

    flaky_repository.failing = True
    with pytest.raises(RepositoryException):
        flaky_service.transition_ticket(ticket.id, "resolved")

    assert store.get(ticket.id) == ticket
    assert store.get(ticket.id).resolved_at is None
    assert flaky_repository.payload == saved


def test_failed_save_rolls_back_delete(flaky_service, flaky_repository, store):
    kept = flaky_service.create_ticket(TicketCreateDTO(title="Still here"))
    other = flaky_service.create_ticket(TicketCreateDTO(title="Newest"))

    flaky_repository.failing = True
    with pytest.raises(RepositoryException):
        flaky_service.delete_ticket(kept.id)

    assert [t.id for t in store.list()] == [other.id, kept.id]


def test_rolled_back_change_is_not_saved_later(flaky_service, flaky_repository):
    flaky_repository.failing = True
    with pytest.raises(RepositoryException):
        flaky_service.create_ticket(TicketCreateDTO(title="Rejected"))

    flaky_repository.failing = False
    flaky_service.create_ticket(TicketCreateDTO(title="Accepted"))
    assert [t.title for t in flaky_repository.load()] == ["Accepted"]

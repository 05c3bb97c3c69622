"""Tests for breach detection, filtering and KPI aggregation."""
from datetime import timedelta

import pytest

from conftest import T0, make_ticket
from sla_tracker.config import SLAClockState, TicketFilter
from sla_tracker.sla.domain import Duration, KPISummary, SLAAggregator


# ── breach detection ────────────────────────────────────────────────────────
def test_unresolved_breach_is_monotonic_in_time():
    ticket = make_ticket(priority="critical")  # deadline T0+4h
    assert not SLAAggregator.is_breached(ticket, T0)
    assert not SLAAggregator.is_breached(ticket, T0 + timedelta(hours=3, minutes=59))
    assert not SLAAggregator.is_breached(ticket, T0 + timedelta(hours=4))
    for minutes in (1, 60, 60 * 24, 60 * 24 * 365):
        assert SLAAggregator.is_breached(ticket, T0 + timedelta(hours=4, minutes=minutes))


def test_resolved_breach_uses_resolution_instant():
    on_time = make_ticket(priority="high", resolved_after=timedelta(hours=8))
    late = make_ticket(priority="high", resolved_after=timedelta(hours=8, seconds=1))
    far_future = T0 + timedelta(days=30)
    assert not SLAAggregator.is_breached(on_time, far_future)
    assert SLAAggregator.is_breached(late, T0)


# ── durations ───────────────────────────────────────────────────────────────
def test_time_remaining_before_deadline():
    ticket = make_ticket(priority="high")
    now = T0 + timedelta(hours=3, minutes=29, seconds=59)
    assert SLAAggregator.time_remaining(ticket, now) == Duration(4, 30)
    clock = SLAAggregator.sla_clock(ticket, now)
    assert clock.state == SLAClockState.REMAINING


def test_time_remaining_when_overdue():
    ticket = make_ticket(priority="critical")
    now = T0 + timedelta(hours=6, minutes=15)
    assert SLAAggregator.time_remaining(ticket, now) == Duration(2, 15)
    assert SLAAggregator.sla_clock(ticket, now).state == SLAClockState.OVERDUE


def test_resolved_ticket_reports_resolution_time():
    ticket = make_ticket(priority="low", resolved_after=timedelta(hours=30, minutes=45, seconds=30))
    now = T0 + timedelta(days=10)
    assert SLAAggregator.resolution_time(ticket) == Duration(30, 45)
    assert SLAAggregator.time_remaining(ticket, now) == Duration(30, 45)
    clock = SLAAggregator.sla_clock(ticket, now)
    assert clock.state == SLAClockState.RESOLVED
    assert clock.to_dict() == {"state": "resolved", "duration": {"hours": 30, "minutes": 45}}


def test_unresolved_ticket_has_no_resolution_time():
    assert SLAAggregator.resolution_time(make_ticket()) is None


# ── filtering ───────────────────────────────────────────────────────────────
@pytest.fixture
def mixed_tickets():
    return [
        make_ticket("open-critical", priority="critical"),
        make_ticket("progress-low", priority="low", status="in_progress"),
        make_ticket("resolved-late", priority="critical", resolved_after=timedelta(hours=5)),
        make_ticket("resolved-ok", priority="medium", resolved_after=timedelta(hours=1)),
    ]


@pytest.mark.parametrize("predicate,expected", [
    ("all", ["open-critical", "progress-low", "resolved-late", "resolved-ok"]),
    ("open", ["open-critical"]),
    ("in_progress", ["progress-low"]),
    ("resolved", ["resolved-late", "resolved-ok"]),
    (TicketFilter.RESOLVED, ["resolved-late", "resolved-ok"]),
    ("nonsense", ["open-critical", "progress-low", "resolved-late", "resolved-ok"]),
])
def test_filter_by_predicate(mixed_tickets, predicate, expected):
    result = SLAAggregator.filter_tickets(mixed_tickets, predicate, T0)
    assert [t.id for t in result] == expected


def test_breached_filter_grows_over_time(mixed_tickets):
    snapshot = list(mixed_tickets)

    def breached_ids(now):
        return [t.id for t in SLAAggregator.filter_tickets(mixed_tickets, "breached", now)]

    assert breached_ids(T0) == ["resolved-late"]
    assert breached_ids(T0 + timedelta(hours=5)) == ["open-critical", "resolved-late"]
    assert breached_ids(T0 + timedelta(hours=73)) == ["open-critical", "progress-low", "resolved-late"]
    assert mixed_tickets == snapshot

    for now in (T0, T0 + timedelta(hours=5), T0 + timedelta(hours=73)):
        expected = [t.id for t in mixed_tickets if SLAAggregator.is_breached(t, now)]
        assert breached_ids(now) == expected


# ── KPIs ────────────────────────────────────────────────────────────────────
def test_kpi_example(store, clock):
    critical = store.create("Server down", priority="critical")
    low = store.create("New mouse", priority="low")
    clock.set(T0 + timedelta(hours=2))
    store.transition(critical.id, "resolved")
    clock.set(T0 + timedelta(hours=80))
    store.transition(low.id, "resolved")

    summary = SLAAggregator.summarize(store.list(), clock())
    assert summary.total == 2
    assert summary.resolved == 2
    assert summary.breached == 1
    assert summary.sla_compliance == 50.0
    assert summary.avg_resolution_time == 41.0


def test_kpis_for_empty_collection():
    assert SLAAggregator.summarize([], T0) == KPISummary(
        total=0, open=0, in_progress=0, resolved=0, breached=0,
        sla_compliance=100.0, avg_resolution_time=0.0,
    )


def test_compliance_is_vacuous_without_resolved_tickets():
    tickets = [make_ticket("a", priority="critical"), make_ticket("b", status="in_progress")]
    summary = SLAAggregator.summarize(tickets, T0 + timedelta(days=5))
    assert summary.breached == 2
    assert summary.open == 1
    assert summary.in_progress == 1
    assert summary.sla_compliance == 100.0
    assert summary.avg_resolution_time == 0.0


def test_kpis_over_mixed_collection(mixed_tickets):
    summary = SLAAggregator.summarize(mixed_tickets, T0)
    assert summary.to_dict() == {
        "total": 4,
        "open": 1,
        "in_progress": 1,
        "resolved": 2,
        "breached": 1,
        "sla_compliance": 50.0,
        "avg_resolution_time": 3.0,
    }


def test_compliance_rounds_to_one_decimal():
    tickets = [
        make_ticket("a", priority="low", resolved_after=timedelta(hours=1)),
        make_ticket("b", priority="low", resolved_after=timedelta(hours=2)),
        make_ticket("c", priority="critical", resolved_after=timedelta(hours=5)),
    ]
    assert SLAAggregator.summarize(tickets, T0).sla_compliance == 66.7


def test_average_resolution_uses_floored_minutes():
    tickets = [
        make_ticket("a", resolved_after=timedelta(hours=1, minutes=15, seconds=59)),
        make_ticket("b", resolved_after=timedelta(hours=1, minutes=15)),
    ]
    # seconds are dropped: both count as 1.25h, which rounds half-up to 1.3
    assert SLAAggregator.summarize(tickets, T0).avg_resolution_time == 1.3

import typing as t
from datetime import UTC, datetime, timedelta

import pytest

from accounts.models import DoorlistUser
from conftest import RegistrationFactory
from events.models import Event, Registration, TicketType
from events.service import check_in_service, check_in_stats
from events.service.ticket_ledger import percentage

pytestmark = pytest.mark.django_db

NOW = datetime(2026, 3, 1, 20, 0, tzinfo=UTC)


def at(moment: datetime) -> t.Callable[[], datetime]:
    return lambda: moment


def test_empty_event(event: Event) -> None:
    snapshot = check_in_stats.get_statistics(event, now=at(NOW))

    stats = snapshot.statistics
    assert stats.total_registrations == 0
    assert stats.checked_in_count == 0
    assert stats.check_in_rate == 0
    assert stats.total_tickets == 0
    assert stats.ticket_check_in_rate == 0
    assert len(snapshot.timeline) == 24
    assert all(bucket.count == 0 for bucket in snapshot.timeline)
    assert snapshot.recent_check_ins == []


def test_counts_confirmed_registrations_by_ticket_count(
    event: Event,
    organizer: DoorlistUser,
    registration_factory: RegistrationFactory,
    general_admission: TicketType,
    vip: TicketType,
) -> None:
    group = registration_factory(event, purchases=[(general_admission, 2), (vip, 1)])
    solo = registration_factory(event, quantity=5)
    couple = registration_factory(event, purchases=[(general_admission, 2)])
    registration_factory(event, status=Registration.Status.PENDING)
    registration_factory(event, status=Registration.Status.CANCELLED)
    check_in_service.check_in(event, group.id, organizer, now=at(NOW - timedelta(hours=2)))
    check_in_service.check_in(event, solo.id, organizer, "Brought a plus one", now=at(NOW - timedelta(hours=1)))

    snapshot = check_in_stats.get_statistics(event, now=at(NOW))

    stats = snapshot.statistics
    assert stats.total_registrations == 3
    assert stats.checked_in_count == 2
    assert stats.not_checked_in_count == 1
    assert stats.check_in_rate == 67
    assert stats.total_tickets == 6
    assert stats.checked_in_tickets == 4
    assert stats.not_checked_in_tickets == 2
    assert stats.ticket_check_in_rate == 67
    assert stats.checked_in_count + stats.not_checked_in_count == stats.total_registrations
    assert stats.checked_in_tickets + stats.not_checked_in_tickets == stats.total_tickets

    assert [r.registration_id for r in snapshot.recent_check_ins] == [solo.id, group.id]
    assert snapshot.recent_check_ins[0].quantity == 1
    assert snapshot.recent_check_ins[0].notes == "Brought a plus one"
    assert snapshot.recent_check_ins[1].quantity == 3
    assert couple.id not in {r.registration_id for r in snapshot.recent_check_ins}


def test_recent_feed_is_capped(
    event: Event, organizer: DoorlistUser, registration_factory: RegistrationFactory
) -> None:
    for minute in range(12):
        registration = registration_factory(event)
        check_in_service.check_in(event, registration.id, organizer, now=at(NOW - timedelta(minutes=minute)))

    snapshot = check_in_stats.get_statistics(event, now=at(NOW))

    assert len(snapshot.recent_check_ins) == 10
    times = [r.checked_in_at for r in snapshot.recent_check_ins]
    assert times == sorted(times, reverse=True)
    assert times[0] == NOW


def test_timeline_uses_local_hours_and_trailing_window(
    event: Event, organizer: DoorlistUser, registration_factory: RegistrationFactory, settings: t.Any
) -> None:
    settings.TIME_ZONE = "Europe/Vienna"
    in_window = registration_factory(event)
    also_in_window = registration_factory(event)
    too_old = registration_factory(event)
    # 17:30 UTC is 18:30 in Vienna (CET) on this date.
    check_in_service.check_in(event, in_window.id, organizer, now=at(datetime(2026, 3, 1, 17, 30, tzinfo=UTC)))
    check_in_service.check_in(event, also_in_window.id, organizer, now=at(datetime(2026, 2, 27, 17, 5, tzinfo=UTC)))
    check_in_service.check_in(event, too_old.id, organizer, now=at(NOW - timedelta(days=8)))

    snapshot = check_in_stats.get_statistics(event, now=at(NOW))

    counts = {bucket.hour: bucket.count for bucket in snapshot.timeline}
    assert [bucket.hour for bucket in snapshot.timeline] == list(range(24))
    assert counts[18] == 2
    assert sum(counts.values()) == 2
    # The old check-in is outside the histogram but still counted in the totals.
    assert snapshot.statistics.checked_in_count == 3


def test_stats_follow_check_in_and_undo(
    event: Event, organizer: DoorlistUser, registration_factory: RegistrationFactory
) -> None:
    first = registration_factory(event)
    second = registration_factory(event)

    check_in_service.check_in(event, first.id, organizer, now=at(NOW - timedelta(minutes=30)))
    stats = check_in_stats.get_statistics(event, now=at(NOW)).statistics
    assert stats.checked_in_count == 1
    assert stats.check_in_rate == 50
    assert stats.ticket_check_in_rate == 50

    check_in_service.check_in(event, second.id, organizer, now=at(NOW - timedelta(minutes=20)))
    check_in_service.undo_check_in(
        event, first.id, organizer, "Scanned the wrong ticket", now=at(NOW - timedelta(minutes=10))
    )
    snapshot = check_in_stats.get_statistics(event, now=at(NOW))

    stats = snapshot.statistics
    assert stats.total_registrations == 2
    assert stats.checked_in_count == 1
    assert stats.not_checked_in_count == 1
    assert stats.check_in_rate == 50
    assert stats.checked_in_tickets == 1
    assert stats.ticket_check_in_rate == 50
    assert [r.registration_id for r in snapshot.recent_check_ins] == [second.id]
    assert sum(bucket.count for bucket in snapshot.timeline) == 1


@pytest.mark.parametrize(
    "part, whole, expected",
    [(0, 0, 0), (5, 0, 0), (1, 8, 13), (3, 8, 38), (1, 3, 33), (2, 3, 67), (4, 4, 100)],
)
def test_percentages_round_half_up(part: int, whole: int, expected: int) -> None:
    assert percentage(part, whole) == expected

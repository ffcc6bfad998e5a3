"""Check-in dashboard aggregates.

Everything is derived from one read of the event's confirmed registrations,
so the counts in a snapshot are always mutually consistent:
``checked_in + not_checked_in == total`` for both registrations and tickets.
"""

import typing as t
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import UUID

from django.conf import settings
from django.utils import timezone

from events.models import Event, Registration
from events.service.ticket_ledger import percentage

Clock = t.Callable[[], datetime]

HOURS_IN_DAY = 24


@dataclass(frozen=True)
class CheckInStatistics:
    total_registrations: int
    checked_in_count: int
    not_checked_in_count: int
    check_in_rate: int
    total_tickets: int
    checked_in_tickets: int
    not_checked_in_tickets: int
    ticket_check_in_rate: int


@dataclass(frozen=True)
class TimelineBucket:
    hour: int
    count: int


@dataclass(frozen=True)
class RecentCheckIn:
    registration_id: UUID
    ticket_number: str | None
    first_name: str
    last_name: str
    email: str
    image_url: str | None
    quantity: int
    checked_in_at: datetime
    checked_in_by_name: str | None
    notes: str | None


@dataclass
class CheckInSnapshot:
    statistics: CheckInStatistics
    timeline: list[TimelineBucket] = field(default_factory=list)
    recent_check_ins: list[RecentCheckIn] = field(default_factory=list)


def confirmed_registrations(event: Event) -> list[Registration]:
    return list(Registration.objects.for_event(event.id).confirmed().with_check_in_relations())


def compute_statistics(registrations: t.Sequence[Registration]) -> CheckInStatistics:
    """Counts and rates over an already-loaded list of registrations."""
    total = len(registrations)
    checked = [r for r in registrations if r.checked_in]
    total_tickets = sum(r.ticket_count() for r in registrations)
    checked_tickets = sum(r.ticket_count() for r in checked)
    return CheckInStatistics(
        total_registrations=total,
        checked_in_count=len(checked),
        not_checked_in_count=total - len(checked),
        check_in_rate=percentage(len(checked), total),
        total_tickets=total_tickets,
        checked_in_tickets=checked_tickets,
        not_checked_in_tickets=total_tickets - checked_tickets,
        ticket_check_in_rate=percentage(checked_tickets, total_tickets),
    )


def compute_timeline(
    registrations: t.Sequence[Registration], *, now: datetime, window_days: int
) -> list[TimelineBucket]:
    """Check-ins per local hour of day over the trailing window; always 24 buckets."""
    cutoff = now - timedelta(days=window_days)
    counts = [0] * HOURS_IN_DAY
    for r in registrations:
        if r.checked_in and r.checked_in_at is not None and cutoff <= r.checked_in_at <= now:
            counts[timezone.localtime(r.checked_in_at).hour] += 1
    return [TimelineBucket(hour=hour, count=count) for hour, count in enumerate(counts)]


def compute_recent(registrations: t.Sequence[Registration], *, limit: int) -> list[RecentCheckIn]:
    checked = sorted(
        (r for r in registrations if r.checked_in and r.checked_in_at is not None),
        key=lambda r: t.cast(datetime, r.checked_in_at),
        reverse=True,
    )
    return [
        RecentCheckIn(
            registration_id=r.id,
            ticket_number=r.ticket_number,
            first_name=r.user.first_name,
            last_name=r.user.last_name,
            email=r.user.email,
            image_url=r.user.image_url,
            quantity=r.ticket_count(),
            checked_in_at=t.cast(datetime, r.checked_in_at),
            checked_in_by_name=r.checked_in_by.get_display_name() if r.checked_in_by else None,
            notes=r.check_in_notes,
        )
        for r in checked[:limit]
    ]


def get_statistics(
    event: Event,
    *,
    now: Clock = timezone.now,
    recent_limit: int | None = None,
    window_days: int | None = None,
) -> CheckInSnapshot:
    """Statistics, hourly timeline and recent feed for the event's confirmed registrations."""
    registrations = confirmed_registrations(event)
    return CheckInSnapshot(
        statistics=compute_statistics(registrations),
        timeline=compute_timeline(
            registrations,
            now=now(),
            window_days=window_days if window_days is not None else settings.CHECK_IN_TIMELINE_DAYS,
        ),
        recent_check_ins=compute_recent(
            registrations, limit=recent_limit if recent_limit is not None else settings.CHECK_IN_RECENT_LIMIT
        ),
    )

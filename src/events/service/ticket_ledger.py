"""Ticket allocation ledger.

Availability and pricing per ticket type, seats taken per event, and the
atomic allocate/release counters. ``quantity_sold`` never exceeds
``quantity`` (database constraint plus conditional updates) and never drops
below zero.

Event capacity is measured in seats: the ticket purchases of a registration
when it has any, its requested quantity otherwise.
"""

import typing as t
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import F, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from events.exceptions import TicketTypeSoldOutError
from events.models import Event, Registration, TicketType

logger = structlog.get_logger(__name__)


def percentage(part: int, whole: int) -> int:
    """``part / whole`` as a whole percentage rounded half up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    value = Decimal(part) * 100 / Decimal(whole)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class TicketTypeAvailability:
    id: UUID
    name: str
    description: str
    price: Decimal
    current_price: Decimal
    is_early_bird: bool
    quantity: int
    quantity_sold: int
    available: int
    is_sold_out: bool
    fill_rate: int


def available(ticket_type: TicketType) -> int:
    return max(0, ticket_type.quantity - ticket_type.quantity_sold)


def is_sold_out(ticket_type: TicketType) -> bool:
    return available(ticket_type) == 0


def is_early_bird(ticket_type: TicketType, now: datetime | None = None) -> bool:
    """Early-bird pricing applies while ``now`` is before the cutoff and a price is set."""
    if ticket_type.early_bird_price is None or ticket_type.early_bird_end_date is None:
        return False
    return (now or timezone.now()) < ticket_type.early_bird_end_date


def current_price(ticket_type: TicketType, now: datetime | None = None) -> Decimal:
    if is_early_bird(ticket_type, now):
        return t.cast(Decimal, ticket_type.early_bird_price)
    return ticket_type.price


def fill_rate(ticket_type: TicketType) -> int:
    return percentage(ticket_type.quantity_sold, ticket_type.quantity)


def ticket_type_availability(event: Event, now: datetime | None = None) -> list[TicketTypeAvailability]:
    """Availability rows for every ticket type of the event, in display order."""
    now = now or timezone.now()
    return [
        TicketTypeAvailability(
            id=tt.id,
            name=tt.name,
            description=tt.description,
            price=tt.price,
            current_price=current_price(tt, now),
            is_early_bird=is_early_bird(tt, now),
            quantity=tt.quantity,
            quantity_sold=tt.quantity_sold,
            available=available(tt),
            is_sold_out=is_sold_out(tt),
            fill_rate=fill_rate(tt),
        )
        for tt in TicketType.objects.filter(event=event).order_by("sort_order", "name")
    ]


def seats_taken(event: Event) -> int:
    """Capacity used by the event's confirmed registrations."""
    registrations = Registration.objects.for_event(event.id).confirmed().prefetch_related("ticket_purchases")
    return sum(r.seat_count() for r in registrations)


@dataclass(frozen=True)
class EventCapacity:
    capacity: int
    seats_taken: int

    @property
    def available_spots(self) -> int:
        return max(0, self.capacity - self.seats_taken)

    @property
    def fill_percentage(self) -> int:
        return percentage(self.seats_taken, self.capacity)

    @property
    def is_full(self) -> bool:
        return self.available_spots == 0


def event_capacity(event: Event) -> EventCapacity:
    return EventCapacity(capacity=event.capacity, seats_taken=seats_taken(event))


def allocate(ticket_type_id: UUID, quantity: int) -> None:
    """Reserve ``quantity`` units of a ticket type.

    Raises:
        TicketTypeSoldOutError: fewer than ``quantity`` units are left.
    """
    if quantity < 1:
        raise ValueError("quantity must be at least 1")
    with transaction.atomic():
        updated = TicketType.objects.filter(
            pk=ticket_type_id, quantity_sold__lte=F("quantity") - quantity
        ).update(quantity_sold=F("quantity_sold") + quantity)
    if not updated:
        logger.info("ticket_type_sold_out", ticket_type_id=str(ticket_type_id), requested=quantity)
        raise TicketTypeSoldOutError()


def release(ticket_type_id: UUID, quantity: int) -> None:
    """Return ``quantity`` units to stock, flooring the counter at zero."""
    if quantity < 1:
        return
    TicketType.objects.filter(pk=ticket_type_id).update(
        quantity_sold=Greatest(F("quantity_sold") - quantity, Value(0))
    )

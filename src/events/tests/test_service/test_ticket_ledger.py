from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from conftest import RegistrationFactory
from events.exceptions import TicketTypeSoldOutError
from events.models import Event, Registration, TicketType
from events.service import ticket_ledger

pytestmark = pytest.mark.django_db

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class TestTicketTypeAvailability:
    def test_availability_and_fill_rate(self, general_admission: TicketType) -> None:
        general_admission.quantity_sold = 20
        general_admission.save()

        assert ticket_ledger.available(general_admission) == 30
        assert ticket_ledger.is_sold_out(general_admission) is False
        assert ticket_ledger.fill_rate(general_admission) == 40

    def test_sold_out(self, vip: TicketType) -> None:
        vip.quantity_sold = vip.quantity
        vip.save()

        assert ticket_ledger.available(vip) == 0
        assert ticket_ledger.is_sold_out(vip) is True
        assert ticket_ledger.fill_rate(vip) == 100

    def test_early_bird_price_applies_before_cutoff(self, general_admission: TicketType) -> None:
        general_admission.early_bird_price = Decimal("15.00")
        general_admission.early_bird_end_date = NOW + timedelta(days=1)
        general_admission.save()

        assert ticket_ledger.is_early_bird(general_admission, NOW) is True
        assert ticket_ledger.current_price(general_admission, NOW) == Decimal("15.00")
        later = NOW + timedelta(days=2)
        assert ticket_ledger.is_early_bird(general_admission, later) is False
        assert ticket_ledger.current_price(general_admission, later) == Decimal("25.00")

    def test_no_early_bird_without_a_price(self, general_admission: TicketType) -> None:
        general_admission.early_bird_end_date = NOW + timedelta(days=1)
        general_admission.save()

        assert ticket_ledger.is_early_bird(general_admission, NOW) is False
        assert ticket_ledger.current_price(general_admission, NOW) == Decimal("25.00")

    def test_rows_follow_display_order(self, event: Event, general_admission: TicketType, vip: TicketType) -> None:
        rows = ticket_ledger.ticket_type_availability(event, NOW)

        assert [row.name for row in rows] == ["VIP", "General Admission"]
        assert rows[1].available == 50
        assert rows[1].current_price == Decimal("25.00")


class TestAllocation:
    def test_allocate_up_to_capacity(self, vip: TicketType) -> None:
        ticket_ledger.allocate(vip.id, 4)
        ticket_ledger.allocate(vip.id, 6)

        vip.refresh_from_db()
        assert vip.quantity_sold == 10

    def test_allocate_never_oversells(self, vip: TicketType) -> None:
        ticket_ledger.allocate(vip.id, 8)

        with pytest.raises(TicketTypeSoldOutError):
            ticket_ledger.allocate(vip.id, 3)

        vip.refresh_from_db()
        assert vip.quantity_sold == 8

    def test_release_never_goes_below_zero(self, vip: TicketType) -> None:
        ticket_ledger.allocate(vip.id, 2)
        ticket_ledger.release(vip.id, 5)

        vip.refresh_from_db()
        assert vip.quantity_sold == 0


class TestEventCapacity:
    def test_counts_seats_of_confirmed_registrations(
        self, event: Event, registration_factory: RegistrationFactory, general_admission: TicketType
    ) -> None:
        registration_factory(event, purchases=[(general_admission, 3)])
        registration_factory(event)
        registration_factory(event, status=Registration.Status.PENDING, purchases=[(general_admission, 4)])

        capacity = ticket_ledger.event_capacity(event)

        assert ticket_ledger.seats_taken(event) == 4
        assert capacity.capacity == 100
        assert capacity.seats_taken == 4
        assert capacity.available_spots == 96
        assert capacity.fill_percentage == 4
        assert capacity.is_full is False

    def test_requested_quantity_takes_seats_without_purchases(
        self, event: Event, registration_factory: RegistrationFactory
    ) -> None:
        registration_factory(event, quantity=5)
        registration_factory(event, quantity=5, status=Registration.Status.CANCELLED)

        assert ticket_ledger.seats_taken(event) == 5
        assert ticket_ledger.event_capacity(event).available_spots == 95

    def test_full_event(self, event: Event, registration_factory: RegistrationFactory) -> None:
        event.capacity = 2
        event.save()
        registration_factory(event)
        registration_factory(event)

        capacity = ticket_ledger.event_capacity(event)

        assert capacity.available_spots == 0
        assert capacity.is_full is True
        assert capacity.fill_percentage == 100

    def test_overbooked_event_reports_no_negative_spots(
        self, event: Event, registration_factory: RegistrationFactory
    ) -> None:
        event.capacity = 3
        event.save()
        registration_factory(event, quantity=4)

        capacity = ticket_ledger.event_capacity(event)

        assert capacity.seats_taken == 4
        assert capacity.available_spots == 0
        assert capacity.is_full is True

"""
Project-wide fixtures: users, events and registrations.
"""

import secrets
import string
import typing as t
from datetime import datetime, time, timedelta

import faker
import pytest
from django.core.cache import cache
from django.utils import timezone

from accounts.models import DoorlistUser
from events.models import Event, Registration, TicketPurchase, TicketType


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Clear the cache before each test so throttling counters start from zero."""
    cache.clear()


class DoorlistUserFactory:
    """Factory for creating DoorlistUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> DoorlistUser:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        email = kwargs.pop("email", username + ("@test.com" if "@" not in username else ""))
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        return DoorlistUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> DoorlistUser:
        return self.create_user(**kwargs)


@pytest.fixture
def doorlist_user_factory() -> DoorlistUserFactory:
    return DoorlistUserFactory()


@pytest.fixture
def superuser(doorlist_user_factory: DoorlistUserFactory) -> DoorlistUser:
    """A superuser."""
    return doorlist_user_factory(is_superuser=True, is_staff=True)


@pytest.fixture
def organizer(doorlist_user_factory: DoorlistUserFactory) -> DoorlistUser:
    """The organizer of the default event."""
    return doorlist_user_factory(role=DoorlistUser.Role.ORGANIZER)


@pytest.fixture
def other_organizer(doorlist_user_factory: DoorlistUserFactory) -> DoorlistUser:
    """An organizer with no relation to the default event."""
    return doorlist_user_factory(role=DoorlistUser.Role.ORGANIZER)


@pytest.fixture
def platform_admin(doorlist_user_factory: DoorlistUserFactory) -> DoorlistUser:
    return doorlist_user_factory(role=DoorlistUser.Role.ADMIN)


@pytest.fixture
def attendee(doorlist_user_factory: DoorlistUserFactory) -> DoorlistUser:
    return doorlist_user_factory(first_name="Ada", last_name="Lovelace")


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )


@pytest.fixture
def event(organizer: DoorlistUser, next_week: datetime) -> Event:
    return Event.objects.create(
        title="Launch Party",
        capacity=100,
        start_date=next_week,
        end_date=next_week + timedelta(hours=5),
        organizer=organizer,
    )


@pytest.fixture
def other_event(other_organizer: DoorlistUser, next_week: datetime) -> Event:
    return Event.objects.create(
        title="Someone Else's Meetup",
        capacity=10,
        start_date=next_week,
        end_date=next_week + timedelta(hours=2),
        organizer=other_organizer,
    )


class RegistrationFactory:
    """Creates registrations, optionally with ticket purchases."""

    def __init__(self, user_factory: DoorlistUserFactory) -> None:
        self.user_factory = user_factory
        self._counter = 0

    def __call__(
        self,
        event: Event,
        *,
        user: DoorlistUser | None = None,
        status: str = Registration.Status.CONFIRMED,
        purchases: t.Sequence[tuple[TicketType, int]] = (),
        **kwargs: t.Any,
    ) -> Registration:
        self._counter += 1
        if status == Registration.Status.CONFIRMED:
            kwargs.setdefault("ticket_number", f"TKT-TEST{self._counter:06d}")
        registration = Registration.objects.create(
            event=event,
            user=user or self.user_factory(),
            status=status,
            **kwargs,
        )
        for ticket_type, quantity in purchases:
            TicketPurchase.objects.create(
                registration=registration,
                ticket_type=ticket_type,
                quantity=quantity,
                unit_price=ticket_type.price,
            )
        return registration


@pytest.fixture
def registration_factory(doorlist_user_factory: DoorlistUserFactory) -> RegistrationFactory:
    return RegistrationFactory(doorlist_user_factory)


@pytest.fixture
def registration(event: Event, attendee: DoorlistUser, registration_factory: RegistrationFactory) -> Registration:
    """A confirmed, not yet checked-in registration for the default event."""
    return registration_factory(event, user=attendee)


@pytest.fixture
def pending_registration(event: Event, registration_factory: RegistrationFactory) -> Registration:
    return registration_factory(event, status=Registration.Status.PENDING)

from decimal import Decimal

import pytest
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken

from accounts.models import DoorlistUser
from events.models import Event, TicketType


def _client_for(user: DoorlistUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def organizer_client(organizer: DoorlistUser) -> Client:
    return _client_for(organizer)


@pytest.fixture
def other_organizer_client(other_organizer: DoorlistUser) -> Client:
    return _client_for(other_organizer)


@pytest.fixture
def platform_admin_client(platform_admin: DoorlistUser) -> Client:
    return _client_for(platform_admin)


@pytest.fixture
def superuser_client(superuser: DoorlistUser) -> Client:
    return _client_for(superuser)


@pytest.fixture
def attendee_client(attendee: DoorlistUser) -> Client:
    return _client_for(attendee)


@pytest.fixture
def general_admission(event: Event) -> TicketType:
    return TicketType.objects.create(
        event=event, name="General Admission", price=Decimal("25.00"), quantity=50, sort_order=1
    )


@pytest.fixture
def vip(event: Event) -> TicketType:
    return TicketType.objects.create(event=event, name="VIP", price=Decimal("80.00"), quantity=10, sort_order=0)

"""Tests for the DoorlistUser model."""

import pytest

from accounts.models import DoorlistUser
from conftest import DoorlistUserFactory

pytestmark = pytest.mark.django_db


def test_display_name_uses_full_name(doorlist_user_factory: DoorlistUserFactory) -> None:
    user = doorlist_user_factory(first_name="Grace", last_name="Hopper")

    assert user.display_name == "Grace Hopper"


def test_display_name_falls_back_to_username(doorlist_user_factory: DoorlistUserFactory) -> None:
    user = doorlist_user_factory(username="door_staff.one@example.com", first_name="", last_name="")

    assert user.display_name == "Door Staff One"


def test_new_users_are_attendees(doorlist_user_factory: DoorlistUserFactory) -> None:
    user = doorlist_user_factory()

    assert user.role == DoorlistUser.Role.ATTENDEE
    assert user.is_platform_admin is False


@pytest.mark.parametrize(
    "role,is_superuser,expected",
    [
        (DoorlistUser.Role.ATTENDEE, False, False),
        (DoorlistUser.Role.ORGANIZER, False, False),
        (DoorlistUser.Role.ADMIN, False, True),
        (DoorlistUser.Role.ATTENDEE, True, True),
    ],
)
def test_is_platform_admin(
    doorlist_user_factory: DoorlistUserFactory, role: str, is_superuser: bool, expected: bool
) -> None:
    user = doorlist_user_factory(role=role, is_superuser=is_superuser)

    assert user.is_platform_admin is expected


def test_admins_queryset(doorlist_user_factory: DoorlistUserFactory) -> None:
    admin = doorlist_user_factory(role=DoorlistUser.Role.ADMIN)
    doorlist_user_factory(role=DoorlistUser.Role.ORGANIZER)

    assert list(DoorlistUser.objects.admins()) == [admin]

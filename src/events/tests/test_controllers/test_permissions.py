import pytest
from django.test import RequestFactory

from accounts.models import DoorlistUser
from events.controllers.permissions import EventCheckInPermission
from events.models import Event

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    "user_fixture, allowed",
    [("organizer", True), ("platform_admin", True), ("other_organizer", False), ("attendee", False)],
)
def test_object_permission_follows_event_management(
    request: pytest.FixtureRequest, event: Event, user_fixture: str, allowed: bool
) -> None:
    user: DoorlistUser = request.getfixturevalue(user_fixture)
    http_request = RequestFactory().get("/")
    http_request.user = user
    permission = EventCheckInPermission("check_in")

    assert permission.action == "check_in"
    assert permission.has_object_permission(http_request, None, event) is allowed  # type: ignore[arg-type]

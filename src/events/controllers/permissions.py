import structlog
from django.http import HttpRequest
from ninja_extra import ControllerBase
from ninja_extra.permissions import BasePermission

from events import models

logger = structlog.get_logger(__name__)


class RootPermission(BasePermission):
    """Object-level permission bound to a named action (``check_in``, ``manage_registrations``)."""

    def __init__(self, action: str) -> None:
        self.action = action

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """Let every authenticated request through to the object check.

        Event-scoped controllers call ``check_object_permissions`` once they have loaded the event.
        """
        return True


class EventCheckInPermission(RootPermission):
    def has_object_permission(
        self,
        request: HttpRequest,
        controller: ControllerBase,
        obj: models.Event,
    ) -> bool:
        """Organizers manage their own events; platform admins manage any event."""
        if obj.can_be_managed_by(request.user):
            return True
        logger.info(
            "event_permission_denied",
            action=self.action,
            event_id=str(obj.id),
            user_id=str(getattr(request.user, "id", None)),
        )
        return False

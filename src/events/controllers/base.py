from uuid import UUID

from django.db.models import QuerySet

from common.controllers import UserAwareController
from events import models
from events.exceptions import RegistrationNotFoundError
from events.service import check_in_service


class EventCheckInBaseController(UserAwareController):
    """Base controller for endpoints scoped to one event.

    Subclasses should be decorated with @api_controller to register routes.
    """

    def get_event(self, event_id: UUID) -> models.Event:
        """Fetch the event and check the caller may manage it."""
        event = check_in_service.get_event(event_id)
        self.check_object_permissions(event)
        return event

    def registrations(self, event: models.Event) -> QuerySet[models.Registration]:
        return models.Registration.objects.for_event(event.id).with_check_in_relations()

    def get_registration(self, event: models.Event, registration_id: UUID) -> models.Registration:
        registration = self.registrations(event).select_related("event").filter(pk=registration_id).first()
        if registration is None:
            raise RegistrationNotFoundError()
        return registration

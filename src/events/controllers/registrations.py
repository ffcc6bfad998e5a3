from uuid import UUID

from ninja import Body
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.schema import ErrorResponse
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import schema
from events.controllers.permissions import EventCheckInPermission
from events.exceptions import InvalidRegistrationStateError
from events.models import Registration
from events.service import check_in_service, qr_service

from .base import EventCheckInBaseController


@api_controller(
    "/events/{event_id}/registrations",
    auth=JWTAuth(),
    permissions=[EventCheckInPermission("manage_registrations")],
    tags=["Registrations"],
    throttle=WriteThrottle(),
)
class RegistrationStateController(EventCheckInBaseController):
    """Confirm and cancel registrations, and issue their QR codes."""

    @route.post(
        "/{registration_id}/confirm",
        url_name="confirm_registration",
        response={200: schema.RegistrationTransitionResponseSchema, 400: ErrorResponse, 404: ErrorResponse},
    )
    def confirm_registration(
        self, event_id: UUID, registration_id: UUID
    ) -> check_in_service.RegistrationTransitionResult:
        """Confirm a pending registration and assign its ticket number."""
        event = self.get_event(event_id)
        registration = self.get_registration(event, registration_id)
        return check_in_service.confirm_registration(registration, self.user())

    @route.post(
        "/{registration_id}/cancel",
        url_name="cancel_registration",
        response={200: schema.RegistrationTransitionResponseSchema, 400: ErrorResponse, 404: ErrorResponse},
    )
    def cancel_registration(
        self,
        event_id: UUID,
        registration_id: UUID,
        payload: schema.CancelRegistrationSchema | None = Body(None),  # type: ignore[type-arg]
    ) -> check_in_service.RegistrationTransitionResult:
        """Cancel a registration. Checked-in registrations must be un-checked first."""
        event = self.get_event(event_id)
        registration = self.get_registration(event, registration_id)
        return check_in_service.cancel_registration(registration, self.user(), payload.reason if payload else None)

    @route.get(
        "/{registration_id}/qr",
        url_name="registration_qr_code",
        response={200: schema.RegistrationQRCodeSchema, 400: ErrorResponse, 404: ErrorResponse},
        throttle=UserDefaultThrottle(),
    )
    def registration_qr_code(self, event_id: UUID, registration_id: UUID) -> schema.RegistrationQRCodeSchema:
        """Signed payload to encode into the ticket's QR code."""
        event = self.get_event(event_id)
        registration = self.get_registration(event, registration_id)
        if registration.status != Registration.Status.CONFIRMED:
            raise InvalidRegistrationStateError("QR codes are only issued for confirmed registrations.")
        return schema.RegistrationQRCodeSchema(
            registration_id=registration.id,
            ticket_number=registration.ticket_number,
            qr_data=qr_service.generate_qr_payload(registration),
        )

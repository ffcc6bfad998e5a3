from uuid import UUID

from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.schema import ErrorResponse
from common.throttling import UserDefaultThrottle
from events import schema
from events.controllers.permissions import EventCheckInPermission
from events.service import ticket_ledger

from .base import EventCheckInBaseController


@api_controller(
    "/events/{event_id}",
    auth=JWTAuth(),
    permissions=[EventCheckInPermission("view_ticket_types")],
    tags=["Ticket types"],
    throttle=UserDefaultThrottle(),
)
class TicketTypeController(EventCheckInBaseController):
    @route.get(
        "/ticket-types",
        url_name="list_ticket_type_availability",
        response={200: list[schema.TicketTypeAvailabilitySchema], 404: ErrorResponse},
    )
    def list_ticket_type_availability(self, event_id: UUID) -> list[ticket_ledger.TicketTypeAvailability]:
        """Price, stock and fill rate of each ticket type."""
        return ticket_ledger.ticket_type_availability(self.get_event(event_id))

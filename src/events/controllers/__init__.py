"""Event-scoped controllers: check-in, registration state and ticket types."""

from .check_in import CheckInController
from .registrations import RegistrationStateController
from .ticket_types import TicketTypeController

CHECK_IN_CONTROLLERS: list[type] = [
    CheckInController,
    RegistrationStateController,
    TicketTypeController,
]

__all__ = [
    "CheckInController",
    "RegistrationStateController",
    "TicketTypeController",
    "CHECK_IN_CONTROLLERS",
]

from .event import Event
from .registration import (
    CheckInAction,
    CheckInHistoryEntry,
    Registration,
    RegistrationMetadata,
    count_seats,
    count_tickets,
)
from .ticket import TicketPurchase, TicketType

__all__ = [
    "CheckInAction",
    "CheckInHistoryEntry",
    "Event",
    "Registration",
    "RegistrationMetadata",
    "TicketPurchase",
    "TicketType",
    "count_seats",
    "count_tickets",
]

"""Domain errors raised by the check-in and registration services.

Every error carries a stable machine-readable ``code``; the API layer maps the
base classes to HTTP statuses and bulk operations record the code per entry.
"""


class CheckInError(Exception):
    """Base class for check-in and registration-state errors."""

    code = "CHECK_IN_ERROR"
    default_detail = "Check-in operation failed."

    def __init__(self, detail: str | None = None) -> None:
        """Store the human-readable detail."""
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(CheckInError):
    code = "NOT_FOUND"
    default_detail = "Not found."


class EventNotFoundError(NotFoundError):
    code = "EVENT_NOT_FOUND"
    default_detail = "Event not found."


class RegistrationNotFoundError(NotFoundError):
    code = "REGISTRATION_NOT_FOUND"
    default_detail = "Registration not found."


class CheckInPermissionDeniedError(CheckInError):
    """Raised when the actor may not run check-in for the event."""

    code = "FORBIDDEN"
    default_detail = "You do not have permission to manage check-in for this event."


class InvalidRegistrationStateError(CheckInError):
    """Raised when a transition is not allowed from the registration's current state."""

    code = "INVALID_STATE"
    default_detail = "This registration is not in a state that allows this operation."


class EventCapacityExceededError(InvalidRegistrationStateError):
    code = "EVENT_FULL"
    default_detail = "The event is at capacity."


class CheckInValidationError(CheckInError):
    code = "VALIDATION_ERROR"
    default_detail = "Invalid request."


class MissingFieldError(CheckInValidationError):
    code = "MISSING_FIELD"
    default_detail = "registration_id, ticket_number or qr_data is required."


class InvalidQRCodeError(CheckInValidationError):
    code = "INVALID_QR_CODE"
    default_detail = "The QR code could not be read or has been tampered with."


class UnsupportedExportFormatError(CheckInValidationError):
    code = "UNSUPPORTED_FORMAT"
    default_detail = "Unsupported export format. Use 'csv' or 'json'."


class StorageError(CheckInError):
    """Raised when the database rejects or cannot complete a write."""

    code = "STORAGE_ERROR"
    default_detail = "The operation could not be saved. Please retry."


class TicketTypeSoldOutError(CheckInError):
    code = "SOLD_OUT"
    default_detail = "Not enough tickets of this type are left."

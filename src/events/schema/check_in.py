"""Check-in, registration-state and ticket-availability schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from django.conf import settings
from ninja import ModelSchema, Schema
from pydantic import Field

from accounts.schema import AttendeeSchema, MinimalUserSchema
from common.schema import NoteString, StrippedString
from events.models import Event, Registration


class EventSummarySchema(ModelSchema):
    class Meta:
        model = Event
        fields = ["id", "title", "capacity", "start_date", "end_date"]


class EventCapacitySchema(Schema):
    capacity: int
    seats_taken: int
    available_spots: int
    fill_percentage: int
    is_full: bool


class RegistrationCheckInSchema(ModelSchema):
    user: AttendeeSchema
    checked_in_by: MinimalUserSchema | None = None
    quantity: int
    check_in_notes: str | None = None

    class Meta:
        model = Registration
        fields = ["id", "ticket_number", "status", "checked_in", "checked_in_at", "created_at"]

    @staticmethod
    def resolve_quantity(obj: Registration) -> int:
        """Ticket count, not the requested quantity column."""
        return obj.ticket_count()

    @staticmethod
    def resolve_check_in_notes(obj: Registration) -> str | None:
        return obj.check_in_notes


# ---- Aggregates ----


class CheckInStatisticsSchema(Schema):
    total_registrations: int
    checked_in_count: int
    not_checked_in_count: int
    check_in_rate: int
    total_tickets: int
    checked_in_tickets: int
    not_checked_in_tickets: int
    ticket_check_in_rate: int


class TimelineBucketSchema(Schema):
    hour: int
    count: int


class RecentCheckInSchema(Schema):
    registration_id: UUID
    ticket_number: str | None = None
    first_name: str
    last_name: str
    email: str
    image_url: str | None = None
    quantity: int
    checked_in_at: datetime
    checked_in_by_name: str | None = None
    notes: str | None = None


class CheckInStatsSchema(Schema):
    statistics: CheckInStatisticsSchema
    timeline: list[TimelineBucketSchema]
    recent_check_ins: list[RecentCheckInSchema]


class CheckInDataSchema(CheckInStatsSchema):
    event: EventSummarySchema
    event_capacity: EventCapacitySchema
    registrations: list[RegistrationCheckInSchema]


# ---- Check-in ----


class CheckInRequestSchema(Schema):
    registration_id: UUID | None = None
    ticket_number: StrippedString | None = None
    qr_data: StrippedString | None = None
    notes: NoteString | None = None


class CheckInResponseSchema(Schema):
    success: bool
    already_checked_in: bool
    registration: RegistrationCheckInSchema
    checked_in_at: datetime
    message: str
    warnings: list[str] = Field(default_factory=list)


class UndoCheckInRequestSchema(Schema):
    registration_id: UUID
    reason: NoteString | None = None


class UndoCheckInResponseSchema(Schema):
    success: bool
    registration: RegistrationCheckInSchema
    message: str
    warnings: list[str] = Field(default_factory=list)


class BulkCheckInRequestSchema(Schema):
    registration_ids: list[StrippedString] = Field(min_length=1, max_length=settings.BULK_CHECK_IN_MAX_IDS)
    notes: NoteString | None = None


class BulkCheckInSummarySchema(Schema):
    total: int
    successful: int
    already_checked_in: int
    failed: int


class BulkCheckInEntrySchema(Schema):
    registration_id: str
    outcome: str
    checked_in_at: datetime | None = None
    error_code: str | None = None
    message: str | None = None


class BulkCheckInResponseSchema(Schema):
    success: bool
    summary: BulkCheckInSummarySchema
    results: list[BulkCheckInEntrySchema]
    message: str
    warnings: list[str] = Field(default_factory=list)


class CheckInExportRowSchema(Schema):
    registration_id: str
    ticket_number: str
    first_name: str
    last_name: str
    email: str
    quantity: int
    status: str
    checked_in: bool
    checked_in_at: str | None = None
    registered_at: str
    notes: str


# ---- Registrations and ticket types ----


class CancelRegistrationSchema(Schema):
    reason: NoteString | None = None


class RegistrationTransitionResponseSchema(Schema):
    registration: RegistrationCheckInSchema
    message: str
    warnings: list[str] = Field(default_factory=list)


class RegistrationQRCodeSchema(Schema):
    registration_id: UUID
    ticket_number: str | None = None
    qr_data: str


class TicketTypeAvailabilitySchema(Schema):
    id: UUID
    name: str
    description: str
    price: Decimal
    current_price: Decimal
    is_early_bird: bool
    quantity: int
    quantity_sold: int
    available: int
    is_sold_out: bool
    fill_rate: int

from .check_in import (
    BulkCheckInEntrySchema,
    BulkCheckInRequestSchema,
    BulkCheckInResponseSchema,
    BulkCheckInSummarySchema,
    CancelRegistrationSchema,
    CheckInDataSchema,
    CheckInExportRowSchema,
    CheckInRequestSchema,
    CheckInResponseSchema,
    CheckInStatisticsSchema,
    CheckInStatsSchema,
    EventCapacitySchema,
    EventSummarySchema,
    RecentCheckInSchema,
    RegistrationCheckInSchema,
    RegistrationQRCodeSchema,
    RegistrationTransitionResponseSchema,
    TicketTypeAvailabilitySchema,
    TimelineBucketSchema,
    UndoCheckInRequestSchema,
    UndoCheckInResponseSchema,
)

__all__ = [
    "BulkCheckInEntrySchema",
    "BulkCheckInRequestSchema",
    "BulkCheckInResponseSchema",
    "BulkCheckInSummarySchema",
    "CancelRegistrationSchema",
    "CheckInDataSchema",
    "CheckInExportRowSchema",
    "CheckInRequestSchema",
    "CheckInResponseSchema",
    "CheckInStatisticsSchema",
    "CheckInStatsSchema",
    "EventCapacitySchema",
    "EventSummarySchema",
    "RecentCheckInSchema",
    "RegistrationCheckInSchema",
    "RegistrationQRCodeSchema",
    "RegistrationTransitionResponseSchema",
    "TicketTypeAvailabilitySchema",
    "TimelineBucketSchema",
    "UndoCheckInRequestSchema",
    "UndoCheckInResponseSchema",
]

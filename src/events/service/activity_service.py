"""System-wide activity log, written after a state change has committed.

Failures here never undo or fail the operation they describe: they are logged
and handed back to the caller as a warning string.
"""

import typing as t

import structlog
from django.db import DatabaseError, transaction

from common.models import ActivityLog
from events.models import Event, Registration

if t.TYPE_CHECKING:
    from accounts.models import DoorlistUser

logger = structlog.get_logger(__name__)

ACTIVITY_LOG_WARNING = "The action succeeded but could not be recorded in the activity log."


def record_activity(
    activity_type: ActivityLog.ActivityType,
    actor: "DoorlistUser | None",
    event: Event | None,
    *,
    registration: Registration | None = None,
    detail: dict[str, t.Any] | None = None,
) -> str | None:
    """Append one activity log row.

    Returns:
        None on success, a warning message if the row could not be written.
    """
    try:
        with transaction.atomic():
            ActivityLog.objects.create(
                activity_type=activity_type,
                actor=actor,
                event=event,
                registration_id=registration.id if registration else None,
                detail=detail or {},
            )
    except DatabaseError:
        logger.warning(
            "activity_log_write_failed",
            activity_type=str(activity_type),
            event_id=str(event.id) if event else None,
            registration_id=str(registration.id) if registration else None,
            exc_info=True,
        )
        return ACTIVITY_LOG_WARNING
    return None

"""Flattened check-in export for an event.

CSV and JSON carry exactly the same rows and fields; only the encoding differs.
"""

import csv
import io
import typing as t
from dataclasses import asdict, dataclass, field
from datetime import datetime

import structlog
from django.db.models import F
from django.utils import timezone

from common.models import ActivityLog
from events.exceptions import UnsupportedExportFormatError
from events.models import Event, Registration
from events.service.activity_service import record_activity

if t.TYPE_CHECKING:
    from accounts.models import DoorlistUser

logger = structlog.get_logger(__name__)

SUPPORTED_FORMATS = ("csv", "json")

# Carries non-fatal export warnings, since the body is the export itself.
WARNING_HEADER = "X-Doorlist-Warning"

CSV_HEADERS = (
    "Registration ID",
    "Ticket Number",
    "First Name",
    "Last Name",
    "Email",
    "Quantity",
    "Status",
    "Checked In",
    "Check-in Time",
    "Registration Date",
    "Notes",
)


@dataclass(frozen=True)
class ExportRow:
    registration_id: str
    ticket_number: str
    first_name: str
    last_name: str
    email: str
    quantity: int
    status: str
    checked_in: bool
    checked_in_at: str | None
    registered_at: str
    notes: str

    def as_csv_row(self) -> list[t.Any]:
        return [
            self.registration_id,
            self.ticket_number,
            self.first_name,
            self.last_name,
            self.email,
            self.quantity,
            self.status,
            "Yes" if self.checked_in else "No",
            self.checked_in_at or "",
            self.registered_at,
            self.notes,
        ]


def validate_format(export_format: str) -> str:
    normalized = (export_format or "").lower()
    if normalized not in SUPPORTED_FORMATS:
        raise UnsupportedExportFormatError()
    return normalized


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def export_rows(event: Event) -> list[ExportRow]:
    """All of the event's registrations, checked-in first, most recent first."""
    registrations = (
        Registration.objects.for_event(event.id)
        .with_check_in_relations()
        .order_by("-checked_in", F("checked_in_at").desc(nulls_last=True), "-created_at")
    )
    return [
        ExportRow(
            registration_id=str(r.id),
            ticket_number=r.ticket_number or "",
            first_name=r.user.first_name,
            last_name=r.user.last_name,
            email=r.user.email,
            quantity=r.ticket_count(),
            status=r.status,
            checked_in=r.checked_in,
            checked_in_at=_isoformat(r.checked_in_at),
            registered_at=t.cast(str, _isoformat(r.created_at)),
            notes=r.check_in_notes or "",
        )
        for r in registrations
    ]


def export_filename(event: Event, export_format: str, *, now: datetime | None = None) -> str:
    day = timezone.localdate(now or timezone.now())
    return f"event-{event.id}-checkins-{day.isoformat()}.{export_format}"


def render_csv(rows: t.Sequence[ExportRow]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADERS)
    for row in rows:
        writer.writerow(row.as_csv_row())
    return buffer.getvalue()


def render_json(rows: t.Sequence[ExportRow]) -> list[dict[str, t.Any]]:
    return [asdict(row) for row in rows]


@dataclass(frozen=True)
class CheckInExport:
    export_format: str
    filename: str
    rows: list[ExportRow]
    warnings: list[str] = field(default_factory=list)


def build_export(event: Event, actor: "DoorlistUser", export_format: str) -> CheckInExport:
    """Validate the format, collect the rows and note the export in the activity log."""
    normalized = validate_format(export_format)
    rows = export_rows(event)
    logger.info("check_in_export", event_id=str(event.id), actor_id=str(actor.id), format=normalized, rows=len(rows))
    warning = record_activity(
        ActivityLog.ActivityType.CHECK_IN_EXPORT,
        actor,
        event,
        detail={"format": normalized, "rows": len(rows)},
    )
    return CheckInExport(
        export_format=normalized,
        filename=export_filename(event, normalized),
        rows=rows,
        warnings=[warning] if warning else [],
    )

import typing as t
from uuid import UUID

from django.db.models import F
from django.http import HttpResponse, JsonResponse
from ninja import Query
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.schema import ErrorResponse
from common.throttling import ExportThrottle, UserDefaultThrottle, WriteThrottle
from events import schema
from events.controllers.permissions import EventCheckInPermission
from events.service import check_in_service, check_in_stats, export_service, ticket_ledger

from .base import EventCheckInBaseController


@api_controller(
    "/events/{event_id}",
    auth=JWTAuth(),
    permissions=[EventCheckInPermission("check_in")],
    tags=["Check-in"],
    throttle=WriteThrottle(),
)
class CheckInController(EventCheckInBaseController):
    """Door check-in for a single event."""

    @route.get(
        "/check-in",
        url_name="get_check_in_data",
        response={200: schema.CheckInDataSchema, 404: ErrorResponse},
        throttle=UserDefaultThrottle(),
    )
    def get_check_in_data(self, event_id: UUID) -> dict[str, t.Any]:
        """Everything the check-in dashboard shows: statistics, hourly timeline, recent check-ins and registrations."""
        event = self.get_event(event_id)
        snapshot = check_in_stats.get_statistics(event)
        registrations = self.registrations(event).order_by(
            F("checked_in_at").desc(nulls_last=True), "-created_at"
        )
        return {
            "event": event,
            "event_capacity": ticket_ledger.event_capacity(event),
            "statistics": snapshot.statistics,
            "timeline": snapshot.timeline,
            "recent_check_ins": snapshot.recent_check_ins,
            "registrations": list(registrations),
        }

    @route.get(
        "/check-in/stats",
        url_name="get_check_in_stats",
        response={200: schema.CheckInStatsSchema, 404: ErrorResponse},
        throttle=UserDefaultThrottle(),
    )
    def get_check_in_stats(self, event_id: UUID) -> check_in_stats.CheckInSnapshot:
        """Statistics only, for polling while the doors are open."""
        return check_in_stats.get_statistics(self.get_event(event_id))

    @route.post(
        "/check-in",
        url_name="check_in",
        response={200: schema.CheckInResponseSchema, 400: ErrorResponse, 404: ErrorResponse},
    )
    def check_in(self, event_id: UUID, payload: schema.CheckInRequestSchema) -> check_in_service.CheckInResult:
        """Check an attendee in by registration id, ticket number or scanned QR code.

        Checking in someone who is already checked in succeeds with ``already_checked_in`` set.
        """
        event = self.get_event(event_id)
        registration_id = check_in_service.resolve_registration_id(
            event,
            registration_id=payload.registration_id,
            ticket_number=payload.ticket_number,
            qr_data=payload.qr_data,
        )
        return check_in_service.check_in(event, registration_id, self.user(), payload.notes)

    @route.put(
        "/check-in",
        url_name="undo_check_in",
        response={200: schema.UndoCheckInResponseSchema, 400: ErrorResponse, 404: ErrorResponse},
    )
    def undo_check_in(
        self, event_id: UUID, payload: schema.UndoCheckInRequestSchema
    ) -> check_in_service.UndoCheckInResult:
        """Undo a check-in, optionally recording why."""
        return self._undo(event_id, payload)

    @route.delete(
        "/check-in",
        url_name="undo_check_in_delete",
        response={200: schema.UndoCheckInResponseSchema, 400: ErrorResponse, 404: ErrorResponse},
    )
    def undo_check_in_delete(
        self, event_id: UUID, payload: schema.UndoCheckInRequestSchema
    ) -> check_in_service.UndoCheckInResult:
        """Same as PUT, for clients that model undo as a deletion."""
        return self._undo(event_id, payload)

    def _undo(self, event_id: UUID, payload: schema.UndoCheckInRequestSchema) -> check_in_service.UndoCheckInResult:
        event = self.get_event(event_id)
        return check_in_service.undo_check_in(event, payload.registration_id, self.user(), payload.reason)

    @route.post(
        "/check-in/bulk",
        url_name="bulk_check_in",
        response={200: schema.BulkCheckInResponseSchema, 400: ErrorResponse, 404: ErrorResponse},
    )
    def bulk_check_in(
        self, event_id: UUID, payload: schema.BulkCheckInRequestSchema
    ) -> check_in_service.BulkCheckInResult:
        """Check in many registrations at once; each id succeeds or fails on its own."""
        event = self.get_event(event_id)
        return check_in_service.bulk_check_in(event, payload.registration_ids, self.user(), payload.notes)

    @route.get(
        "/check-in/export",
        url_name="export_check_ins",
        response={200: list[schema.CheckInExportRowSchema], 400: ErrorResponse, 404: ErrorResponse},
        throttle=ExportThrottle(),
    )
    def export_check_ins(
        self,
        event_id: UUID,
        export_format: str = Query("csv", alias="format"),  # type: ignore[type-arg]
    ) -> HttpResponse:
        """Export all registrations with their check-in state as CSV (default) or JSON.

        Non-fatal problems, such as a failed activity log write, are reported in the
        ``X-Doorlist-Warning`` header.
        """
        event = self.get_event(event_id)
        export = export_service.build_export(event, self.user(), export_format)
        response: HttpResponse
        if export.export_format == "json":
            response = JsonResponse(export_service.render_json(export.rows), safe=False)
        else:
            response = HttpResponse(export_service.render_csv(export.rows), content_type="text/csv; charset=utf-8")
            response["Content-Disposition"] = f'attachment; filename="{export.filename}"'
        if export.warnings:
            response[export_service.WARNING_HEADER] = "; ".join(export.warnings)
        return response

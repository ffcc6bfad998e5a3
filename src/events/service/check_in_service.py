"""Registration state machine: check-in, undo, bulk check-in, confirm and cancel.

Every transition follows the same shape:

1. lock the registration row inside ``transaction.atomic()``;
2. validate the transition against the locked state;
3. build the new metadata through ``append_history``;
4. persist with a conditional ``UPDATE ... WHERE <expected state>`` so that a
   concurrent caller that got there first is detected by a zero row count;
5. after the commit, write the activity log entry (best effort).

Database failures surface as ``StorageError``. A failure inside the
transaction leaves no partial effect; a failure while re-reading the committed
row leaves the transition in place.
"""

import secrets
import string
import typing as t
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import urlparse
from uuid import UUID

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from common.models import ActivityLog
from events.exceptions import (
    CheckInError,
    CheckInPermissionDeniedError,
    CheckInValidationError,
    EventCapacityExceededError,
    EventNotFoundError,
    InvalidQRCodeError,
    InvalidRegistrationStateError,
    MissingFieldError,
    RegistrationNotFoundError,
    StorageError,
)
from events.models import CheckInAction, Event, Registration, TicketPurchase
from events.service import ticket_ledger
from events.service.activity_service import record_activity
from events.service.history import append_history, dump_metadata
from events.service.qr_service import verify_qr_payload

if t.TYPE_CHECKING:
    from accounts.models import DoorlistUser

logger = structlog.get_logger(__name__)

Clock = t.Callable[[], datetime]

TICKET_NUMBER_PREFIX = "TKT-"
TICKET_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
TICKET_NUMBER_LENGTH = 10


class BulkOutcome:
    CHECKED_IN = "checked_in"
    ALREADY_CHECKED_IN = "already_checked_in"
    FAILED = "failed"


@dataclass
class CheckInResult:
    registration: Registration
    already_checked_in: bool
    checked_in_at: datetime
    message: str
    warnings: list[str] = field(default_factory=list)
    success: bool = True


@dataclass
class UndoCheckInResult:
    registration: Registration
    message: str
    warnings: list[str] = field(default_factory=list)
    success: bool = True


@dataclass
class RegistrationTransitionResult:
    """Outcome of confirming or cancelling a registration."""

    registration: Registration
    message: str
    warnings: list[str] = field(default_factory=list)


@dataclass
class BulkCheckInEntry:
    registration_id: str
    outcome: str
    checked_in_at: datetime | None = None
    error_code: str | None = None
    message: str | None = None


@dataclass
class BulkCheckInSummary:
    total: int = 0
    successful: int = 0
    already_checked_in: int = 0
    failed: int = 0


@dataclass
class BulkCheckInResult:
    """Result of a bulk check-in with per-entry outcomes.

    Attributes:
        summary: Counts per outcome. The categories are disjoint and add up to ``total``.
        results: One entry per requested id, in request order.
        warnings: Non-fatal messages collected from individual check-ins.
    """

    summary: BulkCheckInSummary = field(default_factory=BulkCheckInSummary)
    results: list[BulkCheckInEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.summary.failed == 0

    @property
    def message(self) -> str:
        return (
            f"Checked in {self.summary.successful} of {self.summary.total} registrations "
            f"({self.summary.already_checked_in} already checked in, {self.summary.failed} failed)."
        )


# ---- Lookups and guards ----


def get_event(event_id: UUID) -> Event:
    try:
        return Event.objects.select_related("organizer").get(pk=event_id)
    except Event.DoesNotExist:
        raise EventNotFoundError()


def ensure_can_manage(event: Event, actor: "DoorlistUser") -> None:
    if not event.can_be_managed_by(actor):
        raise CheckInPermissionDeniedError()


def _lock_registration(event: Event, registration_id: UUID) -> Registration:
    """Lock and return the registration; it must belong to ``event``."""
    registration = Registration.objects.select_for_update().filter(pk=registration_id, event=event).first()
    if registration is None:
        raise RegistrationNotFoundError()
    return registration


def _reload(registration_id: UUID) -> Registration:
    return Registration.objects.with_check_in_relations().get(pk=registration_id)


def resolve_registration_id(
    event: Event,
    registration_id: UUID | None = None,
    ticket_number: str | None = None,
    qr_data: str | None = None,
) -> UUID:
    """Work out which registration a check-in request refers to.

    ``qr_data`` is either a URL whose last path segment is the registration id,
    or a signed JSON payload produced by ``qr_service.generate_qr_payload``.
    """
    if registration_id is not None:
        return registration_id
    if ticket_number:
        found = (
            Registration.objects.filter(event=event, ticket_number=ticket_number.strip())
            .values_list("id", flat=True)
            .first()
        )
        if found is None:
            raise RegistrationNotFoundError()
        return found
    if qr_data:
        return _registration_id_from_qr(event, qr_data.strip())
    raise MissingFieldError()


def _registration_id_from_qr(event: Event, qr_data: str) -> UUID:
    if qr_data.startswith("{"):
        payload = verify_qr_payload(qr_data)
        if payload is None:
            raise InvalidQRCodeError()
        if str(payload["event_id"]) != str(event.id):
            raise RegistrationNotFoundError("This ticket is for a different event.")
        return UUID(str(payload["registration_id"]))
    segment = urlparse(qr_data).path.rstrip("/").rsplit("/", 1)[-1]
    try:
        return UUID(segment)
    except ValueError:
        raise InvalidQRCodeError()


def generate_ticket_number() -> str:
    """A fresh ``TKT-`` number not yet used by any registration."""
    while True:
        suffix = "".join(secrets.choice(TICKET_NUMBER_ALPHABET) for _ in range(TICKET_NUMBER_LENGTH))
        candidate = f"{TICKET_NUMBER_PREFIX}{suffix}"
        if not Registration.objects.filter(ticket_number=candidate).exists():
            return candidate


# ---- Check-in ----


def _check_in(
    event: Event,
    registration_id: UUID,
    actor: "DoorlistUser",
    notes: str | None,
    now: Clock,
    action: CheckInAction,
) -> CheckInResult:
    try:
        with transaction.atomic():
            registration = _lock_registration(event, registration_id)
            if registration.status != Registration.Status.CONFIRMED:
                raise InvalidRegistrationStateError(
                    f"Only confirmed registrations can be checked in (status is {registration.status})."
                )
            updated = 0
            timestamp = now()
            if not registration.checked_in:
                metadata = append_history(registration.metadata, action, actor, timestamp=timestamp, notes=notes)
                updated = Registration.objects.filter(pk=registration.pk, checked_in=False).update(
                    checked_in=True,
                    checked_in_at=timestamp,
                    checked_in_by=actor,
                    metadata=dump_metadata(metadata),
                    updated_at=timestamp,
                )
        registration = _reload(registration_id)
    except DatabaseError as e:
        logger.error("check_in_storage_error", event_id=str(event.id), registration_id=str(registration_id))
        raise StorageError() from e

    if not updated:
        return CheckInResult(
            registration=registration,
            already_checked_in=True,
            checked_in_at=t.cast(datetime, registration.checked_in_at),
            message=f"{registration.user.get_display_name()} is already checked in.",
        )

    logger.info(
        "registration_checked_in",
        event_id=str(event.id),
        registration_id=str(registration.id),
        actor_id=str(actor.id),
        action=str(action),
    )
    detail: dict[str, t.Any] = {"notes": notes}
    if action == CheckInAction.BULK_CHECK_IN:
        detail["source"] = "bulk"
    warning = record_activity(
        ActivityLog.ActivityType.CHECK_IN, actor, event, registration=registration, detail=detail
    )
    return CheckInResult(
        registration=registration,
        already_checked_in=False,
        checked_in_at=timestamp,
        message=f"{registration.user.get_display_name()} checked in.",
        warnings=[warning] if warning else [],
    )


def check_in(
    event: Event,
    registration_id: UUID,
    actor: "DoorlistUser",
    notes: str | None = None,
    *,
    now: Clock = timezone.now,
) -> CheckInResult:
    """Check a confirmed registration in.

    Checking in an already checked-in registration is a successful no-op that
    reports the existing ``checked_in_at``; notes given on that path are dropped.

    Raises:
        CheckInPermissionDeniedError: the actor may not manage this event.
        RegistrationNotFoundError: no such registration for this event.
        InvalidRegistrationStateError: the registration is not confirmed.
        StorageError: the write failed.
    """
    ensure_can_manage(event, actor)
    return _check_in(event, registration_id, actor, notes, now, CheckInAction.CHECK_IN)


def undo_check_in(
    event: Event,
    registration_id: UUID,
    actor: "DoorlistUser",
    reason: str | None = None,
    *,
    now: Clock = timezone.now,
) -> UndoCheckInResult:
    """Revert a check-in. Undoing a registration that is not checked in is refused."""
    ensure_can_manage(event, actor)
    try:
        with transaction.atomic():
            registration = _lock_registration(event, registration_id)
            if not registration.checked_in:
                raise InvalidRegistrationStateError("This registration is not checked in.")
            timestamp = now()
            metadata = append_history(
                registration.metadata, CheckInAction.CHECK_IN_UNDO, actor, timestamp=timestamp, reason=reason
            )
            updated = Registration.objects.filter(pk=registration.pk, checked_in=True).update(
                checked_in=False,
                checked_in_at=None,
                checked_in_by=None,
                metadata=dump_metadata(metadata),
                updated_at=timestamp,
            )
            if not updated:
                raise InvalidRegistrationStateError("This registration is not checked in.")
        registration = _reload(registration_id)
    except DatabaseError as e:
        logger.error("undo_check_in_storage_error", event_id=str(event.id), registration_id=str(registration_id))
        raise StorageError() from e

    logger.info(
        "check_in_undone", event_id=str(event.id), registration_id=str(registration.id), actor_id=str(actor.id)
    )
    warning = record_activity(
        ActivityLog.ActivityType.CHECK_IN_UNDO, actor, event, registration=registration, detail={"reason": reason}
    )
    return UndoCheckInResult(
        registration=registration,
        message=f"Check-in undone for {registration.user.get_display_name()}.",
        warnings=[warning] if warning else [],
    )


def bulk_check_in(
    event: Event,
    registration_ids: Sequence[str | UUID],
    actor: "DoorlistUser",
    notes: str | None = None,
    *,
    now: Clock = timezone.now,
) -> BulkCheckInResult:
    """Check in many registrations, each independently.

    A failing id does not roll back the others. Permission is checked once for
    the whole batch before anything is processed.
    """
    ensure_can_manage(event, actor)
    max_ids = settings.BULK_CHECK_IN_MAX_IDS
    if not registration_ids or len(registration_ids) > max_ids:
        raise CheckInValidationError(f"Provide between 1 and {max_ids} registration ids.")

    result = BulkCheckInResult()
    for raw_id in registration_ids:
        result.results.append(_bulk_entry(event, raw_id, actor, notes, now, result))

    summary = result.summary
    summary.total = len(result.results)
    for entry in result.results:
        if entry.outcome == BulkOutcome.CHECKED_IN:
            summary.successful += 1
        elif entry.outcome == BulkOutcome.ALREADY_CHECKED_IN:
            summary.already_checked_in += 1
        else:
            summary.failed += 1
    logger.info(
        "bulk_check_in_completed",
        event_id=str(event.id),
        actor_id=str(actor.id),
        total=summary.total,
        successful=summary.successful,
        already_checked_in=summary.already_checked_in,
        failed=summary.failed,
    )
    return result


def _bulk_entry(
    event: Event,
    raw_id: str | UUID,
    actor: "DoorlistUser",
    notes: str | None,
    now: Clock,
    result: BulkCheckInResult,
) -> BulkCheckInEntry:
    try:
        registration_id = raw_id if isinstance(raw_id, UUID) else UUID(str(raw_id))
    except ValueError:
        error = CheckInValidationError("Invalid registration id.")
        return BulkCheckInEntry(
            registration_id=str(raw_id), outcome=BulkOutcome.FAILED, error_code=error.code, message=error.detail
        )
    try:
        outcome = _check_in(event, registration_id, actor, notes, now, CheckInAction.BULK_CHECK_IN)
    except CheckInError as e:
        return BulkCheckInEntry(
            registration_id=str(registration_id), outcome=BulkOutcome.FAILED, error_code=e.code, message=e.detail
        )
    result.warnings.extend(outcome.warnings)
    return BulkCheckInEntry(
        registration_id=str(registration_id),
        outcome=BulkOutcome.ALREADY_CHECKED_IN if outcome.already_checked_in else BulkOutcome.CHECKED_IN,
        checked_in_at=outcome.checked_in_at,
        message=outcome.message,
    )


# ---- Confirmation and cancellation ----


def confirm_registration(
    registration: Registration, actor: "DoorlistUser", *, now: Clock = timezone.now
) -> RegistrationTransitionResult:
    """Move a pending registration to confirmed and assign its ticket number.

    Ticket purchases are allocated from the ledger, which refuses to oversell
    a ticket type. A registration without purchases must fit into the
    event's remaining seats.

    Raises:
        InvalidRegistrationStateError: the registration is not pending.
        EventCapacityExceededError: not enough seats are left.
        TicketTypeSoldOutError: a purchased ticket type has too few units left.
    """
    event = registration.event
    ensure_can_manage(event, actor)
    try:
        with transaction.atomic():
            Event.objects.select_for_update().filter(pk=event.pk).first()
            locked = _lock_registration(event, registration.pk)
            if locked.status != Registration.Status.PENDING:
                raise InvalidRegistrationStateError(
                    f"Only pending registrations can be confirmed (status is {locked.status})."
                )
            purchases = list(TicketPurchase.objects.filter(registration=locked))
            if purchases:
                for purchase in purchases:
                    ticket_ledger.allocate(purchase.ticket_type_id, purchase.quantity)
            elif ticket_ledger.event_capacity(event).available_spots < locked.seat_count():
                raise EventCapacityExceededError()
            timestamp = now()
            metadata = append_history(
                locked.metadata, CheckInAction.REGISTRATION_CONFIRMED, actor, timestamp=timestamp
            )
            Registration.objects.filter(pk=locked.pk, status=Registration.Status.PENDING).update(
                status=Registration.Status.CONFIRMED,
                ticket_number=locked.ticket_number or generate_ticket_number(),
                metadata=dump_metadata(metadata),
                updated_at=timestamp,
            )
        confirmed = _reload(registration.pk)
    except DatabaseError as e:
        logger.error("confirm_registration_storage_error", registration_id=str(registration.pk))
        raise StorageError() from e

    logger.info("registration_confirmed", event_id=str(event.id), registration_id=str(confirmed.id))
    warning = record_activity(
        ActivityLog.ActivityType.REGISTRATION_CONFIRMED,
        actor,
        event,
        registration=confirmed,
        detail={"ticket_number": confirmed.ticket_number},
    )
    return RegistrationTransitionResult(
        registration=confirmed,
        message=f"Registration {confirmed.ticket_number} confirmed.",
        warnings=[warning] if warning else [],
    )


def cancel_registration(
    registration: Registration,
    actor: "DoorlistUser",
    reason: str | None = None,
    *,
    now: Clock = timezone.now,
) -> RegistrationTransitionResult:
    """Cancel a pending or confirmed registration.

    A confirmed registration returns its purchased tickets to the ledger. A
    checked-in registration must have its check-in undone first.
    """
    event = registration.event
    ensure_can_manage(event, actor)
    try:
        with transaction.atomic():
            locked = _lock_registration(event, registration.pk)
            if locked.status == Registration.Status.CANCELLED:
                raise InvalidRegistrationStateError("This registration is already cancelled.")
            if locked.checked_in:
                raise InvalidRegistrationStateError("Undo the check-in before cancelling this registration.")
            timestamp = now()
            metadata = append_history(
                locked.metadata, CheckInAction.REGISTRATION_CANCELLED, actor, timestamp=timestamp, reason=reason
            )
            updated = Registration.objects.filter(pk=locked.pk, status=locked.status, checked_in=False).update(
                status=Registration.Status.CANCELLED, metadata=dump_metadata(metadata), updated_at=timestamp
            )
            if not updated:
                raise InvalidRegistrationStateError()
            if locked.status == Registration.Status.CONFIRMED:
                for purchase in TicketPurchase.objects.filter(registration=locked):
                    ticket_ledger.release(purchase.ticket_type_id, purchase.quantity)
        cancelled = _reload(registration.pk)
    except DatabaseError as e:
        logger.error("cancel_registration_storage_error", registration_id=str(registration.pk))
        raise StorageError() from e

    logger.info("registration_cancelled", event_id=str(event.id), registration_id=str(cancelled.id))
    warning = record_activity(
        ActivityLog.ActivityType.REGISTRATION_CANCELLED,
        actor,
        event,
        registration=cancelled,
        detail={"reason": reason},
    )
    return RegistrationTransitionResult(
        registration=cancelled,
        message="Registration cancelled.",
        warnings=[warning] if warning else [],
    )

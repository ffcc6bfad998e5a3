import typing as t
import uuid
from datetime import datetime

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from common.models import TimeStampedModel


class CheckInAction(models.TextChoices):
    CHECK_IN = "CHECK_IN", "Checked in"
    BULK_CHECK_IN = "BULK_CHECK_IN", "Checked in (bulk)"
    CHECK_IN_UNDO = "CHECK_IN_UNDO", "Check-in undone"
    REGISTRATION_CONFIRMED = "REGISTRATION_CONFIRMED", "Registration confirmed"
    REGISTRATION_CANCELLED = "REGISTRATION_CANCELLED", "Registration cancelled"


class CheckInHistoryEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    action: CheckInAction
    timestamp: datetime
    actor_id: uuid.UUID | None = None
    actor_name: str = ""
    notes: str | None = None
    reason: str | None = None


class RegistrationMetadata(BaseModel):
    """Typed view of ``Registration.metadata``.

    The history is append-only: entries are added through
    ``events.service.history.append_history`` and never edited.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)
    check_in_notes: str | None = None
    undo_reason: str | None = None
    check_in_history: tuple[CheckInHistoryEntry, ...] = Field(default_factory=tuple)


def _validate_metadata(value: dict[str, t.Any]) -> None:
    try:
        RegistrationMetadata.model_validate(value or {})
    except PydanticValidationError as e:
        raise DjangoValidationError(
            [f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()]
        )


def count_tickets(purchase_quantities: t.Iterable[int]) -> int:
    """Number of admissions a registration stands for.

    The sum of its purchase quantities, or 1 when it has no purchases.
    """
    total = sum(purchase_quantities)
    return total if total > 0 else 1


def count_seats(purchase_quantities: t.Iterable[int], requested_quantity: int) -> int:
    """Capacity a confirmed registration takes up.

    The sum of its purchase quantities, or the quantity requested at
    registration time when it has no purchases.
    """
    total = sum(purchase_quantities)
    return total if total > 0 else max(requested_quantity, 1)


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def for_event(self, event_id: uuid.UUID) -> t.Self:
        return self.filter(event_id=event_id)

    def confirmed(self) -> t.Self:
        return self.filter(status=Registration.Status.CONFIRMED)

    def with_check_in_relations(self) -> t.Self:
        """Everything the check-in views and exports read, in a fixed number of queries."""
        return self.select_related("user", "checked_in_by").prefetch_related("ticket_purchases")


class Registration(TimeStampedModel):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        CONFIRMED = "CONFIRMED", "Confirmed"
        CANCELLED = "CANCELLED", "Cancelled"

    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="registrations")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="registrations")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING, db_index=True)
    quantity = models.PositiveIntegerField(
        default=1, validators=[MinValueValidator(1)], help_text="Quantity requested at registration time"
    )
    ticket_number = models.CharField(max_length=32, unique=True, null=True, blank=True)
    checked_in = models.BooleanField(default=False)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_in_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="checked_in_registrations",
    )
    metadata = models.JSONField(default=dict, blank=True, validators=[_validate_metadata])

    objects = RegistrationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event", "checked_in"], name="ix_registration_event_checkin"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(checked_in=True, checked_in_at__isnull=False, checked_in_by__isnull=False)
                    | Q(checked_in=False, checked_in_at__isnull=True, checked_in_by__isnull=True)
                ),
                name="registration_check_in_fields_consistent",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.ticket_number or self.pk} ({self.status})"

    @property
    def typed_metadata(self) -> RegistrationMetadata:
        return RegistrationMetadata.model_validate(self.metadata or {})

    @property
    def check_in_notes(self) -> str | None:
        return self.typed_metadata.check_in_notes

    def _purchase_quantities(self) -> list[int]:
        prefetched = getattr(self, "_prefetched_objects_cache", {})
        if "ticket_purchases" in prefetched:
            return [p.quantity for p in prefetched["ticket_purchases"]]
        return list(self.ticket_purchases.values_list("quantity", flat=True))

    def ticket_count(self) -> int:
        """Admissions this registration stands for; uses prefetched purchases when available."""
        return count_tickets(self._purchase_quantities())

    def seat_count(self) -> int:
        """Capacity this registration takes up, falling back to the requested quantity."""
        return count_seats(self._purchase_quantities(), self.quantity)

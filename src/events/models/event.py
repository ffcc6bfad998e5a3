import typing as t

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel

if t.TYPE_CHECKING:
    from accounts.models import DoorlistUser


class EventQuerySet(models.QuerySet["Event"]):
    def managed_by(self, user: "DoorlistUser") -> t.Self:
        """Events whose check-in the user may run: organizers see their own, admins see all."""
        if user.is_platform_admin:
            return self
        return self.filter(organizer=user)


class Event(TimeStampedModel):
    """The occasion registrations are made for.

    Capacity is fixed at creation for simple registrations. For events that sell
    ticket types it is advisory and loosely follows the sum of ticket type quantities.
    """

    title = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    start_date = models.DateTimeField(db_index=True)
    end_date = models.DateTimeField()
    organizer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="organized_events")

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["-start_date"]
        constraints = [
            models.CheckConstraint(condition=models.Q(capacity__gte=1), name="event_capacity_positive"),
        ]

    def __str__(self) -> str:
        return self.title

    def clean(self) -> None:
        """Reject events that end before they start."""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise DjangoValidationError({"end_date": "End date must not be before the start date."})

    def can_be_managed_by(self, user: t.Any) -> bool:
        """Whether the user may run check-in for this event (organizer or platform admin)."""
        if user is None or not user.is_authenticated:
            return False
        return bool(self.organizer_id == user.id or user.is_platform_admin)

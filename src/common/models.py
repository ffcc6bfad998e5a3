import typing as t
import uuid

from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        abstract = True

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Override the save method to call full_clean before saving."""
        self.full_clean()
        super().save(*args, **kwargs)


class ActivityLogQuerySet(models.QuerySet["ActivityLog"]):
    def for_event(self, event_id: uuid.UUID) -> t.Self:
        """Activity recorded against a single event, newest first."""
        return self.filter(event_id=event_id).order_by("-created_at")

    def older_than(self, cutoff: t.Any) -> t.Self:
        """Entries created strictly before the cutoff."""
        return self.filter(created_at__lt=cutoff)


class ActivityLog(models.Model):
    """System-wide, append-only record of state-changing actions.

    Independent of the per-registration check-in history: this is the
    cross-event trail used for exports and admin reporting.
    """

    class ActivityType(models.TextChoices):
        CHECK_IN = "CHECK_IN", "Check-in"
        CHECK_IN_UNDO = "CHECK_IN_UNDO", "Check-in undone"
        REGISTRATION_CONFIRMED = "REGISTRATION_CONFIRMED", "Registration confirmed"
        REGISTRATION_CANCELLED = "REGISTRATION_CANCELLED", "Registration cancelled"
        CHECK_IN_EXPORT = "CHECK_IN_EXPORT", "Check-in data exported"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    activity_type = models.CharField(max_length=32, choices=ActivityType.choices, db_index=True)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="activity"
    )
    event = models.ForeignKey(
        "events.Event", on_delete=models.SET_NULL, null=True, blank=True, related_name="activity"
    )
    registration_id = models.UUIDField(null=True, blank=True, db_index=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = ActivityLogQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event", "activity_type"], name="ix_activitylog_event_type"),
        ]

    def __str__(self) -> str:
        return f"{self.activity_type} by {self.actor_id} on {self.event_id}"

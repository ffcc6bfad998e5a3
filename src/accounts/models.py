import re
import typing as t
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class DoorlistUserQueryset(models.QuerySet["DoorlistUser"]):
    """Queryset for DoorlistUser."""

    def admins(self) -> t.Self:
        """Users holding the platform-wide admin role."""
        return self.filter(role=DoorlistUser.Role.ADMIN)


class DoorlistUserManager(UserManager["DoorlistUser"]):
    def get_queryset(self) -> DoorlistUserQueryset:
        """Get queryset for DoorlistUser."""
        return DoorlistUserQueryset(self.model, using=self._db)


class DoorlistUser(AbstractUser):
    class Role(models.TextChoices):
        ATTENDEE = "ATTENDEE", "Attendee"
        ORGANIZER = "ORGANIZER", "Organizer"
        ADMIN = "ADMIN", "Admin"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(
        max_length=16, choices=Role.choices, default=Role.ATTENDEE, db_index=True, help_text="Platform role"
    )
    image_url = models.URLField(max_length=500, blank=True, null=True, help_text="Avatar URL")

    objects = DoorlistUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's full name, or a name derived from the username as a fallback."""
        return self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()

    @property
    def is_platform_admin(self) -> bool:
        """Admins may act on any event, as may Django superusers."""
        return self.role == self.Role.ADMIN or self.is_superuser

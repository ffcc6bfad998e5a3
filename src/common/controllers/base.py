import typing as t

from ninja_extra import ControllerBase

from accounts.models import DoorlistUser


class UserAwareController(ControllerBase):
    def user(self) -> DoorlistUser:
        """Get the user for this request."""
        return t.cast(DoorlistUser, self.context.request.user)  # type: ignore[union-attr]

from ninja import ModelSchema

from accounts.models import DoorlistUser


class AttendeeSchema(ModelSchema):
    display_name: str

    class Meta:
        model = DoorlistUser
        fields = ["id", "first_name", "last_name", "email", "image_url"]


class MinimalUserSchema(ModelSchema):
    display_name: str

    class Meta:
        model = DoorlistUser
        fields = ["id", "first_name", "last_name"]

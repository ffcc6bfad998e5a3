"""Per-registration check-in history.

``append_history`` is pure: it takes the current metadata and returns a new
``RegistrationMetadata`` with one more entry. Callers persist the result as
part of the same write as the state change it describes.
"""

import typing as t
from datetime import datetime

from events.models import CheckInAction, CheckInHistoryEntry, RegistrationMetadata

if t.TYPE_CHECKING:
    from accounts.models import DoorlistUser


def load_metadata(raw: RegistrationMetadata | dict[str, t.Any] | None) -> RegistrationMetadata:
    if isinstance(raw, RegistrationMetadata):
        return raw
    return RegistrationMetadata.model_validate(raw or {})


def append_history(
    metadata: RegistrationMetadata | dict[str, t.Any] | None,
    action: CheckInAction,
    actor: "DoorlistUser",
    *,
    timestamp: datetime,
    notes: str | None = None,
    reason: str | None = None,
) -> RegistrationMetadata:
    """Return new metadata with an entry for ``action`` appended.

    ``check_in_notes`` is replaced only when notes are given. An undo always
    records its reason (possibly None) as ``undo_reason``.
    """
    current = load_metadata(metadata)
    entry = CheckInHistoryEntry(
        action=action,
        timestamp=timestamp,
        actor_id=actor.id,
        actor_name=actor.get_display_name(),
        notes=notes,
        reason=reason,
    )
    update: dict[str, t.Any] = {"check_in_history": (*current.check_in_history, entry)}
    if notes is not None:
        update["check_in_notes"] = notes
    if action == CheckInAction.CHECK_IN_UNDO:
        update["undo_reason"] = reason
    return current.model_copy(update=update)


def dump_metadata(metadata: RegistrationMetadata) -> dict[str, t.Any]:
    """Serialize metadata for the JSONField."""
    return metadata.model_dump(mode="json")

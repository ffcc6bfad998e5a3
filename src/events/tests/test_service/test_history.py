from datetime import UTC, datetime

import pytest

from accounts.models import DoorlistUser
from events.models import CheckInAction, RegistrationMetadata
from events.service.history import append_history, dump_metadata, load_metadata

pytestmark = pytest.mark.django_db

NOW = datetime(2026, 3, 1, 18, 30, tzinfo=UTC)


def test_accepts_missing_metadata(organizer: DoorlistUser) -> None:
    for raw in (None, {}):
        metadata = append_history(raw, CheckInAction.CHECK_IN, organizer, timestamp=NOW)
        assert len(metadata.check_in_history) == 1
        entry = metadata.check_in_history[0]
        assert entry.action == CheckInAction.CHECK_IN
        assert entry.actor_id == organizer.id
        assert entry.actor_name == organizer.get_display_name()
        assert entry.timestamp == NOW


def test_does_not_mutate_input(organizer: DoorlistUser) -> None:
    original = RegistrationMetadata()
    updated = append_history(original, CheckInAction.CHECK_IN, organizer, timestamp=NOW, notes="VIP")
    assert original.check_in_history == ()
    assert original.check_in_notes is None
    assert updated.check_in_notes == "VIP"


def test_history_is_only_ever_extended(organizer: DoorlistUser) -> None:
    metadata = append_history(None, CheckInAction.CHECK_IN, organizer, timestamp=NOW, notes="first")
    metadata = append_history(metadata, CheckInAction.CHECK_IN_UNDO, organizer, timestamp=NOW, reason="wrong person")
    metadata = append_history(metadata, CheckInAction.CHECK_IN, organizer, timestamp=NOW)

    assert [e.action for e in metadata.check_in_history] == [
        CheckInAction.CHECK_IN,
        CheckInAction.CHECK_IN_UNDO,
        CheckInAction.CHECK_IN,
    ]
    assert metadata.check_in_history[0].notes == "first"
    # Notes are kept when a later check-in does not provide any.
    assert metadata.check_in_notes == "first"
    assert metadata.undo_reason == "wrong person"


def test_undo_without_reason_clears_undo_reason(organizer: DoorlistUser) -> None:
    metadata = RegistrationMetadata(undo_reason="old")
    metadata = append_history(metadata, CheckInAction.CHECK_IN_UNDO, organizer, timestamp=NOW)
    assert metadata.undo_reason is None


def test_survives_a_json_round_trip(organizer: DoorlistUser) -> None:
    metadata = append_history(None, CheckInAction.BULK_CHECK_IN, organizer, timestamp=NOW, notes="door 2")
    assert load_metadata(dump_metadata(metadata)) == metadata

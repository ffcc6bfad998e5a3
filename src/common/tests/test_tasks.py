import typing as t
from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from accounts.models import DoorlistUser
from common.models import ActivityLog
from common.tasks import prune_activity_log
from events.models import Event

pytestmark = pytest.mark.django_db


def test_prune_activity_log_deletes_only_expired_entries(
    event: Event, organizer: DoorlistUser, settings: t.Any
) -> None:
    settings.ACTIVITY_LOG_RETENTION_DAYS = 30
    with freeze_time(timezone.now() - timedelta(days=31)):
        ActivityLog.objects.create(activity_type=ActivityLog.ActivityType.CHECK_IN, actor=organizer, event=event)
    kept = ActivityLog.objects.create(activity_type=ActivityLog.ActivityType.CHECK_IN, actor=organizer, event=event)

    deleted = prune_activity_log()

    assert deleted == 1
    assert list(ActivityLog.objects.all()) == [kept]


def test_for_event_filters_by_event(event: Event, other_event: Event, organizer: DoorlistUser) -> None:
    mine = ActivityLog.objects.create(activity_type=ActivityLog.ActivityType.CHECK_IN, actor=organizer, event=event)
    ActivityLog.objects.create(activity_type=ActivityLog.ActivityType.CHECK_IN, event=other_event)

    assert list(ActivityLog.objects.for_event(event.id)) == [mine]
    assert not ActivityLog.objects.older_than(timezone.now() - timedelta(days=1)).exists()


def test_activity_log_survives_actor_deletion(event: Event, doorlist_user_factory: t.Any) -> None:
    actor = doorlist_user_factory()
    entry = ActivityLog.objects.create(activity_type=ActivityLog.ActivityType.CHECK_IN, actor=actor, event=event)

    actor.delete()

    entry.refresh_from_db()
    assert entry.actor is None

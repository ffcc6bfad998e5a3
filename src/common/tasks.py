from datetime import timedelta

import structlog
from celery import shared_task
from django.conf import settings
from django.utils import timezone

from .models import ActivityLog

logger = structlog.get_logger(__name__)


@shared_task
def prune_activity_log() -> int:
    """Delete activity log entries older than the configured retention period.

    Returns:
        The number of deleted entries.
    """
    cutoff = timezone.now() - timedelta(days=settings.ACTIVITY_LOG_RETENTION_DAYS)
    deleted, _ = ActivityLog.objects.older_than(cutoff).delete()
    logger.info("activity_log_pruned", deleted=deleted, cutoff=cutoff.isoformat())
    return deleted

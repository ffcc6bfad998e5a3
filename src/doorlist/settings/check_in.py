from decouple import config

# Number of entries in the live "recent check-ins" feed.
CHECK_IN_RECENT_LIMIT = config("CHECK_IN_RECENT_LIMIT", default=10, cast=int)

# Trailing window, in days, covered by the hour-of-day check-in histogram.
CHECK_IN_TIMELINE_DAYS = config("CHECK_IN_TIMELINE_DAYS", default=7, cast=int)

BULK_CHECK_IN_MAX_IDS = config("BULK_CHECK_IN_MAX_IDS", default=500, cast=int)

ACTIVITY_LOG_RETENTION_DAYS = config("ACTIVITY_LOG_RETENTION_DAYS", default=365, cast=int)

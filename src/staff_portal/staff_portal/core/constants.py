"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_NOTIFICATION_LIMIT = 20
DEFAULT_FEED_LIMIT = 10
DEFAULT_POLL_SECONDS = 5.0
DEFAULT_LIST_LIMIT = 200
NOTIFICATION_BADGE_CAP = 9

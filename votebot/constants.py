"""
Bot-wide constants for the vote tracker.

Fixed values used by the synchronization engine. The timezone offsets are
static on purpose: the provider always reports Eastern Standard Time and the
published leaderboard is always shown in Indian Standard Time.
"""

from datetime import timedelta, timezone


class TimeConstants:
    """Constants for timestamp normalization."""

    SOURCE_TIMEZONE = timezone(timedelta(hours=-5), 'EST')
    SOURCE_TIMEZONE_LABEL = 'EST'

    TARGET_TIMEZONE = timezone(timedelta(hours=5, minutes=30), 'IST')
    TARGET_TIMEZONE_LABEL = 'IST'

    # Display layout, e.g. "23/06/2024, 6:45:00 AM IST"
    DISPLAY_DATE_FORMAT = '%d/%m/%Y'

    UNKNOWN = 'Unknown'
    INVALID = 'Invalid Date'


class ProviderConstants:
    """Constants for the minecraft-mp.com vote API."""

    DEFAULT_API_URL = 'https://minecraft-mp.com/api/'
    DEFAULT_FORMAT = 'json'
    DEFAULT_TIMEOUT = 15.0


class SyncConstants:
    """Constants for the reconciliation cycle."""

    DEFAULT_INTERVAL_MINUTES = 10

    # Length of the hex change-detection token
    FINGERPRINT_LENGTH = 16


class UIConstants:
    """Constants for the published leaderboard embed."""

    EMBED_COLOR = 0x00AE86
    DEFAULT_TITLE = 'Minecraft Server'
    FOOTER_TEXT = 'Vote Tracker Bot'
    EMPTY_PLACEHOLDER = 'No votes this month yet!'

    # Discord rejects embed descriptions longer than this
    MAX_DESCRIPTION_LENGTH = 4096
    MAX_TITLE_LENGTH = 256

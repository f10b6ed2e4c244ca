"""
Timestamp normalization for vote activity.

The vote provider reports human-oriented Eastern timestamps such as
"June 23rd, 2024 08:15 PM EST". These helpers turn them into a fixed
Indian Standard Time layout for display. Both offsets are static so the
output never depends on the host clock or DST rules.
"""

import re
from datetime import datetime
from typing import Optional

from dateutil import parser as dateutil_parser

from votebot.constants import TimeConstants

# Fills in components the source string omits, keeps parsing deterministic
_PARSE_DEFAULT = datetime(1970, 1, 1)

_ORDINAL_SUFFIX_RE = re.compile(r'(\d+)(st|nd|rd|th)\b', re.IGNORECASE)
_SOURCE_LABEL_RE = re.compile(
    rf'\s*\b{re.escape(TimeConstants.SOURCE_TIMEZONE_LABEL)}\s*$', re.IGNORECASE
)
_DISPLAY_RE = re.compile(
    r'^(\d{2}/\d{2}/\d{4}), (\d{1,2}):(\d{2}):(\d{2}) (AM|PM) '
    + re.escape(TimeConstants.TARGET_TIMEZONE_LABEL) + r'$'
)


def _clean_source(source_timestamp: str) -> str:
    """Drop the trailing timezone label and ordinal day suffixes."""
    text = _SOURCE_LABEL_RE.sub('', source_timestamp.strip())
    return _ORDINAL_SUFFIX_RE.sub(r'\1', text).strip()


def parse_source_timestamp(source_timestamp: str) -> Optional[datetime]:
    """
    Parse a provider timestamp into an aware datetime in the source timezone.
    
    Returns:
        Aware datetime anchored to the source offset, or None if unparseable
    """
    cleaned = _clean_source(source_timestamp)
    if not cleaned:
        return None
    
    try:
        parsed = dateutil_parser.parse(cleaned, default=_PARSE_DEFAULT, ignoretz=True)
    except (ValueError, OverflowError):
        return None
    
    return parsed.replace(tzinfo=TimeConstants.SOURCE_TIMEZONE)


def format_display(moment: datetime) -> str:
    """Render an aware datetime in the target timezone display layout."""
    local = moment.astimezone(TimeConstants.TARGET_TIMEZONE)
    hour = local.hour % 12 or 12
    meridiem = 'PM' if local.hour >= 12 else 'AM'
    return (
        f"{local.strftime(TimeConstants.DISPLAY_DATE_FORMAT)}, "
        f"{hour}:{local.minute:02d}:{local.second:02d} {meridiem} "
        f"{TimeConstants.TARGET_TIMEZONE_LABEL}"
    )


def normalize_timestamp(source_timestamp: Optional[str]) -> str:
    """
    Convert a provider timestamp into the target timezone display string.
    
    Never raises: empty input and the "Unknown" sentinel pass through as
    "Unknown", anything that cannot be parsed becomes "Invalid Date".
    
    Args:
        source_timestamp: Loosely formatted source timestamp
        
    Returns:
        Display string (e.g., "24/06/2024, 6:45:00 AM IST")
    """
    if not source_timestamp or source_timestamp.strip() in ('', TimeConstants.UNKNOWN):
        return TimeConstants.UNKNOWN
    
    moment = parse_source_timestamp(source_timestamp)
    if moment is None:
        return TimeConstants.INVALID
    
    try:
        return format_display(moment)
    except OverflowError:
        # Shifting into the target zone can leave datetime's supported range
        return TimeConstants.INVALID


def parse_display(display: str) -> Optional[datetime]:
    """Parse a string produced by ``format_display`` back into an aware datetime."""
    match = _DISPLAY_RE.match(display)
    if not match:
        return None
    
    date_part, hour, minute, second, meridiem = match.groups()
    hour_24 = int(hour) % 12 + (12 if meridiem == 'PM' else 0)
    day = datetime.strptime(date_part, TimeConstants.DISPLAY_DATE_FORMAT)
    return day.replace(
        hour=hour_24,
        minute=int(minute),
        second=int(second),
        tzinfo=TimeConstants.TARGET_TIMEZONE,
    )

"""
Kickoff times: stored in UTC, entered and shown in the configured TIMEZONE
"""

from datetime import datetime, timezone

import pytz
from flask import current_app

KICKOFF_INPUT_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M")
KICKOFF_DISPLAY_FORMAT = "%a %d/%m %H:%M"


def get_app_timezone():
    """Configured timezone, UTC when the name is unknown"""
    try:
        return pytz.timezone(current_app.config.get("TIMEZONE", "UTC"))
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def parse_kickoff(value):
    """Turn a local kickoff (string or naive datetime) into an aware UTC datetime.

    Aware datetimes are only converted. Raises ValueError for strings that
    match none of KICKOFF_INPUT_FORMATS.
    """
    if isinstance(value, str):
        for fmt in KICKOFF_INPUT_FORMATS:
            try:
                value = datetime.strptime(value.strip(), fmt)
                break
            except ValueError:
                continue
        else:
            raise ValueError(f"Invalid kickoff '{value}', expected YYYY-MM-DD HH:MM")

    if value.tzinfo is None:
        # pytz needs localize() to pick the right DST offset
        value = get_app_timezone().localize(value)

    return value.astimezone(timezone.utc)


def display_kickoff(kickoff, fmt=KICKOFF_DISPLAY_FORMAT):
    """Render a stored kickoff in the application timezone"""
    if kickoff is None:
        return "TBD"

    # The database hands back naive values; they are UTC
    if kickoff.tzinfo is None:
        kickoff = kickoff.replace(tzinfo=timezone.utc)

    return kickoff.astimezone(get_app_timezone()).strftime(fmt)

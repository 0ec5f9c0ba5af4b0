"""Date manipulation utilities"""

from datetime import datetime, timezone
from typing import Union


def utcnow() -> datetime:
    """Timezone-aware current time in UTC"""
    return datetime.now(timezone.utc)


def format_transaction_date(timestamp: Union[datetime, str]) -> str:
    """
    Render a ledger timestamp for display, e.g. "February 16, 2025 at 10:30 AM".

    Naive datetimes are treated as UTC; aware ones are converted to UTC so the
    output is stable regardless of the host timezone.
    """
    if isinstance(timestamp, str):
        timestamp = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    moment = timestamp.astimezone(timezone.utc)
    return f"{moment:%B} {moment.day}, {moment.year} at {moment:%I:%M %p}"

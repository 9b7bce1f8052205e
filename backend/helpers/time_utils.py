"""
Timestamp helpers.

SQLite hands back naive datetimes even for values written as UTC-aware,
so every comparison against "now" goes through `ensure_utc`.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to a naive datetime.

    Args:
        dt: Datetime read from the database or built in-process

    Returns:
        Timezone-aware datetime, or None if dt is None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def epoch_millis(dt: datetime) -> int:
    """Milliseconds since the Unix epoch."""
    return int(ensure_utc(dt).timestamp() * 1000)  # type: ignore[union-attr]

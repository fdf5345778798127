"""Time utilities for cronguard.

Provides timezone-aware datetime helpers and the millisecond clock used by
execution tracking.
"""

import time
from datetime import UTC, datetime, timedelta, timezone

from cronguard.core.constants import JST_UTC_OFFSET_HOURS

JST = timezone(timedelta(hours=JST_UTC_OFFSET_HOURS), name="JST")


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    Returns:
        datetime: Current UTC time with tzinfo=UTC
    """
    return datetime.now(UTC)


def now_ms() -> int:
    """Return the current wall-clock time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def ms_to_iso(epoch_ms: int) -> str:
    """Render epoch milliseconds as an ISO8601 UTC timestamp."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=UTC).isoformat()


def format_date_jst(moment: datetime | None = None) -> str:
    """Return the batch date (YYYY-MM-DD) in Japan Standard Time.

    Jobs are scheduled in UTC but their results are keyed by the JST calendar
    day, so 23:00 UTC on the 13th is the 14th.

    Args:
        moment: Timezone-aware datetime to convert. Defaults to now.

    Returns:
        The JST date string.
    """
    if moment is None:
        moment = utc_now()
    return moment.astimezone(JST).date().isoformat()

"""Global constants for cronguard.

Centralizes the fixed timing values that reflect the host runtime's execution
budget. These are deliberately not runtime-configurable.
"""

# =============================================================================
# Execution Budget (milliseconds)
# =============================================================================

HARD_TIMEOUT_MS = 300_000
"""Maximum wall-clock duration the host permits for one job invocation (5 minutes)."""

TIMEOUT_WARNING_MS = 240_000
"""Elapsed time after which a single "approaching timeout" warning is emitted (4 minutes)."""

# =============================================================================
# Retry Defaults
# =============================================================================

DEFAULT_MAX_RETRIES = 3
"""Default number of retries after the first attempt."""

DEFAULT_BASE_DELAY_MS = 1000
"""Default first backoff delay."""

DEFAULT_MAX_DELAY_MS = 30_000
"""Default cap for any single backoff delay."""

# =============================================================================
# Duration Formatting Constants
# =============================================================================

MS_PER_SECOND = 1000
"""Milliseconds in one second, for duration formatting."""

SECONDS_PER_MINUTE = 60
"""Seconds in one minute, for duration formatting."""

# =============================================================================
# Error Tags
# =============================================================================

EXCEPTION_ERROR_TAG = "exception"
"""BatchErrorInfo.type used when a job attempt raised instead of returning."""

JST_UTC_OFFSET_HOURS = 9
"""Offset of Japan Standard Time from UTC, used for batch dates."""

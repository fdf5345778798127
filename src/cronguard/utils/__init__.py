"""Shared utilities for cronguard.

Contains cross-cutting utilities used by multiple modules.
"""

from cronguard.utils.time import JST, format_date_jst, ms_to_iso, now_ms, utc_now

__all__ = ["JST", "format_date_jst", "ms_to_iso", "now_ms", "utc_now"]

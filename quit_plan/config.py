"""Environment-driven settings for quit_plan."""

from __future__ import annotations

import datetime as dt
import os

from dateutil import tz

# ---------------------------------------------------------------------------
# Constants & Helpers
# ---------------------------------------------------------------------------
TIMEZONE_NAME = os.getenv("QP_TIMEZONE", "UTC")


def parse_max_projection_days(raw: str) -> int:
    """Projection horizon in days, at least 1."""
    try:
        days = int(raw)
    except ValueError:
        raise RuntimeError(f"QP_MAX_PROJECTION_DAYS must be an integer, got {raw!r}") from None
    if days < 1:
        raise RuntimeError(f"QP_MAX_PROJECTION_DAYS must be >= 1, got {days}")
    return days


# 100 years, keeps projected dates inside datetime range
MAX_PROJECTION_DAYS = parse_max_projection_days(os.getenv("QP_MAX_PROJECTION_DAYS", "36500"))


def load_timezone(name: str) -> dt.tzinfo:
    """Resolve an IANA zone name used for calendar-day bucketing."""
    if name.upper() == "UTC":
        return tz.UTC
    zone = tz.gettz(name)
    if zone is None:
        raise RuntimeError(f"Unknown timezone {name!r} (QP_TIMEZONE)")
    return zone


LOCAL_TZ: dt.tzinfo = load_timezone(TIMEZONE_NAME)

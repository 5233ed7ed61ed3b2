"""Reduction program calculator.

Pure functions deriving the allowed daily limit, program week, weekly
compliance and a trend-based completion projection from program parameters
and a list of consumption events.

Every function takes ``now`` explicitly. ``zone`` is the tzinfo used to cut
timestamps into calendar days and defaults to ``config.LOCAL_TZ``. Weeks start
on Monday (ISO 8601).
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Iterable, NamedTuple, Protocol

from quit_plan import config
from quit_plan.core.entities.program import (
    WEEKS_PER_MONTH,
    InvalidProgramParameters,
    check_duration,
    check_program_values,
)
from quit_plan.utils import timeutil

DAYS_PER_WEEK = 7


class TimestampedEvent(Protocol):
    occurred_at: dt.datetime


class DaysInPlan(NamedTuple):
    in_plan: int
    total: int


def _round_half_away(value: float) -> int:
    """Round to nearest, ties away from zero (round() in Python is half-to-even)."""
    rounded = math.floor(abs(value) + 0.5)
    return int(rounded) if value >= 0 else -int(rounded)


# ---------------------------------------------------------------------------
# Program schedule
# ---------------------------------------------------------------------------


def total_weeks(duration_months: int) -> int:
    return max(1, duration_months * WEEKS_PER_MONTH)


def current_week_number(
    start_date: dt.date | dt.datetime,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> int:
    """1-based program week. Before the start date this is 1; not capped at the program end."""
    elapsed_days = (timeutil.local_date(now, zone) - timeutil.to_date(start_date, zone)).days
    return max(1, elapsed_days // DAYS_PER_WEEK + 1)


def limit_for_week(week_number: int, start_value: int, target_value: int, total_weeks: int) -> int:
    """Linear interpolation from start_value (week 0) to target_value (week total_weeks)."""
    check_program_values(start_value, target_value)
    if total_weeks < 1:
        raise InvalidProgramParameters(f"total_weeks must be >= 1, got {total_weeks}")

    clamped_week = min(week_number, total_weeks)
    reduction = (start_value - target_value) * clamped_week / total_weeks
    limit = max(target_value, _round_half_away(start_value - reduction))
    return min(limit, start_value)  # negative week numbers


def current_daily_limit(
    start_value: int,
    target_value: int,
    duration_months: int,
    start_date: dt.date | dt.datetime,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> int:
    check_duration(duration_months)
    week = current_week_number(start_date, now, zone)
    return limit_for_week(week, start_value, target_value, total_weeks(duration_months))


# ---------------------------------------------------------------------------
# Weekly compliance
# ---------------------------------------------------------------------------


def days_in_plan_this_week(
    events: Iterable[TimestampedEvent],
    limit: int,
    start_of_week: dt.date | dt.datetime,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> DaysInPlan:
    """Walk the 7 days from start_of_week up to today; count days with events <= limit."""
    if limit < 0:
        raise InvalidProgramParameters(f"limit must be >= 0, got {limit}")

    first_day = timeutil.to_date(start_of_week, zone)
    today = timeutil.local_date(now, zone)

    per_day: dict[dt.date, int] = {}
    for event in events:
        day = timeutil.local_date(event.occurred_at, zone)
        per_day[day] = per_day.get(day, 0) + 1

    in_plan = 0
    total = 0
    for offset in range(DAYS_PER_WEEK):
        day = first_day + dt.timedelta(days=offset)
        if day > today:
            continue
        total += 1
        if per_day.get(day, 0) <= limit:
            in_plan += 1

    return DaysInPlan(in_plan, total)


def week_compliance_rate(
    events: Iterable[TimestampedEvent],
    limit: int,
    start_of_week: dt.date | dt.datetime,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> float:
    in_plan, total = days_in_plan_this_week(events, limit, start_of_week, now, zone)
    if total == 0:
        return 0.0
    return in_plan / total


def start_of_current_week(now: dt.datetime, zone: dt.tzinfo | None = None) -> dt.date:
    today = timeutil.local_date(now, zone)
    return today - dt.timedelta(days=today.weekday())


# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------


def average_per_day(
    events: Iterable[TimestampedEvent],
    days: int,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> float:
    """Events since the start of the day `days` days before today, divided by `days`."""
    if days <= 0:
        return 0.0
    first_day = timeutil.local_date(now, zone) - dt.timedelta(days=days)
    cutoff = timeutil.start_of_day(first_day, zone)
    count = sum(1 for e in events if timeutil.as_utc(e.occurred_at) >= cutoff)
    return count / days


def projected_completion_date(
    current_average: float,
    target_value: int,
    start_date: dt.date | dt.datetime,
    start_value: int,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
    max_days: int | None = None,
) -> dt.datetime | None:
    """Date the observed linear trend reaches target_value.

    Returns ``now`` when the goal is already met and ``None`` when the trend
    shows no reduction. The horizon is capped at ``max_days``
    (``config.MAX_PROJECTION_DAYS`` by default).
    """
    check_program_values(start_value, target_value)
    if current_average < 0:
        raise InvalidProgramParameters(f"current_average must be >= 0, got {current_average}")
    if max_days is None:
        max_days = config.MAX_PROJECTION_DAYS
    if max_days < 1:
        raise InvalidProgramParameters(f"max_days must be >= 1, got {max_days}")

    if current_average <= target_value:
        return now

    days_elapsed = max(
        1, (timeutil.local_date(now, zone) - timeutil.to_date(start_date, zone)).days
    )
    daily_reduction = (start_value - current_average) / days_elapsed
    if daily_reduction <= 0:
        return None

    days_needed = (current_average - target_value) / daily_reduction
    if days_needed >= max_days:
        return now + dt.timedelta(days=max_days)
    return now + dt.timedelta(days=math.floor(days_needed))

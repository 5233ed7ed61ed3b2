"""Descriptive statistics over recent consumption, independent of any program."""

from __future__ import annotations

import calendar
import datetime as dt
import logging
from collections import Counter
from dataclasses import dataclass
from typing import List, Sequence

from quit_plan.core.entities.consumption_event import ConsumptionEvent, TriggerType
from quit_plan.core.entities.profile import Profile
from quit_plan.core.interfaces.repositories.event_repo import AbstractConsumptionEventRepository
from quit_plan.core.interfaces.repositories.profile_repo import (
    AbstractProfileRepository,
    require_profile,
)
from quit_plan.utils import timeutil

logger = logging.getLogger(__name__)

CLEAN_DAYS_WINDOW = 30


@dataclass(slots=True, frozen=True)
class ConsumptionStats:
    hourly_distribution: List[int]
    peak_hour: int | None
    top_trigger: TriggerType | None
    top_trigger_percentage: int
    longest_gap_hours: int
    clean_days: int
    today_count: int
    today_savings: int
    monthly_forecast_savings: int


def hourly_distribution(events: Sequence[ConsumptionEvent], zone: dt.tzinfo | None = None) -> List[int]:
    distribution = [0] * 24
    for event in events:
        distribution[timeutil.local_hour(event.occurred_at, zone)] += 1
    return distribution


def peak_hour(distribution: Sequence[int]) -> int | None:
    """Busiest hour; earliest wins a tie."""
    if not distribution or max(distribution) == 0:
        return None
    return distribution.index(max(distribution))


def most_frequent_trigger(events: Sequence[ConsumptionEvent]) -> tuple[TriggerType, int] | None:
    """Most common trigger and its integer share (%) of events that carry a trigger."""
    triggers = [e.trigger for e in events if e.trigger is not None]
    if not triggers:
        return None
    trigger, count = Counter(triggers).most_common(1)[0]
    return trigger, int(count / len(triggers) * 100)


def longest_gap_hours(events: Sequence[ConsumptionEvent], now: dt.datetime) -> int:
    """Longest interval between consecutive events, or since the last one, in whole hours."""
    if not events:
        return 0
    stamps = sorted(timeutil.as_utc(e.occurred_at) for e in events)
    gaps = [later - earlier for earlier, later in zip(stamps, stamps[1:])]
    gaps.append(timeutil.as_utc(now) - stamps[-1])
    longest = max(gaps)
    return max(0, int(longest.total_seconds() // 3600))


def clean_days(
    events: Sequence[ConsumptionEvent],
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
    window: int = CLEAN_DAYS_WINDOW,
) -> int:
    """Days without any event among the last `window` days, today included."""
    today = timeutil.local_date(now, zone)
    first_day = today - dt.timedelta(days=window - 1)
    days_with_events = {
        day
        for day in (timeutil.local_date(e.occurred_at, zone) for e in events)
        if first_day <= day <= today
    }
    return max(0, window - len(days_with_events))


def today_savings(profile: Profile, today_count: int) -> int:
    saved = profile.safe_baseline_per_day - today_count
    if saved <= 0:
        return 0
    return int(saved * profile.price_per_unit)


def monthly_forecast_savings(
    profile: Profile,
    events: Sequence[ConsumptionEvent],
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> int:
    """Savings over the whole month if this month's daily average holds."""
    today = timeutil.local_date(now, zone)
    month_start = today.replace(day=1)
    days_passed = (today - month_start).days
    if days_passed <= 0:
        return 0

    cutoff = timeutil.start_of_day(month_start, zone)
    this_month = sum(1 for e in events if timeutil.as_utc(e.occurred_at) >= cutoff)
    saved_per_day = profile.safe_baseline_per_day - this_month / days_passed
    if saved_per_day <= 0:
        return 0

    days_in_month = calendar.monthrange(today.year, today.month)[1]
    return int(saved_per_day * profile.price_per_unit * days_in_month)


def execute(
    user_id: str,
    profile_repo: AbstractProfileRepository,
    event_repo: AbstractConsumptionEventRepository,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> ConsumptionStats:
    profile = require_profile(user_id, profile_repo)

    today = timeutil.local_date(now, zone)
    first_day = min(today.replace(day=1), today - dt.timedelta(days=CLEAN_DAYS_WINDOW - 1))
    events = event_repo.list_by_user(user_id, since=timeutil.start_of_day(first_day, zone))
    logger.debug("Computing stats for %s over %d events", user_id, len(events))

    today_count = sum(1 for e in events if timeutil.local_date(e.occurred_at, zone) == today)
    distribution = hourly_distribution(events, zone)
    top = most_frequent_trigger(events)

    return ConsumptionStats(
        hourly_distribution=distribution,
        peak_hour=peak_hour(distribution),
        top_trigger=top[0] if top else None,
        top_trigger_percentage=top[1] if top else 0,
        longest_gap_hours=longest_gap_hours(events, now),
        clean_days=clean_days(events, now, zone),
        today_count=today_count,
        today_savings=today_savings(profile, today_count),
        monthly_forecast_savings=monthly_forecast_savings(profile, events, now, zone),
    )

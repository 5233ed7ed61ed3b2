"""Home screen figures: time since the last event, recovery stage and recent daily counts."""

from __future__ import annotations

import datetime as dt
import enum
import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from quit_plan.core.entities.consumption_event import ConsumptionEvent
from quit_plan.core.interfaces.repositories.event_repo import AbstractConsumptionEventRepository
from quit_plan.core.interfaces.repositories.profile_repo import (
    AbstractProfileRepository,
    require_profile,
)
from quit_plan.utils import timeutil

logger = logging.getLogger(__name__)

NO_EVENT_HOURS = 999.0  # shown when nothing was logged in the recent window
RECENT_WINDOW_DAYS = 7
MONTHLY_WINDOW_DAYS = 30


class HealthStatus(str, enum.Enum):
    VERY_RECENT = "very_recent"  # 0-1 h
    RECENT = "recent"  # 1-2 h
    RECOVERING = "recovering"  # 2-8 h
    IMPROVING = "improving"  # 8-24 h
    STRONG = "strong"  # 24-72 h
    EXCELLENT = "excellent"  # 72 h and more


# (upper bound in hours, value); first matching bound wins
_STATUS_BUCKETS: Tuple[Tuple[float, HealthStatus], ...] = (
    (1, HealthStatus.VERY_RECENT),
    (2, HealthStatus.RECENT),
    (8, HealthStatus.RECOVERING),
    (24, HealthStatus.IMPROVING),
    (72, HealthStatus.STRONG),
)

_PERCENTAGE_BUCKETS: Tuple[Tuple[float, int], ...] = (
    (1, 5),
    (2, 15),
    (4, 25),
    (8, 40),
    (12, 55),
    (24, 70),
    (48, 85),
)


@dataclass(slots=True, frozen=True)
class HomeSummary:
    today_count: int
    hours_since_last_event: float
    health_status: HealthStatus
    health_percentage: int
    daily_counts: List[Tuple[dt.date, int]]
    average_per_logged_day: float
    monthly_count: int


def hours_since_last_event(events: Sequence[ConsumptionEvent], now: dt.datetime) -> float:
    if not events:
        return NO_EVENT_HOURS
    last = max(timeutil.as_utc(e.occurred_at) for e in events)
    return (timeutil.as_utc(now) - last).total_seconds() / 3600


def health_status(hours: float) -> HealthStatus:
    if hours >= 0:
        for upper, status in _STATUS_BUCKETS:
            if hours < upper:
                return status
    return HealthStatus.EXCELLENT


def health_percentage(hours: float | None) -> int:
    """Recovery scale, 100 when nothing has been logged."""
    if hours is None:
        return 100
    if hours >= 0:
        for upper, percentage in _PERCENTAGE_BUCKETS:
            if hours < upper:
                return percentage
    return 95


def daily_counts(
    events: Sequence[ConsumptionEvent],
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
    days: int = RECENT_WINDOW_DAYS,
) -> List[Tuple[dt.date, int]]:
    """Event count per local day for the last `days` days, oldest first, today last."""
    today = timeutil.local_date(now, zone)
    window = [today - dt.timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    counts = dict.fromkeys(window, 0)
    for event in events:
        day = timeutil.local_date(event.occurred_at, zone)
        if day in counts:
            counts[day] += 1
    return [(day, counts[day]) for day in window]


def average_per_logged_day(events: Sequence[ConsumptionEvent], zone: dt.tzinfo | None = None) -> float:
    """Events per day that has at least one event; 0 with no events."""
    if not events:
        return 0.0
    logged_days = {timeutil.local_date(e.occurred_at, zone) for e in events}
    return len(events) / max(1, len(logged_days))


def execute(
    user_id: str,
    profile_repo: AbstractProfileRepository,
    event_repo: AbstractConsumptionEventRepository,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> HomeSummary:
    require_profile(user_id, profile_repo)

    today = timeutil.local_date(now, zone)
    month_start = timeutil.start_of_day(today - dt.timedelta(days=MONTHLY_WINDOW_DAYS - 1), zone)
    week_start = timeutil.start_of_day(today - dt.timedelta(days=RECENT_WINDOW_DAYS), zone)

    monthly = event_repo.list_by_user(user_id, since=month_start)
    recent = [e for e in monthly if timeutil.as_utc(e.occurred_at) >= week_start]
    logger.debug("Home summary for %s: %d recent, %d monthly events", user_id, len(recent), len(monthly))

    hours = hours_since_last_event(recent, now)
    return HomeSummary(
        today_count=sum(1 for e in recent if timeutil.local_date(e.occurred_at, zone) == today),
        hours_since_last_event=hours,
        health_status=health_status(hours),
        health_percentage=health_percentage(hours if recent else None),
        daily_counts=daily_counts(recent, now, zone),
        average_per_logged_day=average_per_logged_day(recent, zone),
        monthly_count=len(monthly),
    )

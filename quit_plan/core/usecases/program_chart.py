"""Planned vs actual daily average per program week."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import List

from quit_plan.core.interfaces.repositories.event_repo import AbstractConsumptionEventRepository
from quit_plan.core.interfaces.repositories.profile_repo import (
    AbstractProfileRepository,
    require_profile,
)
from quit_plan.core.services import program_calculator as calc
from quit_plan.utils import timeutil

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class WeekPlanPoint:
    week: int
    planned: int
    actual: float  # events per day with data


def execute(
    user_id: str,
    profile_repo: AbstractProfileRepository,
    event_repo: AbstractConsumptionEventRepository,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> List[WeekPlanPoint]:
    """One point per elapsed program week, capped at the program length."""
    profile = require_profile(user_id, profile_repo)
    program = profile.program(zone)
    if program is None:
        logger.debug("No active program for %s, empty chart", user_id)
        return []

    total = program.total_weeks
    current = calc.current_week_number(program.start_date, now, zone)
    events = event_repo.list_by_user(
        user_id, since=timeutil.start_of_day(program.start_date, zone)
    )
    event_days = [timeutil.local_date(e.occurred_at, zone) for e in events]

    points: List[WeekPlanPoint] = []
    for week in range(1, min(current, total) + 1):
        week_start = program.start_date + dt.timedelta(weeks=week - 1)
        week_end = week_start + dt.timedelta(weeks=1)
        days = [d for d in event_days if week_start <= d < week_end]
        points.append(
            WeekPlanPoint(
                week=week,
                planned=calc.limit_for_week(week, program.start_value, program.target_value, total),
                actual=len(days) / max(1, len(set(days))),
            )
        )
    return points

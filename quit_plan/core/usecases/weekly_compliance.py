"""Use case computing how many days of the current week stayed within the plan."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass

from quit_plan.core.interfaces.repositories.event_repo import AbstractConsumptionEventRepository
from quit_plan.core.interfaces.repositories.profile_repo import (
    AbstractProfileRepository,
    require_profile,
)
from quit_plan.core.services import program_calculator as calc
from quit_plan.utils import timeutil

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class WeeklyCompliance:
    limit: int
    week_start: dt.date
    in_plan: int
    total: int

    @property
    def rate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.in_plan / self.total


def execute(
    user_id: str,
    profile_repo: AbstractProfileRepository,
    event_repo: AbstractConsumptionEventRepository,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> WeeklyCompliance | None:
    profile = require_profile(user_id, profile_repo)
    program = profile.program(zone)
    if program is None:
        logger.debug("No active program for %s, skipping compliance", user_id)
        return None

    limit = calc.current_daily_limit(
        program.start_value,
        program.target_value,
        program.duration_months,
        program.start_date,
        now,
        zone,
    )
    week_start = calc.start_of_current_week(now, zone)
    events = event_repo.list_by_user(user_id, since=timeutil.start_of_day(week_start, zone))
    in_plan, total = calc.days_in_plan_this_week(events, limit, week_start, now, zone)

    return WeeklyCompliance(limit=limit, week_start=week_start, in_plan=in_plan, total=total)

"""Use case returning today's allowed limit and program week for a user."""

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
class ProgramStatus:
    current_limit: int
    current_week: int
    total_weeks: int
    today_count: int

    @property
    def limit_progress(self) -> float:
        """Share of today's limit already used (can exceed 1.0)."""
        if self.current_limit <= 0:
            return 0.0
        return self.today_count / self.current_limit

    @property
    def is_over_limit(self) -> bool:
        return self.today_count > self.current_limit


def execute(
    user_id: str,
    profile_repo: AbstractProfileRepository,
    event_repo: AbstractConsumptionEventRepository,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> ProgramStatus | None:
    """Return None when the user has no active program."""
    profile = require_profile(user_id, profile_repo)
    program = profile.program(zone)
    if program is None:
        logger.debug("No active program for %s", user_id)
        return None

    today = timeutil.local_date(now, zone)
    events = event_repo.list_by_user(user_id, since=timeutil.start_of_day(today, zone))
    today_count = sum(1 for e in events if timeutil.local_date(e.occurred_at, zone) == today)

    return ProgramStatus(
        current_limit=calc.current_daily_limit(
            program.start_value,
            program.target_value,
            program.duration_months,
            program.start_date,
            now,
            zone,
        ),
        current_week=calc.current_week_number(program.start_date, now, zone),
        total_weeks=calc.total_weeks(program.duration_months),
        today_count=today_count,
    )

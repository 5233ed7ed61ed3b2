"""Use case projecting when the current trend reaches the program target."""

from __future__ import annotations

import datetime as dt
import enum
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


class ProjectionKind(str, enum.Enum):
    GOAL_MET = "goal-met"
    NO_PROJECTION = "no-projection"
    PROJECTED = "projected"


@dataclass(slots=True, frozen=True)
class Projection:
    kind: ProjectionKind
    current_average: float
    planned_end_date: dt.date
    projected_date: dt.date | None = None
    weeks_ahead: int | None = None  # > 0 ahead of schedule, < 0 behind


def weeks_between(earlier: dt.date, later: dt.date) -> int:
    """Whole weeks from earlier to later, truncated toward zero."""
    days = (later - earlier).days
    return int(days / calc.DAYS_PER_WEEK)


def execute(
    user_id: str,
    profile_repo: AbstractProfileRepository,
    event_repo: AbstractConsumptionEventRepository,
    now: dt.datetime,
    zone: dt.tzinfo | None = None,
) -> Projection | None:
    profile = require_profile(user_id, profile_repo)
    program = profile.program(zone)
    if program is None:
        logger.debug("No active program for %s, nothing to project", user_id)
        return None

    today = timeutil.local_date(now, zone)
    days_since_start = max(1, (today - program.start_date).days)
    events = event_repo.list_by_user(
        user_id, since=timeutil.start_of_day(program.start_date, zone)
    )
    current_average = len(events) / days_since_start

    if current_average <= program.target_value:
        return Projection(
            kind=ProjectionKind.GOAL_MET,
            current_average=current_average,
            planned_end_date=program.planned_end_date,
            projected_date=today,
            weeks_ahead=weeks_between(today, program.planned_end_date),
        )

    projected = calc.projected_completion_date(
        current_average,
        program.target_value,
        program.start_date,
        program.start_value,
        now,
        zone,
    )
    if projected is None:
        logger.debug(
            "No downward trend for %s (average %.2f, start %d)",
            user_id,
            current_average,
            program.start_value,
        )
        return Projection(
            kind=ProjectionKind.NO_PROJECTION,
            current_average=current_average,
            planned_end_date=program.planned_end_date,
        )

    projected_date = timeutil.local_date(projected, zone)
    return Projection(
        kind=ProjectionKind.PROJECTED,
        current_average=current_average,
        planned_end_date=program.planned_end_date,
        projected_date=projected_date,
        weeks_ahead=weeks_between(projected_date, program.planned_end_date),
    )

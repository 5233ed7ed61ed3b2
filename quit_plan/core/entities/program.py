"""Reduction program parameters value object."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

WEEKS_PER_MONTH = 4  # planning month, not a calendar month


class InvalidProgramParameters(ValueError):
    """Program inputs outside the documented domain."""


def check_program_values(start_value: int, target_value: int) -> None:
    if start_value < 0:
        raise InvalidProgramParameters(f"start_value must be >= 0, got {start_value}")
    if target_value < 0:
        raise InvalidProgramParameters(f"target_value must be >= 0, got {target_value}")
    if target_value > start_value:
        raise InvalidProgramParameters(
            f"target_value ({target_value}) must not exceed start_value ({start_value})"
        )


def check_duration(duration_months: int) -> None:
    if duration_months < 1:
        raise InvalidProgramParameters(f"duration_months must be >= 1, got {duration_months}")


@dataclass(slots=True, frozen=True)
class ProgramParameters:
    start_value: int  # daily quantity at program start
    target_value: int  # daily quantity goal
    duration_months: int
    start_date: dt.date

    def __post_init__(self) -> None:
        check_program_values(self.start_value, self.target_value)
        check_duration(self.duration_months)

    @property
    def total_weeks(self) -> int:
        return max(1, self.duration_months * WEEKS_PER_MONTH)

    @property
    def planned_end_date(self) -> dt.date:
        return self.start_date + dt.timedelta(weeks=self.total_weeks)

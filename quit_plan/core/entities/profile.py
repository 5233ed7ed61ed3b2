"""User profile entity as mirrored from the backend profile record."""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass
from typing import Any, Mapping

from dateutil import parser as date_parser

from quit_plan.core.entities.program import ProgramParameters
from quit_plan.utils import timeutil

DEFAULT_BASELINE_PER_DAY = 10
DEFAULT_PACK_PRICE = 250
DEFAULT_STICKS_IN_PACK = 20

ACTIVE_PROGRAM_TYPES = ("quit", "reduce")


class ProductType(str, enum.Enum):
    CIGARETTE = "cigarette"
    IQOS = "iqos"
    VAPE = "vape"
    MIX = "mix"


class GoalType(str, enum.Enum):
    QUIT = "quit"
    REDUCE = "reduce"
    OBSERVE = "observe"


# mg of nicotine per logged unit
NICOTINE_PER_UNIT = {
    ProductType.CIGARETTE: 1.2,
    ProductType.IQOS: 0.5,
    ProductType.VAPE: 0.8,
}


def _parse_date(value: Any) -> dt.date | dt.datetime | None:
    """ISO-8601 timestamp, or a bare local date for date-only columns."""
    if value is None or isinstance(value, dt.date):
        return value
    text = str(value)
    try:
        parsed = date_parser.isoparse(text)
    except ValueError:
        return None
    if len(text) == len("YYYY-MM-DD"):
        return parsed.date()
    return parsed


def _parse_enum(enum_cls: type[enum.Enum], value: Any) -> Any:
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


@dataclass(slots=True)
class Profile:
    id: str
    name: str | None = None
    product_type: ProductType | None = None
    baseline_per_day: int | None = None
    pack_price: int | None = None
    sticks_in_pack: int | None = None
    goal_type: GoalType | None = None
    goal_per_day: int | None = None
    onboarding_done: bool | None = None

    # Program fields
    program_type: str | None = None
    program_start_value: int | None = None
    program_target_value: int | None = None
    program_duration_months: int | None = None
    program_start_date: dt.date | dt.datetime | None = None

    notification_time: str | None = None
    notifications_enabled: bool | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Profile":
        """Build a profile from a snake_case backend row."""
        return cls(
            id=str(record["id"]),
            name=record.get("name"),
            product_type=_parse_enum(ProductType, record.get("product_type")),
            baseline_per_day=record.get("baseline_per_day"),
            pack_price=record.get("pack_price"),
            sticks_in_pack=record.get("sticks_in_pack"),
            goal_type=_parse_enum(GoalType, record.get("goal_type")),
            goal_per_day=record.get("goal_per_day"),
            onboarding_done=record.get("onboarding_done"),
            program_type=record.get("program_type"),
            program_start_value=record.get("program_start_value"),
            program_target_value=record.get("program_target_value"),
            program_duration_months=record.get("program_duration_months"),
            program_start_date=_parse_date(record.get("program_start_date")),
            notification_time=record.get("notification_time"),
            notifications_enabled=record.get("notifications_enabled"),
        )

    # ------------------------------------------------------------------
    # Safe accessors
    # ------------------------------------------------------------------

    @property
    def safe_baseline_per_day(self) -> int:
        return self.baseline_per_day if self.baseline_per_day is not None else DEFAULT_BASELINE_PER_DAY

    @property
    def safe_pack_price(self) -> int:
        return self.pack_price if self.pack_price is not None else DEFAULT_PACK_PRICE

    @property
    def safe_sticks_in_pack(self) -> int:
        return self.sticks_in_pack if self.sticks_in_pack is not None else DEFAULT_STICKS_IN_PACK

    @property
    def price_per_unit(self) -> float:
        sticks = self.safe_sticks_in_pack
        if sticks <= 0:
            return 0.0
        return self.safe_pack_price / sticks

    @property
    def nicotine_per_unit(self) -> float:
        return NICOTINE_PER_UNIT.get(self.product_type, 1.0)

    # ------------------------------------------------------------------
    # Program
    # ------------------------------------------------------------------

    @property
    def has_program_active(self) -> bool:
        """True only for quit/reduce programs with all four fields set."""
        if self.program_type not in ACTIVE_PROGRAM_TYPES:
            return False
        return None not in (
            self.program_start_value,
            self.program_target_value,
            self.program_duration_months,
            self.program_start_date,
        )

    def program(self, zone: dt.tzinfo | None = None) -> ProgramParameters | None:
        """Validated program parameters, or None when no program is active."""
        if not self.has_program_active:
            return None
        return ProgramParameters(
            start_value=self.program_start_value,
            target_value=self.program_target_value,
            duration_months=self.program_duration_months,
            start_date=timeutil.to_date(self.program_start_date, zone),
        )

"""Domain event representing a single logged consumption (one cigarette, stick or puff session)."""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass


class TriggerType(str, enum.Enum):
    STRESS = "stress"
    COFFEE = "coffee"
    AFTER_MEAL = "after_meal"
    ALCOHOL = "alcohol"
    BOREDOM = "boredom"
    SOCIAL = "social"


@dataclass(slots=True, frozen=True)
class ConsumptionEvent:
    occurred_at: dt.datetime  # naive values are UTC
    user_id: str | None = None
    product_type: str | None = None
    trigger: TriggerType | None = None
    price: int | None = None
    nicotine_mg: float | None = None
    id: int | None = None

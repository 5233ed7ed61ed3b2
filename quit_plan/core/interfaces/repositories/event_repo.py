"""Repository interface for ConsumptionEvent entity."""

from __future__ import annotations

import abc
import datetime as dt
from typing import List, Protocol

from quit_plan.core.entities.consumption_event import ConsumptionEvent


class AbstractConsumptionEventRepository(Protocol):
    """Contract for reading logged consumption events."""

    @abc.abstractmethod
    def list_by_user(self, user_id: str, since: dt.datetime | None = None) -> List[ConsumptionEvent]: ...

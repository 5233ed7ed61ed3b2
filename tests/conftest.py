"""Shared pytest fixtures: fixed clock and in-memory repositories."""

from __future__ import annotations

import datetime as dt
from typing import Iterable, List

import pytest
from dateutil import tz

from quit_plan.core.entities.consumption_event import ConsumptionEvent
from quit_plan.core.entities.profile import Profile
from quit_plan.utils import timeutil

USER_ID = "user-1"

# Wednesday
NOW = dt.datetime(2024, 3, 13, 15, 0, tzinfo=tz.UTC)
# Monday, 16 days before NOW: program week 3
PROGRAM_START = dt.date(2024, 2, 26)


class InMemoryProfileRepository:
    def __init__(self, profiles: Iterable[Profile] = ()) -> None:
        self._profiles = {p.id: p for p in profiles}

    def add(self, profile: Profile) -> None:
        self._profiles[profile.id] = profile

    def get_by_user_id(self, user_id: str) -> Profile | None:
        return self._profiles.get(user_id)


class InMemoryEventRepository:
    def __init__(self) -> None:
        self._events: List[ConsumptionEvent] = []

    def add(self, event: ConsumptionEvent) -> None:
        self._events.append(event)

    def add_many(self, user_id: str, stamps: Iterable[dt.datetime]) -> None:
        for stamp in stamps:
            self.add(ConsumptionEvent(occurred_at=stamp, user_id=user_id))

    def list_by_user(self, user_id: str, since: dt.datetime | None = None) -> List[ConsumptionEvent]:
        events = [e for e in self._events if e.user_id == user_id]
        if since is not None:
            events = [e for e in events if timeutil.as_utc(e.occurred_at) >= since]
        return sorted(events, key=lambda e: timeutil.as_utc(e.occurred_at), reverse=True)


def at(day: dt.date, hour: int = 12, minute: int = 0) -> dt.datetime:
    return dt.datetime.combine(day, dt.time(hour, minute), tzinfo=tz.UTC)


@pytest.fixture
def now() -> dt.datetime:
    return NOW


@pytest.fixture
def utc() -> dt.tzinfo:
    return tz.UTC


@pytest.fixture
def program_profile() -> Profile:
    return Profile(
        id=USER_ID,
        name="Alex",
        baseline_per_day=20,
        program_type="reduce",
        program_start_value=20,
        program_target_value=5,
        program_duration_months=2,
        program_start_date=PROGRAM_START,
    )


@pytest.fixture
def observer_profile() -> Profile:
    return Profile(id=USER_ID, program_type="observe", baseline_per_day=10)


@pytest.fixture
def profile_repo(program_profile: Profile) -> InMemoryProfileRepository:
    return InMemoryProfileRepository([program_profile])


@pytest.fixture
def event_repo() -> InMemoryEventRepository:
    return InMemoryEventRepository()

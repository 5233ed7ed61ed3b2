"""Abstract repository interface for Profile entity."""

from __future__ import annotations

import abc
from typing import Protocol

from quit_plan.core.entities.profile import Profile


class ProfileNotFound(LookupError):
    pass


class AbstractProfileRepository(Protocol):
    """Profile repository contract (backend or local cache)."""

    @abc.abstractmethod
    def get_by_user_id(self, user_id: str) -> Profile | None: ...


def require_profile(user_id: str, profile_repo: AbstractProfileRepository) -> Profile:
    profile = profile_repo.get_by_user_id(user_id)
    if profile is None:
        raise ProfileNotFound(f"Profile {user_id} not found")
    return profile

"""Profile-completion gating rules."""

from __future__ import annotations

from typing import Optional

from tripbook.domain.enums import Role
from tripbook.domain.models import ProfileCompletion, User

_BASIC_FIELDS = (
    "phone",
    "date_of_birth",
    "country_of_residence",
    "travel_style",
    "travel_frequency",
)


def is_profile_incomplete(user: Optional[User]) -> bool:
    # guides go through their own registration flow
    if user is None or user.role == Role.GUIDE:
        return False
    return not all(getattr(user, name) for name in _BASIC_FIELDS)


def should_show_profile_prompt(user: Optional[User]) -> bool:
    if user is None or user.role == Role.GUIDE:
        return False
    if user.profile_completion_prompt_shown:
        return False
    return is_profile_incomplete(user)


def apply_profile(user: User, data: ProfileCompletion) -> User:
    """Merge submitted profile fields; blank submissions keep stored values."""
    update = {
        name: value
        for name, value in data.model_dump().items()
        if value not in ("", [], None)
    }
    return user.model_copy(update=update)


__all__ = ["apply_profile", "is_profile_incomplete", "should_show_profile_prompt"]

"""Persistence-layer record schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from tripbook.domain.enums import Role
from tripbook.domain.models import User


class DuplicateRecord(Exception):
    """Insert collided with a UNIQUE column."""


class UserRecord(BaseModel):
    id: int
    username: str
    email: str = ""
    name: str = ""
    password_hash: str
    role: Role = Role.USER
    language: str = "en"
    session_token: Optional[str] = None
    session_expiry: Optional[str] = None
    last_active_at: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    country_of_residence: Optional[str] = None
    travel_style: Optional[str] = None
    travel_frequency: Optional[str] = None
    preferred_destinations: list[str] = Field(default_factory=list)
    passport_country: Optional[str] = None
    emergency_contact: Optional[str] = None
    dietary_preferences: list[str] = Field(default_factory=list)
    profile_completion_prompt_shown: bool = False
    created_at: str

    def to_user(self) -> User:
        return User.model_validate(
            self.model_dump(
                exclude={"password_hash", "session_token", "session_expiry", "last_active_at", "created_at"}
            )
        )


class NewUser(BaseModel):
    username: str
    email: str = ""
    name: str = ""
    password_hash: str
    role: Role = Role.USER
    created_at: str


__all__ = ["DuplicateRecord", "NewUser", "UserRecord"]

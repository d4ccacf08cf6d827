"""Local-only user directory kept in the key/value store.

Credentials are stored and compared in plaintext; this backend exists for
offline demos and tests.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from tripbook.domain.enums import Role
from tripbook.domain.exceptions import AuthError, DuplicateUser, RoleMismatch
from tripbook.domain.models import ProfileCompletion, User
from tripbook.domain.profile import apply_profile
from tripbook.infrastructure.local_store import LocalStore

_logger = logging.getLogger("tripbook.auth.mock")


class MockAuthService:
    backend = "mock"

    def __init__(self, store: LocalStore, clock: Callable[[], float] = time.time):
        self._store = store
        self._clock = clock

    def current_user(self) -> Optional[User]:
        return self._store.current_user()

    def signup(
        self,
        name: str,
        email: str,
        password: str,
        confirm_password: str,
        role: Role = Role.USER,
    ) -> User:
        if not all(str(v or "").strip() for v in (name, email, password, confirm_password)):
            raise AuthError("Please fill in all fields")
        if password != confirm_password:
            raise AuthError("Passwords do not match")
        if self._store.find_user_by_email(email) is not None:
            raise DuplicateUser("User with this email already exists")

        user = User(
            id=int(self._clock() * 1000),
            username=email,
            email=email,
            name=name,
            password=password,
            role=role,
        )
        users = self._store.users()
        users.append(user)
        self._store.save_users(users)
        self._store.set_current_user(user)
        _logger.info("mock signup user_id=%s role=%s", user.id, user.role.value)
        return user

    def login(self, email: str, password: str, role: Role = Role.USER) -> User:
        if not email or not password:
            raise AuthError("Please fill in all fields")
        match = next(
            (u for u in self._store.users() if u.email == email and u.password == password),
            None,
        )
        if match is None:
            raise AuthError("Invalid email or password")
        if match.role != role:
            raise RoleMismatch(match.role.value)
        self._store.set_current_user(match)
        return match

    def logout(self) -> None:
        self._store.clear_current_user()

    def _require_user(self) -> User:
        user = self._store.current_user()
        if user is None:
            raise AuthError("Not signed in")
        return user

    def _persist(self, user: User) -> User:
        self._store.upsert_user(user)
        self._store.set_current_user(user)
        return user

    def complete_profile(self, data: ProfileCompletion) -> User:
        user = apply_profile(self._require_user(), data)
        return self._persist(user.model_copy(update={"profile_completion_prompt_shown": True}))

    def mark_prompt_shown(self) -> User:
        user = self._require_user()
        return self._persist(user.model_copy(update={"profile_completion_prompt_shown": True}))


__all__ = ["MockAuthService"]

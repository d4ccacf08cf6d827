"""Auth backed by the REST service; the session lives in the local store."""

from __future__ import annotations

import logging
from typing import Any, Optional

from tripbook.domain.enums import Role
from tripbook.domain.exceptions import AuthError
from tripbook.domain.models import ProfileCompletion, User
from tripbook.infrastructure.api_client import ApiClient
from tripbook.infrastructure.local_store import LocalStore
from tripbook.infrastructure.query_cache import QueryCache
from tripbook.shared.exceptions import ApiError

_logger = logging.getLogger("tripbook.auth.remote")


class RemoteAuthService:
    backend = "remote"

    def __init__(self, client: ApiClient, store: LocalStore, queries: Optional[QueryCache] = None):
        self._client = client
        self._store = store
        self._queries = queries

    def current_user(self) -> Optional[User]:
        return self._store.current_user()

    def _start_session(self, payload: dict[str, Any]) -> User:
        token = payload.get("token")
        if not token:
            raise AuthError("server response carried no session token")
        user = User.model_validate(payload.get("user") or {})
        self._store.set_token(str(token))
        self._store.set_current_user(user)
        self._drop_cached_queries()
        return user

    def _clear_session(self) -> None:
        self._store.clear_token()
        self._store.clear_current_user()
        self._drop_cached_queries()

    def _drop_cached_queries(self) -> None:
        # cached responses belong to whichever account was signed in before
        if self._queries is not None:
            self._queries.invalidate("/api/")

    def register(
        self,
        username: str,
        password: str,
        *,
        email: str = "",
        name: str = "",
        role: Role = Role.USER,
    ) -> User:
        body = {
            "username": username,
            "password": password,
            "email": email or username,
            "name": name or username,
            "role": role.value,
        }
        try:
            payload = self._client.post("/api/auth/register", body)
        except ApiError as exc:
            raise AuthError(exc.message) from exc
        return self._start_session(payload)

    def login(self, username: str, password: str) -> User:
        try:
            payload = self._client.post("/api/auth/login", {"username": username, "password": password})
        except ApiError as exc:
            raise AuthError(exc.message) from exc
        return self._start_session(payload)

    def me(self) -> Optional[User]:
        """Re-read the session user; an expired token clears the session."""
        if not self._store.token():
            self._store.clear_current_user()
            return None
        try:
            user = User.model_validate(self._client.get("/api/auth/me"))
        except ApiError as exc:
            if exc.is_unauthorized:
                self._clear_session()
                return None
            raise
        self._store.set_current_user(user)
        return user

    def logout(self) -> None:
        try:
            if self._store.token():
                self._client.post("/api/auth/logout")
        except ApiError as exc:
            _logger.warning("logout request failed: %s", exc)
        finally:
            self._clear_session()

    def update_language(self, language: str) -> Optional[User]:
        if not self._store.token():
            return None
        user = User.model_validate(self._client.patch("/api/auth/language", {"language": language}))
        self._store.set_current_user(user)
        return user

    def complete_profile(self, data: ProfileCompletion) -> Optional[User]:
        self._client.post("/api/auth/complete-profile", data.to_storage())
        self._client.post("/api/auth/mark-prompt-shown")
        return self.me()

    def mark_prompt_shown(self) -> Optional[User]:
        self._client.post("/api/auth/mark-prompt-shown")
        return self.me()


__all__ = ["RemoteAuthService"]

"""Shared (non-domain) exceptions."""

from __future__ import annotations

from typing import Optional


class ApiError(Exception):
    """Remote call failed with an HTTP status.

    ``str()`` keeps the ``"<status>: <message>"`` shape callers used to match
    on; new code should read ``status_code`` instead.
    """

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        if status_code is None:
            super().__init__(message)
        else:
            super().__init__(f"{status_code}: {message}")

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class NetworkError(ApiError):
    """Server could not be reached at all."""

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(None, "Network error: Unable to connect to server")

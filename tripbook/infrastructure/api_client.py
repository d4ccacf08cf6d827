"""HTTP shim used by every remote call the client makes.

Responsibilities:
  1. attach the stored bearer token
  2. JSON-encode bodies and decode responses
  3. turn HTTP failures into ``ApiError`` with a structured status code
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from tripbook.infrastructure.local_store import LocalStore
from tripbook.security.redact import redact_sensitive
from tripbook.shared.exceptions import ApiError, NetworkError

_logger = logging.getLogger("tripbook.api-client")

_DEFAULT_BASE_URL = "http://127.0.0.1:8000"


class ApiClient:
    def __init__(
        self,
        store: Optional[LocalStore] = None,
        *,
        base_url: str = _DEFAULT_BASE_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self._store = store
        self._client = http_client or httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self._store.token() if self._store is not None else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, body: Any = None) -> Any:
        """Issue ``method path`` and return the decoded JSON body (``{}`` when empty)."""
        verb = method.upper()
        kwargs: dict[str, Any] = {"headers": self._headers()}
        if body is not None and verb != "GET":
            kwargs["json"] = body

        try:
            resp = self._client.request(verb, path, **kwargs)
        except httpx.TransportError as exc:
            detail = redact_sensitive(str(exc))
            _logger.warning("network failure on %s %s: %s", verb, path, detail)
            raise NetworkError(detail) from None

        if not resp.is_success:
            raise ApiError(resp.status_code, _error_message(resp))

        if not resp.content or not resp.text.strip():
            return {}
        try:
            return resp.json()
        except ValueError:
            _logger.warning("non-JSON %s response on %s %s", resp.status_code, verb, path)
            raise ApiError(resp.status_code, "invalid JSON response") from None

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, body: Any = None) -> Any:
        return self.request("POST", path, body)

    def patch(self, path: str, body: Any = None) -> Any:
        return self.request("PATCH", path, body)

    def delete(self, path: str, body: Any = None) -> Any:
        return self.request("DELETE", path, body)


def _error_message(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("error") or payload.get("detail")
        if message:
            return str(message)
    return resp.reason_phrase or "Request failed"


__all__ = ["ApiClient"]

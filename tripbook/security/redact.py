"""Redact credentials and payment details from log lines and error strings."""

from __future__ import annotations

import re
from typing import Any

_REDACTED = "***REDACTED***"

_BEARER_RE = re.compile(r"(?i)(?P<prefix>\bbearer\s+)(?P<value>[A-Za-z0-9._~+/=-]+)")
_JSON_SECRET_RE = re.compile(
    r"(?i)(?P<prefix>[\"']?(?:password|token|authToken|cvv|cardNumber|accountNumber|upiId|walletNumber)"
    r"[\"']?\s*[:=]\s*[\"']?)(?P<value>[^\"',\s}&]+)"
)
# 15-19 digit runs, optionally grouped; TXN-/epoch-ms ids are 13 digits
_PAN_RE = re.compile(r"(?<![\w-])(?:\d[ -]?){14,18}\d\b")

SENSITIVE_DETAIL_FIELDS = frozenset(
    {"cardNumber", "cvv", "expiryDate", "accountNumber", "ifscCode", "upiId", "walletNumber"}
)


def _mask_pan(match: re.Match[str]) -> str:
    digits = re.sub(r"\D", "", match.group())
    return f"****{digits[-4:]}"


def redact_sensitive(text: str) -> str:
    if not text:
        return text
    out = _BEARER_RE.sub(lambda m: f"{m.group('prefix')}{_REDACTED}", text)
    out = _JSON_SECRET_RE.sub(lambda m: f"{m.group('prefix')}{_REDACTED}", out)
    return _PAN_RE.sub(_mask_pan, out)


def mask_payment_details(details: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``details`` safe to persist: card numbers keep the last 4 digits."""
    masked: dict[str, Any] = {}
    for key, value in details.items():
        if key not in SENSITIVE_DETAIL_FIELDS:
            masked[key] = value
        elif key in ("cardNumber", "accountNumber", "walletNumber"):
            digits = re.sub(r"\D", "", str(value or ""))
            masked[key] = f"****{digits[-4:]}" if digits else ""
        else:
            masked[key] = _REDACTED
    return masked


__all__ = ["SENSITIVE_DETAIL_FIELDS", "mask_payment_details", "redact_sensitive"]

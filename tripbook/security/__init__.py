"""Redaction and credential helpers."""

from tripbook.security.passwords import hash_password, new_session_token, verify_password
from tripbook.security.redact import mask_payment_details, redact_sensitive

__all__ = [
    "hash_password",
    "mask_payment_details",
    "new_session_token",
    "redact_sensitive",
    "verify_password",
]

"""Shared cross-layer types and exceptions."""

from tripbook.shared.exceptions import ApiError, NetworkError

__all__ = ["ApiError", "NetworkError"]

"""Runtime settings resolved from the environment."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


def _is_enabled(value: str | None) -> bool:
    return bool(value and value.strip().lower() in _TRUTHY)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return max(0.0, float(raw))
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Settings(BaseModel):
    db_path: Path = Field(default=Path("data") / "tripbook.sqlite3")
    store_path: Path = Field(default=Path("data") / "local_storage.json")
    redis_url: str | None = None
    api_base_url: str = "http://127.0.0.1:8000"
    api_timeout_seconds: float = 10.0
    generation_delay_seconds: float = 2.0
    payment_delay_seconds: float = 1.5
    session_days: int = 30
    rate_limit_max: int = 60
    rate_limit_window: int = 60
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    enable_docs: bool = False


def load_settings() -> Settings:
    db_raw = os.getenv("TRIPBOOK_DB", "").strip()
    store_raw = os.getenv("TRIPBOOK_STORE_PATH", "").strip()
    defaults = Settings()
    return Settings(
        db_path=Path(db_raw) if db_raw else defaults.db_path,
        store_path=Path(store_raw) if store_raw else defaults.store_path,
        redis_url=os.getenv("TRIPBOOK_REDIS_URL", "").strip() or None,
        api_base_url=os.getenv("TRIPBOOK_API_BASE_URL", "").strip() or defaults.api_base_url,
        api_timeout_seconds=_float_env("TRIPBOOK_API_TIMEOUT_SECONDS", defaults.api_timeout_seconds),
        generation_delay_seconds=_float_env(
            "TRIPBOOK_GENERATION_DELAY_SECONDS", defaults.generation_delay_seconds
        ),
        payment_delay_seconds=_float_env("TRIPBOOK_PAYMENT_DELAY_SECONDS", defaults.payment_delay_seconds),
        session_days=max(1, _int_env("TRIPBOOK_SESSION_DAYS", defaults.session_days)),
        rate_limit_max=max(1, _int_env("RATE_LIMIT_MAX", defaults.rate_limit_max)),
        rate_limit_window=max(1, _int_env("RATE_LIMIT_WINDOW", defaults.rate_limit_window)),
        cors_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()] or ["*"],
        enable_docs=_is_enabled(os.getenv("ENABLE_DOCS")),
    )


__all__ = ["Settings", "load_settings"]

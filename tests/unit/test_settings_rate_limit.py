"""Environment settings and the POST rate limiter."""

from __future__ import annotations

from pathlib import Path

from tripbook.config.settings import Settings, load_settings
from tripbook.infrastructure.rate_limiter import InMemoryRateLimiter, get_rate_limiter


def test_defaults(monkeypatch):
    for name in ("TRIPBOOK_DB", "TRIPBOOK_STORE_PATH", "TRIPBOOK_GENERATION_DELAY_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.db_path == Path("data") / "tripbook.sqlite3"
    assert settings.generation_delay_seconds == 2.0
    assert settings.payment_delay_seconds == 0.0
    assert settings.session_days == 30
    assert settings.cors_origins == ["*"]
    assert settings.enable_docs is False
    assert settings.redis_url is None


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("TRIPBOOK_API_BASE_URL", "http://api.internal:9000")
    monkeypatch.setenv("TRIPBOOK_SESSION_DAYS", "7")
    monkeypatch.setenv("RATE_LIMIT_MAX", "5")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("ENABLE_DOCS", "yes")
    settings = load_settings()
    assert settings.db_path == tmp_path / "tripbook.sqlite3"
    assert settings.api_base_url == "http://api.internal:9000"
    assert settings.session_days == 7
    assert settings.rate_limit_max == 5
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert settings.enable_docs is True


def test_bad_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("TRIPBOOK_PAYMENT_DELAY_SECONDS", "soon")
    monkeypatch.setenv("TRIPBOOK_GENERATION_DELAY_SECONDS", "-3")
    monkeypatch.setenv("RATE_LIMIT_WINDOW", "0")
    settings = load_settings()
    assert settings.payment_delay_seconds == Settings().payment_delay_seconds
    assert settings.generation_delay_seconds == 0.0
    assert settings.rate_limit_window == 1


def test_memory_limiter_sliding_window():
    now = {"t": 100.0}
    limiter = InMemoryRateLimiter(max_requests=2, window_seconds=10, clock=lambda: now["t"])
    assert limiter.allow("1.2.3.4")
    assert limiter.allow("1.2.3.4")
    assert not limiter.allow("1.2.3.4")
    assert limiter.allow("5.6.7.8")
    now["t"] += 10
    assert limiter.allow("1.2.3.4")


def test_get_rate_limiter_without_redis_is_memory():
    assert get_rate_limiter(3, 60).backend == "memory"


def test_memory_limiter_retry_after_counts_down():
    now = {"t": 100.0}
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=10, clock=lambda: now["t"])
    assert limiter.retry_after("1.2.3.4") == 0
    limiter.allow("1.2.3.4")
    now["t"] += 3.5
    assert not limiter.allow("1.2.3.4")
    assert limiter.retry_after("1.2.3.4") == 7

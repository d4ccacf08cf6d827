"""Runtime configuration helpers."""

from tripbook.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]

"""Configuration package."""

from threadboard.config.settings import Settings, get_settings


__all__ = ["Settings", "get_settings"]

"""Configuration module for AI review."""

from ai_review.config.settings import FallbackSettings, Settings, get_settings

__all__ = ["FallbackSettings", "Settings", "get_settings"]

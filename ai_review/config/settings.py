"""Pydantic settings for AI review fallback configuration."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

# Mirrors ai_review.core.strategy_selector.Strategy; kept literal so config
# loading never imports the engine.
KNOWN_STRATEGIES: tuple[str, ...] = (
    "none",
    "retry",
    "simplified",
    "degraded",
    "manual",
    "emergency",
)


class FallbackSettings(BaseModel):
    """Fallback behavior when the AI review call fails."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    max_attempts: int = Field(default=3, ge=1)
    strategies: tuple[str, ...] = ("retry", "simplified", "manual")

    emergency_reason: str = "emergency"
    production_branches: tuple[str, ...] = ("main", "master")
    simplified_prompt_max_chars: int = Field(default=12000, ge=100)
    large_file_line_threshold: int = Field(default=50, ge=1)

    @field_validator("strategies", mode="before")
    @classmethod
    def _normalize_strategies(cls, value: Any) -> tuple[str, ...]:
        if isinstance(value, str):
            value = value.split(",")
        names: list[str] = []
        for item in value or ():
            name = str(item).strip().lower()
            if not name:
                continue
            if name not in KNOWN_STRATEGIES:
                raise ValueError(
                    f"Unknown fallback strategy {name!r}; expected one of {', '.join(KNOWN_STRATEGIES)}"
                )
            if name not in names:
                names.append(name)
        return tuple(names)


class Settings(BaseSettings):
    """Main settings for AI review."""

    model_config = SettingsConfigDict(
        env_prefix="AI_REVIEW_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # General
    debug: bool = False
    verbose: bool = False
    log_level: str = "INFO"

    # Fallbacks
    fallbacks: FallbackSettings = Field(default_factory=FallbackSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_settings_from_yaml(yaml_path: Path) -> Settings:
    """Load settings from a YAML file."""
    with open(yaml_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    return Settings.model_validate(data or {})


def get_default_config() -> dict[str, Any]:
    """Get default configuration as a dictionary."""
    return Settings().model_dump()

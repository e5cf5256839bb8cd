"""Runtime configuration for narrative_viz."""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


DEFAULT_STORIES = {
    "Maung": "Pedja_codes.csv",
    "Kamala 1": "Kamala1.csv",
    "Kamala 2": "Kamala2.csv",
    "Tim 1": "Tim1.csv",
    "Tim 2": "Tim2.csv",
}


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Directory holding the coded transcript CSV files
    data_dir: Path = Field(
        default=Path("./data"),
        validation_alias="NARRATIVE_DATA_DIR"
    )

    # Story name -> CSV file name (relative to data_dir), JSON in the environment
    stories: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_STORIES),
        validation_alias="NARRATIVE_STORIES"
    )

    # Width of the timeline bar in pixels (1200 container minus margins)
    display_width: int = Field(
        default=1030,
        gt=0,
        validation_alias="NARRATIVE_DISPLAY_WIDTH"
    )

    log_level: str = Field(
        default="WARNING",
        validation_alias="NARRATIVE_LOG_LEVEL"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global _settings
    _settings = Settings()
    return _settings

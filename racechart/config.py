"""Parser configuration using Pydantic settings."""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Parser settings loaded from environment variables (RACECHART_*)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RACECHART_",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Glyph geometry of the source charts
    line_start_x: float = 9.92  # left margin, every chart line starts here
    preview_header_x: float = 209.385  # "Past Performance Running Line Preview" header
    wagering_row_slack: float = 10.0  # max vertical gap between payoff grid rows

    # Estimation constant for converting beaten lengths to time
    length_in_feet: float = 8.75

    # Hard-coded settlements that override natural dead-heat detection
    historical_exceptions_enabled: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Configure root logging for driver scripts."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

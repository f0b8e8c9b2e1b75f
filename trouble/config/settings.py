"""
Trouble - Application Settings

Loads configuration from environment variables using Pydantic Settings.
Timing values are in seconds.
"""

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase (snapshot persistence; in-memory storage when unset)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    snapshot_table: str = "game_snapshots"
    snapshot_name: str = "trouble-game-store"

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Turn timing
    turn_timeout: int = Field(default=30, gt=0)
    timeout_warning_threshold: int = Field(default=10, gt=0)
    die_roll_delay: float = Field(default=1.5, ge=0)
    no_moves_delay: float = Field(default=1.5, ge=0)
    forced_move_delay: float = Field(default=0.8, ge=0)

    # House rules
    six_grants_extra_turn: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @model_validator(mode="after")
    def _check_warning_threshold(self) -> "Settings":
        if self.timeout_warning_threshold >= self.turn_timeout:
            raise ValueError(
                "timeout_warning_threshold must be smaller than turn_timeout."
            )
        return self

    @property
    def use_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level to the root logger."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

"""
Parlor Games - Application Settings

Loads configuration from environment variables (or a .env file) using
Pydantic Settings.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    random_seed: int | None = None

    # King of Diamond
    starting_life_points: int = 10
    choice_min: int = 0
    choice_max: int = 100
    target_multiplier: float = 0.8
    max_cascade_rounds: int = 1000

    # Dice game
    dice_rounds: int = 3
    dice_per_player: int = 3

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()

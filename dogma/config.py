"""
Runtime configuration.

Settings are read from environment variables:
- DOGMA_ENV: deployment environment name (default "development")
- DOGMA_LOG_LEVEL: root log level for the CLI (default "WARNING")
- DOGMA_CARD_DATA: path to a card data JSON file (default: bundled cards)
- DOGMA_CHOICE_TIMEOUT: seconds a player has to answer a choice;
  zero or negative disables deadlines (default 300)
- DOGMA_MAX_STEPS: upper bound on continue steps per effect run (default 1000)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Engine settings."""
    env: str = "development"
    log_level: str = "WARNING"
    card_data: str | None = None
    choice_timeout: float | None = 300.0
    max_steps: int = 1000

    @classmethod
    def from_env(cls) -> Settings:
        timeout = float(os.getenv("DOGMA_CHOICE_TIMEOUT", "300"))
        return cls(
            env=os.getenv("DOGMA_ENV", "development"),
            log_level=os.getenv("DOGMA_LOG_LEVEL", "WARNING").upper(),
            card_data=os.getenv("DOGMA_CARD_DATA") or None,
            choice_timeout=timeout if timeout > 0 else None,
            max_steps=int(os.getenv("DOGMA_MAX_STEPS", "1000")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings loaded once from the environment."""
    return Settings.from_env()


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger for command line use."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format=LOG_FORMAT,
    )

import logging
import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App config
    DEBUG: bool = False

    # Game directory
    DEFAULT_GAME_TYPE: str = "connect4"
    GAME_RESULT_GRACE_SECONDS: int = 30

    @field_validator("GAME_RESULT_GRACE_SECONDS")
    @classmethod
    def validate_grace_seconds(cls, v: int) -> int:
        if v < 0:
            raise ValueError("GAME_RESULT_GRACE_SECONDS cannot be negative")
        return v

    @field_validator("DEFAULT_GAME_TYPE")
    @classmethod
    def validate_default_game_type(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DEFAULT_GAME_TYPE cannot be empty")
        return v


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug("Default game type: %s", settings.DEFAULT_GAME_TYPE)
    logger.debug("Result grace period: %ds", settings.GAME_RESULT_GRACE_SECONDS)
    return settings

import logging
import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.schemas.game_engine import DrawRule

logger = logging.getLogger(__name__)

MIN_ROOM_PLAYERS = 2
MAX_ROOM_PLAYERS = 4


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App config
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    DEBUG: bool = False

    # WebSocket config
    WS_HEARTBEAT_INTERVAL: int = 30
    WS_CONNECTION_TIMEOUT: int = 120

    # Room defaults, used when create_room omits them
    DEFAULT_MAX_PLAYERS: int = 2
    DEFAULT_DRAW_RULE: DrawRule = DrawRule.DRAW_UNTIL_PLAY
    DEFAULT_MAX_DRAWS_PER_TURN: int | None = None

    @field_validator("WS_HEARTBEAT_INTERVAL", "WS_CONNECTION_TIMEOUT")
    @classmethod
    def validate_positive_interval(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("WebSocket intervals must be positive")
        return v

    @field_validator("DEFAULT_MAX_PLAYERS")
    @classmethod
    def validate_max_players(cls, v: int) -> int:
        if not MIN_ROOM_PLAYERS <= v <= MAX_ROOM_PLAYERS:
            raise ValueError(
                f"DEFAULT_MAX_PLAYERS must be between {MIN_ROOM_PLAYERS} and {MAX_ROOM_PLAYERS}"
            )
        return v

    @field_validator("DEFAULT_MAX_DRAWS_PER_TURN")
    @classmethod
    def validate_max_draws(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("DEFAULT_MAX_DRAWS_PER_TURN cannot be negative")
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

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug(
        "Room defaults: max_players=%d, draw_rule=%s, max_draws=%s",
        settings.DEFAULT_MAX_PLAYERS,
        settings.DEFAULT_DRAW_RULE.value,
        settings.DEFAULT_MAX_DRAWS_PER_TURN,
    )
    return settings

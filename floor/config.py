"""
Single place for game-master configuration.
Every field can be overridden with a FLOOR_-prefixed environment variable
(or a .env file), e.g. FLOOR_DUEL_SECONDS=45. List fields take JSON:
FLOOR_CORS_ORIGINS='["http://localhost:5173"]'.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from floor.engine import DEFAULT_DUEL_SECONDS


class Settings(BaseSettings):
    # Clock budget per side for new games (some events run 45s duels)
    DUEL_SECONDS: int = Field(DEFAULT_DUEL_SECONDS, gt=0)

    # Seconds between duel clock ticks. Only tests change this.
    TICK_SECONDS: float = Field(1.0, gt=0)

    LOG_LEVEL: str = "INFO"

    # Frontend dev servers allowed to call the API
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
        "http://localhost:3000",
    ]

    model_config = SettingsConfigDict(
        env_prefix="FLOOR_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


_settings: Settings | None = None


def get_settings() -> Settings:
    """Settings are read once per process; bad values raise a ValidationError."""
    global _settings
    if not _settings:
        _settings = Settings()
    return _settings

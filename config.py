"""Application configuration using pydantic-settings."""

from datetime import date

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Discord
    discord_token: str = Field(default="", alias="DISCORD_TOKEN")

    # Database
    database_path: str = Field(default="skioguessr.db", alias="DATABASE_PATH")
    storage_key_prefix: str = Field(default="ski-o-guessr", alias="STORAGE_KEY_PREFIX")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Daily puzzle
    puzzle_time_zone: str = Field(default="America/New_York", alias="PUZZLE_TIME_ZONE")
    game_start_date: date = Field(default=date(2024, 3, 1), alias="GAME_START_DATE")
    rollover_check_seconds: int = Field(default=60, alias="ROLLOVER_CHECK_SECONDS")
    session_idle_seconds: int = Field(default=3600, alias="SESSION_IDLE_SECONDS")

    # Resort catalog and assets
    data_dir: str = Field(default="data/ski-data", alias="SKI_DATA_DIR")
    image_base_url: str = Field(default="/ski-images", alias="IMAGE_BASE_URL")
    share_url: str = Field(default="https://skioguessr.app", alias="SHARE_URL")


# Global settings instance
settings = Settings()


class Config:
    """Uppercase config interface used throughout the code base."""

    DISCORD_TOKEN = settings.discord_token
    DATABASE_PATH = settings.database_path
    STORAGE_KEY_PREFIX = settings.storage_key_prefix
    LOG_LEVEL = settings.log_level.upper()
    PUZZLE_TIME_ZONE = settings.puzzle_time_zone
    GAME_START_DATE = settings.game_start_date
    ROLLOVER_CHECK_SECONDS = settings.rollover_check_seconds
    SESSION_IDLE_SECONDS = settings.session_idle_seconds
    DATA_DIR = settings.data_dir
    IMAGE_BASE_URL = settings.image_base_url
    SHARE_URL = settings.share_url

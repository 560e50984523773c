"""
Configuration management for the Flashdeck vocabulary trainer
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Telegram Bot Configuration
    telegram_bot_token: str = Field(default="", env="TELEGRAM_BOT_TOKEN")
    allowed_users: str = Field(default="", env="ALLOWED_USERS")

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///data/flashdeck.db", env="DATABASE_URL"
    )

    # Vocabulary Data
    words_path: str = Field(default="data/words.json", env="WORDS_PATH")
    sentences_path: str = Field(default="data/sentences.json", env="SENTENCES_PATH")

    # Application Configuration
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    debug: bool = Field(default=False, env="DEBUG")
    polling_interval: float = Field(default=1.0, env="POLLING_INTERVAL")

    # Progression Engine
    required_per_direction: int = Field(default=5, env="REQUIRED_PER_DIRECTION")
    open_deck_size: int = Field(default=80, env="OPEN_DECK_SIZE")
    lock_milestone: int = Field(default=50, env="LOCK_MILESTONE")
    unlock_streak_required: int = Field(default=100, env="UNLOCK_STREAK_REQUIRED")
    default_direction_mode: str = Field(default="mixed", env="DEFAULT_DIRECTION_MODE")

    # Spaced Repetition Configuration
    default_ease_factor: float = Field(default=2.5, env="DEFAULT_EASE_FACTOR")
    min_ease_factor: float = Field(default=1.3, env="MIN_EASE_FACTOR")
    max_ease_factor: float = Field(default=2.5, env="MAX_EASE_FACTOR")
    ease_bonus: float = Field(default=0.1, env="EASE_BONUS")
    ease_penalty: float = Field(default=0.15, env="EASE_PENALTY")
    failure_interval_multiplier: float = Field(
        default=0.5, env="FAILURE_INTERVAL_MULTIPLIER"
    )

    @property
    def allowed_users_list(self) -> list[int]:
        """Convert allowed_users string to list of integers"""
        if not self.allowed_users.strip():
            return []
        return [
            int(user_id.strip())
            for user_id in self.allowed_users.split(",")
            if user_id.strip()
        ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def get_database_path(database_url: str | None = None) -> str:
    """Get the database file path from URL"""
    if database_url is None:
        database_url = get_settings().database_url
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "")
    return "data/flashdeck.db"

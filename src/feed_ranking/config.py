"""Application configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = "feed-ranking"
    app_env: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # API Settings
    # -------------------------------------------------------------------------
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 4
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------
    storage_backend: Literal["memory", "redis"] = "memory"
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0

    preferences_storage_key: str = "look.prefs.v2"
    legacy_preferences_storage_key: str = "look.prefs.v1"
    views_storage_key: str = "look.metrics.v1.views"

    @property
    def redis_url(self) -> str:
        """Construct Redis connection URL."""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # -------------------------------------------------------------------------
    # Preference Decay
    # -------------------------------------------------------------------------
    decay_half_life_days: float = Field(default=14.0, gt=0)

    # -------------------------------------------------------------------------
    # Ranking Weights
    # -------------------------------------------------------------------------
    weight_category: float = Field(default=0.9, ge=0)
    weight_store: float = Field(default=0.6, ge=0)
    weight_gender: float = Field(default=0.4, ge=0)
    weight_size: float = Field(default=0.3, ge=0)
    weight_price: float = Field(default=0.3, ge=0)
    weight_eta: float = Field(default=0.2, ge=0)
    weight_product: float = Field(default=0.15, ge=0)
    weight_trend: float = Field(default=0.1, ge=0)
    noise_jitter: float = Field(default=0.05, ge=0)
    popularity_saturation: float = Field(default=100.0, gt=0)

    # -------------------------------------------------------------------------
    # Exploration
    # -------------------------------------------------------------------------
    exploration_epsilon: float = Field(default=0.08, ge=0, le=1)
    exploration_trend_boost: float = Field(default=2.2, ge=1)
    exploration_max_injections: int = Field(default=6, ge=0)
    exploration_window: int = Field(default=24, ge=1)
    exploration_start_offset: int = Field(default=3, ge=1)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

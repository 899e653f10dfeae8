"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class HistoryBackend(str, Enum):
    memory = "memory"
    redis = "redis"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # LLM Providers (chat completion + intent classification)
    ANTHROPIC_API_KEY: str = ""
    OPENAI_API_KEY: str = ""
    LLM_TIMEOUT: int = 30
    LLM_MAX_RETRIES: int = 3

    # Conversation history
    HISTORY_BACKEND: HistoryBackend = HistoryBackend.memory
    HISTORY_MAX_MESSAGES: int = 20
    HISTORY_TTL_SECONDS: int = 0  # 0 keeps history until cleared
    REDIS_URL: str = "redis://localhost:6379/0"

    # JWT Authentication
    JWT_SECRET_KEY: str = "CHANGE-ME-IN-PRODUCTION-use-openssl-rand-hex-32"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # CORS
    CORS_ALLOWED_ORIGINS: str = "*"

    # Business defaults
    DEFAULT_BRANCH_ID: str = "MAIN"


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()

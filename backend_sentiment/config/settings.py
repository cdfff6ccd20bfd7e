"""
Application settings.

Read once from the environment (after loading .env) into a frozen dataclass so the
store, API server and entrypoint share one typed view of configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from backend_sentiment.config.env import (
    DEFAULT_CLASSIFIER_BASE_URL,
    DEV_CORS_ORIGINS,
    env_float,
    env_int,
    env_list,
    env_str,
    get_environment,
    load_sentiment_env,
    normalize_database_url,
)


@dataclass(frozen=True)
class Settings:
    """Service configuration resolved from environment variables."""

    database_url: str | None = None
    host: str = "0.0.0.0"
    port: int = 3001
    environment: str = "development"
    cors_origins: tuple[str, ...] = DEV_CORS_ORIGINS
    classifier_base_url: str = DEFAULT_CLASSIFIER_BASE_URL
    classifier_timeout_sec: float = 30.0
    # Pool bound: pool_size + max_overflow concurrent connections; extra requests wait pool_timeout_sec
    db_pool_size: int = 10
    db_max_overflow: int = 10
    db_pool_timeout_sec: float = 30.0
    db_connect_timeout_sec: int = 5
    db_pool_recycle_sec: int = 30
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def _cors_origins(environment: str) -> tuple[str, ...]:
    explicit = env_list("CORS_ORIGINS")
    if explicit:
        return tuple(explicit)
    if environment == "production":
        frontend = env_str("FRONTEND_URL")
        return (frontend,) if frontend else ()
    return DEV_CORS_ORIGINS


def load_settings() -> Settings:
    """Build Settings from the current environment. Raises ValueError on malformed numbers."""
    load_sentiment_env()
    environment = get_environment()
    database_url = env_str("DATABASE_URL")
    return Settings(
        database_url=normalize_database_url(database_url) if database_url else None,
        host=env_str("API_HOST", "0.0.0.0"),
        port=env_int("PORT", 3001),
        environment=environment,
        cors_origins=_cors_origins(environment),
        classifier_base_url=env_str("CLASSIFIER_BASE_URL", DEFAULT_CLASSIFIER_BASE_URL).rstrip("/"),
        classifier_timeout_sec=env_float("CLASSIFIER_TIMEOUT_SEC", 30.0),
        db_pool_size=env_int("DB_POOL_SIZE", 10),
        db_max_overflow=env_int("DB_MAX_OVERFLOW", 10),
        db_pool_timeout_sec=env_float("DB_POOL_TIMEOUT_SEC", 30.0),
        db_connect_timeout_sec=env_int("DB_CONNECT_TIMEOUT_SEC", 5),
        db_pool_recycle_sec=env_int("DB_POOL_RECYCLE_SEC", 30),
        log_level=env_str("LOG_LEVEL", "INFO").upper(),
        log_format=env_str("LOG_FORMAT", "json").lower(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first call."""
    return load_settings()

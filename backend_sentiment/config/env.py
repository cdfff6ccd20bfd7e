"""
Environment variable loading for Backend Sentiment.

- DATABASE_URL: PostgreSQL connection string (unset → fallback mode, no persistence)
- NODE_ENV / APP_ENV: development | production (selects CORS origins and SSL)
- CLASSIFIER_BASE_URL: external classification service
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is backend_sentiment/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_CLASSIFIER_BASE_URL = "https://sentiment-classifier.hf.space"

DEV_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def load_sentiment_env() -> None:
    """Load .env from project root. Safe to call multiple times; existing env wins."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or "").strip() or default


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def env_float(name: str, default: float) -> float:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def env_list(name: str) -> list[str]:
    """Comma-separated env value as a list of non-empty entries."""
    return [item.strip() for item in env_str(name).split(",") if item.strip()]


def get_environment() -> str:
    """
    Return the execution mode: production | development.
    NODE_ENV is honoured for compatibility with existing deployments; APP_ENV wins when both are set.
    """
    raw = (env_str("APP_ENV") or env_str("NODE_ENV") or "development").lower()
    if raw in ("production", "prod"):
        return "production"
    return "development"


def normalize_database_url(url: str) -> str:
    """Accept Heroku/Render style postgres:// URLs, which SQLAlchemy 2 rejects."""
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url

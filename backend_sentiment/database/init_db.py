"""
Create the sentiment_analysis table.

Usage:
    python -m backend_sentiment.database.init_db
"""

from __future__ import annotations

import sys

from backend_sentiment.config import get_settings
from backend_sentiment.database.database import SQLAlchemyStore, open_store
from backend_sentiment.sentiment_logging import get_logger

logger = get_logger(__name__)


def main() -> int:
    settings = get_settings()
    if not settings.database_url:
        logger.error("init_db_not_configured", message="Set DATABASE_URL to create tables")
        return 1
    store = open_store(settings.database_url, production=settings.is_production)
    try:
        if not isinstance(store, SQLAlchemyStore):
            logger.error("init_db_connection_failed", connection_status=store.connection_status)
            return 1
        summary = store.count_and_last_updated()
        logger.info("init_db_done", database_type=store.database_type, total_entries=summary.total_entries)
        return 0
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())

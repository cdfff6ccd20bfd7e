"""
Main entrypoint: open the sentiment store, then serve the FastAPI app with uvicorn.

A missing DATABASE_URL or an unreachable database is not fatal (fallback mode, reads
return empty results). Any other error while opening the store exits with status 1
before the server accepts traffic. SIGINT/SIGTERM stop uvicorn, and the lifespan
closes the connection pool.

Env: DATABASE_URL, PORT, API_HOST, NODE_ENV/APP_ENV, CORS_ORIGINS, CLASSIFIER_BASE_URL, LOG_LEVEL, LOG_FORMAT.

API-only (store opened by the lifespan): uvicorn backend_sentiment.api_server.app:app --port 3001
"""

import sys

# Configure structured JSON logging before other imports that may log
from backend_sentiment.sentiment_logging import configure_logging, get_logger

logger = get_logger("main")


def main() -> None:
    """Open the store, build the app around it, and run uvicorn in the main thread."""
    from backend_sentiment.api_server.server import create_app, store_options
    from backend_sentiment.config import get_settings
    from backend_sentiment.database import open_store

    try:
        settings = get_settings()
    except ValueError as e:
        logger.error("main_config_error", error=str(e))
        sys.exit(1)

    configure_logging(settings.log_level, settings.log_format)

    try:
        store = open_store(settings.database_url, **store_options(settings))
    except Exception as e:
        logger.exception("main_database_init_failed", error=str(e))
        sys.exit(1)

    logger.info(
        "main_store_opened",
        connection_status=store.connection_status,
        database_type=store.database_type,
    )

    app = create_app(settings, store=store)

    import uvicorn

    logger.info("main_server_starting", host=settings.host, port=settings.port, environment=settings.environment)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()

"""
FastAPI/ASGI application entrypoint.

Run with: uvicorn backend_sentiment.api_server.app:app --host 0.0.0.0 --port 3001
(or `python main.py`, which also exits non-zero on a fatal database error).
"""

from backend_sentiment.api_server.server import create_app

app = create_app()

__all__ = ["app"]

"""
Backend Sentiment: persistence, statistics and live updates for sentiment analysis results.

Stores classification results, aggregates per-class statistics, serves them over REST,
pushes changes to WebSocket subscribers, and proxies requests to the external classifier.
"""

__version__ = "0.1.0"

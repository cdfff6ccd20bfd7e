"""
API server package: REST endpoints, WebSocket push channel and classifier proxy.

Serves stored sentiment results and statistics, pushes the aggregate view to
subscribers after every mutation, and forwards prediction requests upstream.
"""

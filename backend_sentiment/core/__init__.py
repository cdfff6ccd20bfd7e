"""
Core utilities shared by the store, aggregation layer and API server.
"""

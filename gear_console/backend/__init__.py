"""
Backend Package

FastAPI application serving the inventory API from an in-memory store.
"""

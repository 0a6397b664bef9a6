"""FastAPI application and routes."""

from crabo.api.app import create_app, main

__all__ = [
    "create_app",
    "main",
]

"""API route modules."""

from crabo.api.routes.health import router as health_router
from crabo.api.routes.snap import router as snap_router

__all__ = [
    "health_router",
    "snap_router",
]

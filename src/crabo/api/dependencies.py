"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from crabo.client import CraboClient


async def get_crabo_client(request: Request) -> CraboClient:
    """Get snapshot client from app state."""
    client = getattr(request.app.state, "crabo_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Snapshot client is not initialized",
        )
    return client


# Type aliases for cleaner dependency injection
Crabo = Annotated[CraboClient, Depends(get_crabo_client)]

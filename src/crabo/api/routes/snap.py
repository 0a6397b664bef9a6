"""Snapshot endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from crabo.api.dependencies import Crabo
from crabo.api.schemas import SnapRequest, SnapResponse, SnapshotResponse

router = APIRouter(tags=["snap"])


@router.post(
    "/snap",
    response_model=SnapResponse,
    operation_id="snap",
    summary="Make snapshots",
    description=(
        "Make link previews of up to 100 URLs. URLs that are invalid, ignored, "
        "disallowed or have nothing to preview are left out of the response."
    ),
)
async def snap(payload: SnapRequest, client: Crabo) -> SnapResponse:
    """Make snapshots of requested URLs."""
    snapshots = await client.snap_many(
        payload.urls,
        bypass_cache=payload.bypass_cache,
    )

    return SnapResponse(
        snapshots=[SnapshotResponse.model_validate(s) for s in snapshots],
    )

"""Health endpoint."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from studiomedia.api.dependencies import get_uploader

if TYPE_CHECKING:
    from studiomedia.interfaces import MediaUploader

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    uploader: str
    latency_ms: float | None = None


@router.get("/health", response_model=HealthResponse)
async def get_health(
    uploader: MediaUploader = Depends(get_uploader),
) -> HealthResponse | JSONResponse:
    """Report whether the media host is reachable."""
    started = time.monotonic()
    reachable = await uploader.ping()
    latency_ms = round((time.monotonic() - started) * 1000, 1)

    if reachable:
        return HealthResponse(status="healthy", uploader="ok", latency_ms=latency_ms)

    payload = HealthResponse(status="unhealthy", uploader="unreachable", latency_ms=latency_ms)
    return JSONResponse(status_code=503, content=payload.model_dump(mode="json"))

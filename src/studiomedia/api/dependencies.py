"""FastAPI dependency helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from fastapi import Depends, Request, status

from studiomedia.api.errors import APIError, APIErrorCode

if TYPE_CHECKING:
    from studiomedia.app import Application
    from studiomedia.ingest import MediaIngestor
    from studiomedia.interfaces import MediaUploader


async def get_studiomedia_app(request: Request) -> Application:
    """Get the Application instance from request state."""
    app = cast("Application | None", getattr(request.app.state, "studiomedia", None))
    if app is None:
        raise APIError(
            "Application not initialized",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code=APIErrorCode.APP_NOT_INITIALIZED,
        )
    return app


async def get_ingestor(app: Application = Depends(get_studiomedia_app)) -> MediaIngestor:
    return app.ingestor


async def get_uploader(app: Application = Depends(get_studiomedia_app)) -> MediaUploader:
    return app.uploader

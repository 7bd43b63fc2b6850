"""API route registration."""

from __future__ import annotations

from fastapi import FastAPI

from studiomedia.api.routes import health, media


def register_routes(app: FastAPI) -> None:
    """Register all API routers."""
    app.include_router(health.router)
    app.include_router(media.router)

"""HTTP surface of the media service: app factories and the uvicorn runner."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studiomedia import __version__
from studiomedia.api.errors import register_exception_handlers
from studiomedia.api.routes import register_routes

if TYPE_CHECKING:
    from studiomedia.app import Application

logger = logging.getLogger(__name__)

_API_DESCRIPTION = (
    "Turns inline base64 images and multipart files into hosted media URLs "
    "organized by client and project."
)


def create_contract_app() -> FastAPI:
    """Routes and error envelope only, with no application attached.

    Used for schema export and for route tests that inject their own
    dependencies.
    """
    api = FastAPI(title="Studio Media API", version=__version__, description=_API_DESCRIPTION)
    register_exception_handlers(api)
    register_routes(api)
    return api


def create_app(app_instance: Application) -> FastAPI:
    """Bind the contract app to a loaded Application and apply CORS."""
    api = create_contract_app()
    api.state.studiomedia = app_instance
    api.add_middleware(CORSMiddleware, **cors_options(app_instance.config.server.cors_origins))
    return api


def cors_options(origins: list[str]) -> dict[str, Any]:
    # Browsers reject credentialed responses to a wildcard origin.
    return {
        "allow_origins": list(origins),
        "allow_credentials": "*" not in origins,
        "allow_methods": ["*"],
        "allow_headers": ["*"],
    }


class APIServer:
    """Runs uvicorn inside the caller's event loop.

    `start` returns once the socket is listening, so a bind failure surfaces
    to the caller instead of dying silently in a background task. Signal
    handling is left to the Application.
    """

    _POLL_INTERVAL_S = 0.01

    def __init__(
        self,
        app: FastAPI,
        host: str,
        port: int,
        *,
        startup_timeout_s: float = 5.0,
        shutdown_timeout_s: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self._startup_timeout_s = startup_timeout_s
        self._shutdown_timeout_s = shutdown_timeout_s
        self._uvicorn = uvicorn.Server(
            uvicorn.Config(
                app,
                host=host,
                port=port,
                loop="asyncio",
                log_level="info",
                access_log=False,
            )
        )
        self._uvicorn.install_signal_handlers = lambda: None  # type: ignore[method-assign]
        self._serving: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._serving is not None and not self._serving.done()

    async def start(self) -> None:
        if self._serving is not None:
            return
        self._serving = asyncio.create_task(self._uvicorn.serve(), name="studiomedia-api")
        try:
            await asyncio.wait_for(self._listening(), timeout=self._startup_timeout_s)
        except BaseException as exc:
            await self._abort_startup()
            if isinstance(exc, TimeoutError):
                raise TimeoutError(
                    f"API server on {self.host}:{self.port} did not start within "
                    f"{self._startup_timeout_s:g}s"
                ) from exc
            raise
        logger.info("API listening on http://%s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Ask uvicorn to drain; force-close connections after the grace period."""
        serving, self._serving = self._serving, None
        if serving is None:
            return
        self._uvicorn.should_exit = True
        try:
            await asyncio.wait_for(asyncio.shield(serving), timeout=self._shutdown_timeout_s)
        except TimeoutError:
            logger.warning(
                "API server still draining after %.1fs; forcing exit", self._shutdown_timeout_s
            )
            self._uvicorn.force_exit = True
            await serving
        except Exception:
            logger.exception("API server exited with an error")
            return
        logger.info("API server stopped")

    async def _listening(self) -> None:
        assert self._serving is not None
        while not self._uvicorn.started:
            if self._serving.done():
                # Re-raise the bind error, if any.
                self._serving.result()
                raise RuntimeError(f"API server on {self.host}:{self.port} exited during startup")
            await asyncio.sleep(self._POLL_INTERVAL_S)

    async def _abort_startup(self) -> None:
        serving, self._serving = self._serving, None
        if serving is None:
            return
        self._uvicorn.should_exit = True
        if not serving.done():
            await asyncio.wait({serving}, timeout=self._shutdown_timeout_s)
        if serving.done() and not serving.cancelled() and serving.exception() is not None:
            logger.debug("API server startup error: %s", serving.exception())

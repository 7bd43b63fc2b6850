"""Main application that wires all components together."""

from __future__ import annotations

import asyncio
import logging
import signal
from pathlib import Path
from typing import TYPE_CHECKING

from studiomedia.api import APIServer, create_app
from studiomedia.config import load_config
from studiomedia.ingest import MediaIngestor
from studiomedia.models.enums import ResourceType
from studiomedia.plugins.uploaders import create_uploader

if TYPE_CHECKING:
    from studiomedia.interfaces import MediaUploader
    from studiomedia.models.config import Config

logger = logging.getLogger(__name__)


class Application:
    """Owns the config, the uploader, the ingestor and the API server.

    `load()` builds components without starting the server, so the CLI's
    one-shot commands reuse the same wiring as `run()`.
    """

    def __init__(self, config_path: Path) -> None:
        self._config_path = config_path
        self._config: Config | None = None
        self._uploader: MediaUploader | None = None
        self._ingestor: MediaIngestor | None = None
        self._api_server: APIServer | None = None

        self._shutdown_event = asyncio.Event()
        self._shutdown_started = False

    def load(self) -> None:
        """Load config and create the uploader and ingestor."""
        self._config = load_config(self._config_path)
        logger.info("Config loaded from %s", self._config_path)

        uploader_cfg = self._config.uploader
        self._uploader = create_uploader(uploader_cfg)
        resource_type = (
            uploader_cfg.cloudinary.resource_type
            if uploader_cfg.backend == "cloudinary" and uploader_cfg.cloudinary is not None
            else ResourceType.AUTO
        )
        self._ingestor = MediaIngestor(
            self._uploader,
            paths=uploader_cfg.paths,
            limits=self._config.limits,
            resource_type=resource_type,
        )
        logger.info("Uploader backend: %s", uploader_cfg.backend)

    async def run(self) -> None:
        """Serve the API until a shutdown signal arrives."""
        logger.info("Starting studio media application...")
        self.load()
        self._setup_signal_handlers()

        server_cfg = self.config.server
        self._api_server = APIServer(create_app(self), server_cfg.host, server_cfg.port)
        await self._api_server.start()

        await self._shutdown_event.wait()
        await self.shutdown()

    def _setup_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._handle_signal, sig)

    def _handle_signal(self, sig: signal.Signals) -> None:
        if self._shutdown_started:
            logger.warning("Shutdown already in progress, ignoring signal")
            return

        logger.info("Received signal %s, initiating shutdown...", sig.name)
        self._shutdown_started = True
        self._shutdown_event.set()

    async def shutdown(self) -> None:
        """Stop the API server, then release the uploader."""
        logger.info("Shutting down application...")

        # Stop accepting requests before the uploader session goes away.
        if self._api_server:
            await self._api_server.stop()

        if self._uploader:
            await self._uploader.shutdown()

        logger.info("Application shutdown complete")

    @property
    def config(self) -> Config:
        if self._config is None:
            raise RuntimeError("Config not loaded")
        return self._config

    @property
    def uploader(self) -> MediaUploader:
        if self._uploader is None:
            raise RuntimeError("Uploader not initialized")
        return self._uploader

    @property
    def ingestor(self) -> MediaIngestor:
        if self._ingestor is None:
            raise RuntimeError("Ingestor not initialized")
        return self._ingestor

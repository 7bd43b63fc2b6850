"""Local filesystem uploader."""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path, PurePosixPath

from studiomedia.errors import UploadFailedError
from studiomedia.interfaces import MediaUploader
from studiomedia.models.config import LocalUploaderConfig
from studiomedia.models.enums import ResourceType
from studiomedia.models.upload import UploadResult, UploadTarget
from studiomedia.plugins.registry import PluginType, plugin

logger = logging.getLogger(__name__)


@plugin(plugin_type=PluginType.UPLOADER, name="local")
class LocalUploader(MediaUploader):
    """Local uploader for development and tests."""

    config_cls = LocalUploaderConfig

    @classmethod
    def create(cls, config: LocalUploaderConfig) -> MediaUploader:
        return cls(config)

    def __init__(self, config: LocalUploaderConfig) -> None:
        self.root = Path(config.root).expanduser().resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.url_prefix = config.url_prefix.rstrip("/") if config.url_prefix else None
        self._shutdown_called = False

    async def upload(
        self,
        payload: bytes,
        target: UploadTarget,
        resource_type: ResourceType = ResourceType.AUTO,
    ) -> UploadResult:
        _ = resource_type
        self._ensure_open()
        if not payload:
            raise UploadFailedError("Cannot upload an empty file")

        public_id = f"{target.folder}/{uuid.uuid4().hex}"
        dest = self._full_dest_path(public_id)
        try:
            await asyncio.to_thread(self._write, dest, payload)
        except OSError as exc:
            raise UploadFailedError(
                "Failed to write asset to local storage", host_message=str(exc), cause=exc
            ) from exc

        logger.debug("Stored asset locally: %s", dest)
        return UploadResult(
            url=self._url_for(public_id, dest), public_id=public_id, size_bytes=len(payload)
        )

    async def delete(self, public_id: str) -> None:
        self._ensure_open()
        path = self._full_dest_path(public_id)
        await asyncio.to_thread(path.unlink, True)

    async def ping(self) -> bool:
        return self.root.exists() and self.root.is_dir()

    async def shutdown(self, timeout: float | None = None) -> None:
        _ = timeout
        self._shutdown_called = True

    def _write(self, dest: Path, payload: bytes) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(payload)

    def _url_for(self, public_id: str, dest: Path) -> str:
        if self.url_prefix:
            return f"{self.url_prefix}/{public_id}"
        return dest.as_uri()

    def _ensure_open(self) -> None:
        if self._shutdown_called:
            raise RuntimeError("Uploader has been shut down")

    def _full_dest_path(self, public_id: str) -> Path:
        cleaned = str(public_id).lstrip("/")
        if not cleaned or "\\" in cleaned:
            raise ValueError(f"Invalid public_id: {public_id}")
        path = PurePosixPath(cleaned)
        if path.is_absolute() or ".." in path.parts:
            raise ValueError(f"Invalid public_id: {public_id}")
        return self.root.joinpath(*path.parts)

"""Cloudinary uploader plugin."""

from __future__ import annotations

import asyncio
import io
import json
import logging
import time
from typing import Any

import cloudinary
import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader

from studiomedia.config.loader import resolve_env_var
from studiomedia.errors import (
    ConfigurationError,
    MediaError,
    PayloadTooLargeError,
    UnsupportedFormatError,
    UploadFailedError,
    UploadTimeoutError,
)
from studiomedia.interfaces import MediaUploader
from studiomedia.models.config import CloudinaryUploaderConfig
from studiomedia.models.enums import ResourceType
from studiomedia.models.upload import UploadResult, UploadTarget
from studiomedia.plugins.registry import PluginType, plugin

logger = logging.getLogger(__name__)

_TOO_LARGE_MESSAGE = "File size too large. Please compress your GIF or use a smaller file."
_INVALID_TYPE_MESSAGE = "Invalid file type. Please ensure you're uploading a valid image or GIF."
_CONFIG_MESSAGE = "Upload configuration error. Please contact support."
_GENERIC_MESSAGE = "Failed to upload image to media host"

_CONFIG_STATUSES = {401, 403, 404}

# Fallback only: host messages are not a versioned contract and may change.
_TOO_LARGE_MARKERS = ("file size too large", "too large")
_INVALID_TYPE_MARKERS = ("invalid file type", "invalid image file", "unsupported")
_CONFIG_MARKERS = (
    "upload preset not found",
    "invalid api_key",
    "unknown api key",
    "invalid signature",
    "cloud_name",
    "must supply api_key",
)
_TIMEOUT_MARKERS = ("timed out", "timeout")

# The SDK raises typed errors but rarely attaches the HTTP status.
_SDK_ERROR_STATUS: tuple[tuple[type[cloudinary.exceptions.Error], int], ...] = (
    (cloudinary.exceptions.AuthorizationRequired, 401),
    (cloudinary.exceptions.NotAllowed, 403),
    (cloudinary.exceptions.NotFound, 404),
    (cloudinary.exceptions.BadRequest, 400),
)


def classify_host_error(status: int | None, host_message: str) -> MediaError:
    """Map a host rejection onto the media error taxonomy.

    HTTP status is the primary signal; message substrings are consulted only
    when the status is not specific.
    """
    if status in _CONFIG_STATUSES:
        return ConfigurationError(_CONFIG_MESSAGE, detail=host_message)
    if status == 413:
        return PayloadTooLargeError(_TOO_LARGE_MESSAGE, detail=host_message)
    if status == 415:
        return UnsupportedFormatError(_INVALID_TYPE_MESSAGE, detail=host_message)

    lowered = host_message.lower()
    if any(marker in lowered for marker in _TOO_LARGE_MARKERS):
        return PayloadTooLargeError(_TOO_LARGE_MESSAGE, detail=host_message)
    if any(marker in lowered for marker in _INVALID_TYPE_MARKERS):
        return UnsupportedFormatError(_INVALID_TYPE_MESSAGE, detail=host_message)
    if any(marker in lowered for marker in _CONFIG_MARKERS):
        return ConfigurationError(_CONFIG_MESSAGE, detail=host_message)
    return UploadFailedError(_GENERIC_MESSAGE, host_message=host_message, status=status)


def classify_sdk_error(exc: cloudinary.exceptions.Error, timeout_s: float) -> MediaError:
    """Classify an SDK exception using its `http_code` or type, then its message."""
    host_message = str(exc) or type(exc).__name__
    status = getattr(exc, "http_code", None)
    if not isinstance(status, int):
        status = next(
            (code for error_cls, code in _SDK_ERROR_STATUS if isinstance(exc, error_cls)), None
        )
    if status is None and any(marker in host_message.lower() for marker in _TIMEOUT_MARKERS):
        return UploadTimeoutError(
            f"Media host did not respond within {timeout_s:g}s: {host_message}",
            timeout_s=timeout_s,
        )
    return classify_host_error(status, host_message)


@plugin(plugin_type=PluginType.UPLOADER, name="cloudinary")
class CloudinaryUploader(MediaUploader):
    """Cloudinary uploader backed by the official SDK.

    Credentials travel with every call instead of the SDK's global config, so
    several uploaders can coexist in one process. SDK calls block, so they run
    in worker threads bounded by `timeout_s`. Payloads larger than
    `chunk_size` go through `upload_large`, which sends one chunk per request
    under a single upload id. Failures are classified and never retried.
    """

    config_cls = CloudinaryUploaderConfig

    @classmethod
    def create(cls, config: CloudinaryUploaderConfig) -> MediaUploader:
        return cls(config)

    def __init__(self, config: CloudinaryUploaderConfig) -> None:
        self.cloud_name = config.cloud_name or resolve_env_var(
            config.cloud_name_env, required=False
        )
        self._api_key = resolve_env_var(config.api_key_env, required=False)
        self._api_secret = resolve_env_var(config.api_secret_env, required=False)
        self._env_names = (config.cloud_name_env, config.api_key_env, config.api_secret_env)
        self.upload_prefix = config.upload_prefix
        self.chunk_size = config.chunk_size
        self.timeout_s = config.timeout_s
        self.quality = config.quality
        self.fetch_format = config.fetch_format
        self.default_resource_type = config.resource_type
        self._shutdown_called = False

        if not self.cloud_name or not self._api_key or not self._api_secret:
            logger.warning(
                "Cloudinary credentials incomplete; uploads will fail until %s, %s, %s are set",
                *self._env_names,
            )
        logger.info(
            "CloudinaryUploader initialized: cloud=%s chunk_size=%d timeout_s=%.1f",
            self.cloud_name,
            self.chunk_size,
            self.timeout_s,
        )

    async def upload(
        self,
        payload: bytes,
        target: UploadTarget,
        resource_type: ResourceType = ResourceType.AUTO,
    ) -> UploadResult:
        """Upload one asset into `target.folder`."""
        self._ensure_open()
        if not payload:
            raise UploadFailedError("Cannot upload an empty file")

        kind = ResourceType(resource_type or self.default_resource_type)
        options = {
            **self._call_options(),
            "folder": target.folder,
            "resource_type": kind.value,
        }
        if self.quality:
            options["quality"] = self.quality
        if self.fetch_format:
            options["fetch_format"] = self.fetch_format

        started = time.monotonic()
        body = await self._run(self._upload_blocking, payload, options)
        result = self._parse_result(body)
        logger.info(
            "Uploaded asset to Cloudinary: folder=%s public_id=%s bytes=%d",
            target.folder,
            result.public_id,
            result.size_bytes,
            extra={"duration_ms": round((time.monotonic() - started) * 1000, 1)},
        )
        return result

    async def delete(self, public_id: str) -> None:
        """Destroy an asset. Idempotent: `not found` is treated as success."""
        self._ensure_open()
        body = await self._run(
            cloudinary.uploader.destroy, public_id, **self._call_options(), invalidate=True
        )

        outcome = body.get("result") if isinstance(body, dict) else None
        if outcome not in ("ok", "not found"):
            raise UploadFailedError(
                "Failed to delete asset from media host", host_message=str(outcome)
            )
        logger.debug("Deleted Cloudinary asset: %s (%s)", public_id, outcome)

    async def ping(self) -> bool:
        """Health check via the admin API ping endpoint."""
        if self._shutdown_called:
            return False
        if not self.cloud_name or not self._api_key or not self._api_secret:
            return False

        try:
            body = await self._run(cloudinary.api.ping, **self._call_options())
        except MediaError as exc:
            logger.warning("Cloudinary ping failed: %s (%s)", exc, exc.detail)
            return False
        return isinstance(body, dict) and body.get("status") == "ok"

    async def shutdown(self, timeout: float | None = None) -> None:
        """Refuse further calls. The SDK's connection pool needs no cleanup."""
        _ = timeout
        if self._shutdown_called:
            return
        self._shutdown_called = True
        logger.info("CloudinaryUploader closed")

    def _upload_blocking(self, payload: bytes, options: dict[str, Any]) -> Any:
        """Upload from memory (blocking operation)."""
        with io.BytesIO(payload) as stream:
            if len(payload) <= self.chunk_size:
                return cloudinary.uploader.upload(stream, **options)
            return cloudinary.uploader.upload_large(
                stream, chunk_size=self.chunk_size, **options
            )

    async def _run(self, func: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args, **kwargs),
                timeout=self.timeout_s,
            )
        except TimeoutError as exc:
            raise UploadTimeoutError(
                f"Media host did not respond within {self.timeout_s:g}s",
                timeout_s=self.timeout_s,
                cause=exc,
            ) from exc
        except cloudinary.exceptions.Error as exc:
            error = classify_sdk_error(exc, self.timeout_s)
            logger.warning(
                "Cloudinary rejected request: %s: %s", type(exc).__name__, error.detail or exc
            )
            raise error from exc

    def _call_options(self) -> dict[str, Any]:
        cloud_name, api_key, api_secret = self._require_credentials()
        options: dict[str, Any] = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
            "timeout": self.timeout_s,
        }
        if self.upload_prefix:
            options["upload_prefix"] = self.upload_prefix
        return options

    def _parse_result(self, body: Any) -> UploadResult:
        body = body if isinstance(body, dict) else {}
        secure_url = body.get("secure_url") or body.get("url")
        public_id = body.get("public_id")
        if not secure_url or not public_id:
            raise UploadFailedError(
                "Media host returned an incomplete upload result",
                host_message=json.dumps(body, default=str)[:500],
            )
        size = body.get("bytes")
        return UploadResult(
            url=str(secure_url),
            public_id=str(public_id),
            size_bytes=int(size) if isinstance(size, int) and size >= 0 else 0,
        )

    def _require_credentials(self) -> tuple[str, str, str]:
        if not self.cloud_name or not self._api_key or not self._api_secret:
            missing = [
                name
                for name, value in zip(
                    self._env_names, (self.cloud_name, self._api_key, self._api_secret)
                )
                if not value
            ]
            raise ConfigurationError(
                _CONFIG_MESSAGE,
                detail=f"Missing Cloudinary credentials: {', '.join(missing)}",
            )
        return self.cloud_name, self._api_key, self._api_secret

    def _ensure_open(self) -> None:
        if self._shutdown_called:
            raise RuntimeError("Uploader has been shut down")

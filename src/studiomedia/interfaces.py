"""Interface definitions for media ingestion components."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from studiomedia.models.enums import ResourceType

if TYPE_CHECKING:
    from studiomedia.models.upload import UploadResult, UploadTarget


class Shutdownable(ABC):
    """Async shutdown interface for managed components."""

    @abstractmethod
    async def shutdown(self, timeout: float | None = None) -> None:
        """Release resources and stop background work."""
        raise NotImplementedError


class MediaUploader(Shutdownable, ABC):
    """Uploads in-memory assets to an external media host."""

    @abstractmethod
    async def upload(
        self,
        payload: bytes,
        target: UploadTarget,
        resource_type: ResourceType = ResourceType.AUTO,
    ) -> UploadResult:
        """Upload one asset into `target.folder`.

        Implementations must raise a `studiomedia.errors.MediaError` subclass
        on failure and must not retry.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        """Delete an asset by host identifier.

        Must be idempotent: deleting a missing asset should succeed.
        """
        raise NotImplementedError

    @abstractmethod
    async def ping(self) -> bool:
        """Health check. Returns True if the media host is reachable."""
        raise NotImplementedError

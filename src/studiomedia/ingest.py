"""MediaIngestor - turns request attachments into hosted asset URLs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, cast

from studiomedia.encoding import MAX_IMAGE_BYTES, decode_data_uri
from studiomedia.errors import MediaError, UploadFailedError
from studiomedia.logging_setup import set_project_name
from studiomedia.models.config import FieldLimitsConfig, UploadPathsConfig
from studiomedia.models.enums import ResourceType, SectionKind
from studiomedia.models.section import ProjectSection
from studiomedia.models.upload import IncomingFile, UploadResult, UploadTarget
from studiomedia.sections import coerce_sections, has_inline_image
from studiomedia.storage_paths import build_upload_target

if TYPE_CHECKING:
    from studiomedia.interfaces import MediaUploader

logger = logging.getLogger(__name__)

PREVIEW_FIELD = "previewImage"
SECTIONS_FIELD = "sections"


class MediaIngestor:
    """Uploads request assets and rewrites request fields with their URLs.

    All multi-asset operations are fail-fast: the first failing upload
    cancels its siblings and propagates, and no partially enriched fields
    are returned. Results are always reassembled by input index.
    """

    def __init__(
        self,
        uploader: MediaUploader,
        *,
        paths: UploadPathsConfig | None = None,
        limits: FieldLimitsConfig | None = None,
        resource_type: ResourceType = ResourceType.AUTO,
        max_inline_bytes: int = MAX_IMAGE_BYTES,
    ) -> None:
        self._uploader = uploader
        self._paths = paths or UploadPathsConfig()
        self._limits = limits or FieldLimitsConfig()
        self._resource_type = resource_type
        self._max_inline_bytes = max_inline_bytes

    @property
    def resource_type(self) -> ResourceType:
        return self._resource_type

    def target_for(self, project_name: Any) -> UploadTarget:
        return build_upload_target(project_name, self._paths)

    async def process(
        self,
        files: Mapping[str, Sequence[IncomingFile]],
        fields: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Upload `previewImage` and `sections` attachments.

        Returns a copy of `fields` with `previewImageUrl`,
        `previewImagePublicId` and `sections` filled in and plain-text fields
        clamped. `fields` itself is never mutated.
        """
        enriched = dict(fields)
        target = self.target_for(enriched.get("name"))
        set_project_name(target.segment)

        preview_files = files.get(PREVIEW_FIELD) or []
        section_files = files.get(SECTIONS_FIELD) or []
        logger.info(
            "Ingesting media: folder=%s preview=%s sections=%d",
            target.folder,
            bool(preview_files),
            len(section_files),
        )

        try:
            if preview_files:
                preview = (await self._upload_all([preview_files[0].payload], target))[0]
                enriched["previewImageUrl"] = preview.url
                enriched["previewImagePublicId"] = preview.public_id

            if section_files:
                results = await self._upload_all([f.payload for f in section_files], target)
                enriched[SECTIONS_FIELD] = [
                    ProjectSection(
                        kind=SectionKind.IMAGE,
                        content=result.url,
                        public_id=result.public_id,
                        order=index,
                    ).to_wire()
                    for index, result in enumerate(results)
                ]
        except MediaError as exc:
            logger.error(
                "Media upload failed: folder=%s code=%s detail=%s",
                target.folder,
                exc.code,
                exc.detail,
            )
            raise

        self._clamp_fields(enriched)
        return enriched

    async def upload_data_uri(
        self,
        data_uri: str,
        *,
        target: UploadTarget | None = None,
        project_name: str | None = None,
    ) -> UploadResult:
        """Decode a base64 data URI and upload the resulting bytes."""
        decoded = decode_data_uri(data_uri, max_bytes=self._max_inline_bytes)
        destination = target or self.target_for(project_name)
        logger.debug(
            "Uploading inline %s image (%d bytes) to %s",
            decoded.format,
            len(decoded.payload),
            destination.folder,
        )
        return (await self._upload_all([decoded.payload], destination))[0]

    async def resolve_sections(
        self,
        sections: Iterable[ProjectSection | Mapping[str, Any]],
        *,
        project_name: str | None = None,
    ) -> list[ProjectSection]:
        """Upload inline base64 images in `sections`, replacing them with URLs.

        Every inline payload is decoded before any upload starts, so a
        malformed section fails the call without touching the host.
        """
        models = coerce_sections(sections)
        pending = [index for index, section in enumerate(models) if has_inline_image(section)]
        if not pending:
            return models

        payloads = [
            decode_data_uri(models[index].content, max_bytes=self._max_inline_bytes).payload
            for index in pending
        ]
        results = await self._upload_all(payloads, self.target_for(project_name))

        resolved = list(models)
        for index, result in zip(pending, results):
            resolved[index] = models[index].model_copy(
                update={"content": result.url, "public_id": result.public_id, "needs_upload": False}
            )
        return resolved

    async def _upload_all(
        self, payloads: Sequence[bytes], target: UploadTarget
    ) -> list[UploadResult]:
        slots: list[UploadResult | None] = [None] * len(payloads)

        async def upload_slot(index: int, payload: bytes) -> None:
            try:
                slots[index] = await self._uploader.upload(payload, target, self._resource_type)
            except MediaError:
                raise
            except Exception as exc:
                raise UploadFailedError(
                    "Failed to upload image to media host",
                    host_message=str(exc) or type(exc).__name__,
                    cause=exc,
                ) from exc

        tasks = [
            asyncio.create_task(upload_slot(index, payload), name=f"media-upload-{index}")
            for index, payload in enumerate(payloads)
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return cast(list[UploadResult], slots)

    def _clamp_fields(self, fields: dict[str, Any]) -> None:
        limits = (
            ("client", self._limits.client),
            ("collaborators", self._limits.collaborators),
            ("name", self._limits.name),
        )
        for key, limit in limits:
            value = fields.get(key)
            if isinstance(value, (str, list)) and value:
                fields[key] = value[:limit]

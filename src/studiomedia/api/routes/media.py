"""Media ingestion endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from starlette.datastructures import UploadFile

from studiomedia.api.dependencies import get_ingestor
from studiomedia.models.section import ProjectSection
from studiomedia.models.upload import IncomingFile, UploadResult
from studiomedia.sections import sanitize_sections

if TYPE_CHECKING:
    from studiomedia.ingest import MediaIngestor

router = APIRouter(prefix="/api/v1", tags=["media"])


class Base64UploadRequest(BaseModel):
    model_config = {"populate_by_name": True}

    data_uri: str = Field(alias="dataUri")
    name: str | None = None


class ResolveSectionsRequest(BaseModel):
    name: str | None = None
    sections: list[ProjectSection]


def _field_key(raw_key: str) -> str:
    # Multipart clients send repeated fields as either `sections` or `sections[]`.
    return raw_key[:-2] if raw_key.endswith("[]") else raw_key


@router.post("/projects/media")
async def ingest_project_media(
    request: Request,
    ingestor: MediaIngestor = Depends(get_ingestor),
) -> dict[str, Any]:
    """Upload `previewImage` and `sections` attachments; return enriched fields.

    Every other text field is passed through (with length clamping) so the
    caller can hand the result straight to the persistence layer.
    """
    form = await request.form()
    try:
        files: dict[str, list[IncomingFile]] = {}
        fields: dict[str, Any] = {}
        for raw_key, value in form.multi_items():
            key = _field_key(raw_key)
            if isinstance(value, UploadFile):
                files.setdefault(key, []).append(
                    IncomingFile(
                        field_name=key,
                        filename=value.filename,
                        content_type=value.content_type,
                        payload=await value.read(),
                    )
                )
            else:
                fields[key] = value
    finally:
        await form.close()

    return await ingestor.process(files, fields)


@router.post("/media/base64", response_model=UploadResult)
async def upload_base64_image(
    payload: Base64UploadRequest,
    ingestor: MediaIngestor = Depends(get_ingestor),
) -> UploadResult:
    """Decode a base64 data-URI image and upload it."""
    return await ingestor.upload_data_uri(payload.data_uri, project_name=payload.name)


@router.post("/sections/sanitize")
async def sanitize_project_sections(sections: list[ProjectSection]) -> list[dict[str, Any]]:
    """Strip inline base64 images, marking them as pending upload."""
    return [section.to_wire() for section in sanitize_sections(sections)]


@router.post("/sections/resolve")
async def resolve_project_sections(
    payload: ResolveSectionsRequest,
    ingestor: MediaIngestor = Depends(get_ingestor),
) -> list[dict[str, Any]]:
    """Upload inline base64 images in sections and return them with URLs."""
    resolved = await ingestor.resolve_sections(payload.sections, project_name=payload.name)
    return [section.to_wire() for section in resolved]

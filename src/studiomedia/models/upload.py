"""Upload-related data models."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

_SLASH_RUN_RE = re.compile(r"/{2,}")


class UploadResult(BaseModel):
    """Result of a single asset upload to the media host."""

    model_config = {"frozen": True, "populate_by_name": True}

    url: str
    public_id: str = Field(alias="publicId")
    size_bytes: int = Field(default=0, ge=0, alias="sizeBytes")


class UploadTarget(BaseModel):
    """Logical destination folder at the media host.

    Built by `studiomedia.storage_paths.build_upload_target`, which sanitizes
    the project segment.
    """

    model_config = {"frozen": True}

    root: str
    segment: str

    @property
    def folder(self) -> str:
        joined = f"{self.root}/{self.segment}"
        return _SLASH_RUN_RE.sub("/", joined).strip("/")


class IncomingFile(BaseModel):
    """A multipart attachment, decoupled from the web framework."""

    field_name: str
    filename: str | None = None
    content_type: str | None = None
    payload: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.payload)

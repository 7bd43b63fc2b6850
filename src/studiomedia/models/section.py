"""Project content section models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from studiomedia.models.enums import SectionKind


class ProjectSection(BaseModel):
    """A content block within a project record.

    Wire names follow the admin UI (`type`, `publicId`, `_needsUpload`).
    Unknown keys are preserved so sections round-trip through sanitization.
    """

    model_config = {"extra": "allow", "populate_by_name": True}

    kind: str = Field(alias="type")
    content: str = ""
    order: int = Field(default=0, ge=0)
    public_id: str | None = Field(default=None, alias="publicId")
    needs_upload: bool = Field(default=False, alias="_needsUpload")

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _none_content(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value

    @property
    def is_image(self) -> bool:
        return self.kind == SectionKind.IMAGE

    def to_wire(self) -> dict[str, Any]:
        """Serialize with UI field names, omitting unset optional markers."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        if not self.needs_upload:
            data.pop("_needsUpload", None)
        return data

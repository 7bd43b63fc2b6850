"""Strip inline base64 images from project sections before persistence."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from studiomedia.encoding import is_base64_image
from studiomedia.models.section import ProjectSection


def coerce_sections(sections: Iterable[ProjectSection | Mapping[str, Any]]) -> list[ProjectSection]:
    """Validate raw section mappings into models, keeping models as-is."""
    return [
        section if isinstance(section, ProjectSection) else ProjectSection.model_validate(section)
        for section in sections
    ]


def has_inline_image(section: ProjectSection) -> bool:
    return section.is_image and is_base64_image(section.content)


def sanitize_sections(
    sections: Iterable[ProjectSection | Mapping[str, Any]],
) -> list[ProjectSection]:
    """Replace inline base64 image content with a pending-upload marker.

    Pure and idempotent: inputs are never mutated, and sanitized sections
    pass through unchanged on a second call.
    """
    cleaned: list[ProjectSection] = []
    for section in coerce_sections(sections):
        if has_inline_image(section):
            section = section.model_copy(update={"content": "", "needs_upload": True})
        cleaned.append(section)
    return cleaned

"""Helpers for building media host destination folders."""

from __future__ import annotations

import re
from typing import Any

from studiomedia.models.config import UploadPathsConfig
from studiomedia.models.upload import UploadTarget

_UNSAFE_CHARS_RE = re.compile(r"[^\w.\-\s]+")


def _sanitize_segment(value: str, *, max_length: int, fallback: str) -> str:
    cleaned = value.strip()[:max_length]
    cleaned = _UNSAFE_CHARS_RE.sub(" ", cleaned)
    cleaned = "_".join(part for part in cleaned.split() if part)
    if not cleaned.strip("."):
        return fallback
    return cleaned


def _normalize_root(root: str) -> str:
    parts = [part for part in root.replace("\\", "/").split("/") if part]
    for part in parts:
        if part in (".", ".."):
            raise ValueError(f"root_folder contains invalid segment: {root}")
    if not parts:
        raise ValueError("root_folder must not be empty")
    return "/".join(parts)


def build_upload_target(project_name: Any, paths_cfg: UploadPathsConfig | None = None) -> UploadTarget:
    """Build the destination folder for a project's assets.

    Non-string or blank names fall back to the configured default project.
    """
    cfg = paths_cfg or UploadPathsConfig()
    name = project_name if isinstance(project_name, str) else ""
    segment = _sanitize_segment(
        name or cfg.default_project,
        max_length=cfg.max_segment_length,
        fallback=cfg.default_project,
    )
    return UploadTarget(root=_normalize_root(cfg.root_folder), segment=segment)

"""Centralized enums for type safety and IDE support."""

from enum import StrEnum


class ResourceType(StrEnum):
    """Media host resource type hint for an upload."""

    IMAGE = "image"
    VIDEO = "video"
    RAW = "raw"
    AUTO = "auto"


class SectionKind(StrEnum):
    """Known project section kinds.

    Unknown kinds are kept as plain strings and pass through untouched.
    """

    IMAGE = "image"
    TEXT = "text"
    VIDEO = "video"
    HEADING = "heading"
    QUOTE = "quote"

"""Studio media data models."""

from studiomedia.models.config import (
    CloudinaryUploaderConfig,
    Config,
    FieldLimitsConfig,
    LocalUploaderConfig,
    ServerConfig,
    UploaderConfig,
    UploadPathsConfig,
)
from studiomedia.models.enums import ResourceType, SectionKind
from studiomedia.models.section import ProjectSection
from studiomedia.models.upload import IncomingFile, UploadResult, UploadTarget

__all__ = [
    "CloudinaryUploaderConfig",
    "Config",
    "FieldLimitsConfig",
    "IncomingFile",
    "LocalUploaderConfig",
    "ProjectSection",
    "ResourceType",
    "SectionKind",
    "ServerConfig",
    "UploadPathsConfig",
    "UploadResult",
    "UploadTarget",
    "UploaderConfig",
]

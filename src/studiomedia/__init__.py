"""Studio media ingestion pipeline."""

__version__ = "0.1.0"

from studiomedia.errors import MediaError, MediaErrorCode
from studiomedia.models.section import ProjectSection
from studiomedia.models.upload import IncomingFile, UploadResult, UploadTarget

__all__ = [
    "IncomingFile",
    "MediaError",
    "MediaErrorCode",
    "ProjectSection",
    "UploadResult",
    "UploadTarget",
    "__version__",
]

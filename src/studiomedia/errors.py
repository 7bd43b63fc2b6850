"""Error hierarchy for media ingestion stages."""

from __future__ import annotations

from enum import StrEnum


class MediaErrorCode(StrEnum):
    """Stable media error categories for API mapping."""

    INVALID_FORMAT = "INVALID_FORMAT"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    UPLOAD_TIMEOUT = "UPLOAD_TIMEOUT"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UPLOAD_FAILED = "UPLOAD_FAILED"


class MediaError(Exception):
    """Base exception for all media ingestion errors.

    `code` is the category callers branch on. `detail` holds auxiliary
    diagnostics (e.g. the raw host message) and is never the primary message.
    """

    code: MediaErrorCode = MediaErrorCode.UPLOAD_FAILED

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.detail = detail
        self.cause = cause
        self.__cause__ = cause


class InvalidFormatError(MediaError):
    """Input is not a `data:image/<format>;base64,<payload>` string."""

    code = MediaErrorCode.INVALID_FORMAT


class UnsupportedFormatError(MediaError):
    """Image format is outside the allow-list or rejected by the host."""

    code = MediaErrorCode.UNSUPPORTED_FORMAT

    def __init__(
        self,
        message: str,
        *,
        image_format: str | None = None,
        detail: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, detail=detail, cause=cause)
        self.image_format = image_format


class PayloadTooLargeError(MediaError):
    """Decoded payload exceeds the size ceiling."""

    code = MediaErrorCode.PAYLOAD_TOO_LARGE

    def __init__(
        self,
        message: str,
        *,
        actual_bytes: int | None = None,
        max_bytes: int | None = None,
        detail: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, detail=detail, cause=cause)
        self.actual_bytes = actual_bytes
        self.max_bytes = max_bytes


class UploadTimeoutError(MediaError):
    """Transfer to the media host did not finish within the timeout."""

    code = MediaErrorCode.UPLOAD_TIMEOUT

    def __init__(
        self,
        message: str,
        *,
        timeout_s: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.timeout_s = timeout_s


class ConfigurationError(MediaError):
    """Uploader credentials or destination are misconfigured."""

    code = MediaErrorCode.CONFIGURATION_ERROR


class UploadFailedError(MediaError):
    """Generic upload failure, carrying the host's raw message when known."""

    code = MediaErrorCode.UPLOAD_FAILED

    def __init__(
        self,
        message: str,
        *,
        host_message: str | None = None,
        status: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, detail=host_message, cause=cause)
        self.host_message = host_message
        self.status = status

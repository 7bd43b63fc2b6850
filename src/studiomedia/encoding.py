"""Base64 data-URI image decoding and size estimation."""

from __future__ import annotations

import base64
import binascii
import re
from typing import NamedTuple

from studiomedia.errors import InvalidFormatError, PayloadTooLargeError, UnsupportedFormatError

MAX_IMAGE_BYTES = 5 * 1024 * 1024
ALLOWED_FORMATS = frozenset({"jpeg", "jpg", "png", "gif", "webp", "svg"})

_DATA_URI_PREFIX = "data:image/"
_DATA_URI_RE = re.compile(r"^data:image/([a-zA-Z0-9.+-]+);base64,(.+)$", re.DOTALL)
_FORMAT_ALIASES = {"svg+xml": "svg"}


class DecodedImage(NamedTuple):
    payload: bytes
    format: str


def _split_data_uri(data_uri: object) -> tuple[str, str]:
    if not isinstance(data_uri, str):
        raise InvalidFormatError("Invalid base64 image format")
    match = _DATA_URI_RE.match(data_uri.strip())
    if match is None:
        raise InvalidFormatError("Invalid base64 image format")
    return match.group(1), match.group(2)


def _normalize_format(raw_format: str) -> str:
    lowered = raw_format.lower()
    return _FORMAT_ALIASES.get(lowered, lowered)


def _exact_decoded_size(encoded: str) -> int:
    # Every 4 characters carry 3 bytes; padding carries none.
    return (len(encoded.rstrip("=")) * 3) // 4


def decode_data_uri(data_uri: str, *, max_bytes: int = MAX_IMAGE_BYTES) -> DecodedImage:
    """Decode a `data:image/<format>;base64,<payload>` string.

    The size ceiling is enforced from the encoded length, so oversized
    payloads are rejected without being decoded.

    Raises:
        InvalidFormatError: Input does not match the data-URI pattern or the
            payload is not valid base64.
        UnsupportedFormatError: Format is outside ALLOWED_FORMATS.
        PayloadTooLargeError: Decoded payload exceeds `max_bytes`.
    """
    raw_format, data = _split_data_uri(data_uri)

    image_format = _normalize_format(raw_format)
    if image_format not in ALLOWED_FORMATS:
        raise UnsupportedFormatError(
            f"Unsupported image format: {raw_format}",
            image_format=raw_format,
        )

    encoded = "".join(data.split())
    size = _exact_decoded_size(encoded)
    if size > max_bytes:
        raise PayloadTooLargeError(
            f"Image too large: {size} bytes (max: {max_bytes} bytes)",
            actual_bytes=size,
            max_bytes=max_bytes,
        )

    try:
        payload = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidFormatError("Invalid base64 image payload", cause=exc) from exc

    return DecodedImage(payload=payload, format=image_format)


def encode_data_uri(payload: bytes, image_format: str) -> str:
    """Build a base64 data URI for `payload`."""
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:image/{image_format};base64,{encoded}"


def estimate_decoded_size(data_uri: str) -> int:
    """Approximate decoded size without decoding. Returns 0 on malformed input."""
    try:
        _, data = _split_data_uri(data_uri)
    except InvalidFormatError:
        return 0
    return (len(data) * 3) // 4


def is_base64_image(value: object) -> bool:
    """Return True when `value` looks like an inline base64 image.

    Surrounding whitespace is ignored, matching what `decode_data_uri` accepts.
    """
    if not isinstance(value, str):
        return False
    stripped = value.strip()
    return stripped.startswith(_DATA_URI_PREFIX) and "base64," in stripped

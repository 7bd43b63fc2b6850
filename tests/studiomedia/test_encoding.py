"""Tests for base64 data-URI decoding."""

from __future__ import annotations

import base64

import pytest

from studiomedia.encoding import (
    MAX_IMAGE_BYTES,
    decode_data_uri,
    encode_data_uri,
    estimate_decoded_size,
    is_base64_image,
)
from studiomedia.errors import (
    InvalidFormatError,
    MediaErrorCode,
    PayloadTooLargeError,
    UnsupportedFormatError,
)


def test_decode_returns_exact_bytes_and_format(png_bytes: bytes) -> None:
    """Encoding then decoding yields the original payload."""
    # Given: A PNG encoded as a data URI
    data_uri = encode_data_uri(png_bytes, "png")

    # When: Decoding it
    decoded = decode_data_uri(data_uri)

    # Then: Bytes and format are preserved
    assert decoded.payload == png_bytes
    assert decoded.format == "png"


@pytest.mark.parametrize("image_format", ["jpeg", "jpg", "png", "gif", "webp", "svg", "PNG"])
def test_decode_accepts_allowed_formats(image_format: str) -> None:
    """Every allow-listed format decodes, case-insensitively."""
    # Given: A tiny payload tagged with an allowed format
    data_uri = encode_data_uri(b"\x00\x01\x02", image_format)

    # When: Decoding
    decoded = decode_data_uri(data_uri)

    # Then: Format is normalized to lowercase
    assert decoded.format == image_format.lower()
    assert decoded.payload == b"\x00\x01\x02"


def test_decode_normalizes_svg_xml_subtype() -> None:
    """`image/svg+xml` is treated as svg."""
    decoded = decode_data_uri(encode_data_uri(b"<svg/>", "svg+xml"))
    assert decoded.format == "svg"


@pytest.mark.parametrize("image_format", ["bmp", "tiff", "x-icon"])
def test_decode_rejects_unsupported_formats(image_format: str) -> None:
    """Formats outside the allow-list fail as unsupported, not invalid."""
    # Given: A well-formed data URI with a disallowed format
    data_uri = encode_data_uri(b"abc", image_format)

    # When/Then: Decoding raises UnsupportedFormatError
    with pytest.raises(UnsupportedFormatError) as exc_info:
        decode_data_uri(data_uri)
    assert exc_info.value.code == MediaErrorCode.UNSUPPORTED_FORMAT
    assert exc_info.value.image_format == image_format


@pytest.mark.parametrize(
    "value",
    [
        "",
        "hello world",
        "data:text/plain;base64,aGVsbG8=",
        "data:image/png,aGVsbG8=",
        "data:image/png;base64,",
        "https://cdn.example.com/a.png",
    ],
)
def test_decode_rejects_malformed_input(value: str) -> None:
    """Strings that are not image data URIs fail as invalid format."""
    with pytest.raises(InvalidFormatError):
        decode_data_uri(value)


def test_decode_rejects_non_string_input() -> None:
    with pytest.raises(InvalidFormatError):
        decode_data_uri(None)  # type: ignore[arg-type]


def test_decode_rejects_corrupt_base64_payload() -> None:
    """A matching prefix with a non-base64 body is invalid format."""
    with pytest.raises(InvalidFormatError):
        decode_data_uri("data:image/png;base64,not*valid*base64!")


def test_decode_tolerates_line_wrapped_payload(png_bytes: bytes) -> None:
    """Whitespace inside the base64 body is ignored."""
    # Given: A payload wrapped at 20 characters
    encoded = base64.b64encode(png_bytes).decode("ascii")
    wrapped = "\n".join(encoded[i : i + 20] for i in range(0, len(encoded), 20))

    # When: Decoding
    decoded = decode_data_uri(f"data:image/png;base64,{wrapped}")

    # Then: Payload is intact
    assert decoded.payload == png_bytes


def test_decode_accepts_payload_at_exact_limit() -> None:
    """The size ceiling is inclusive."""
    payload = b"\xff" * 64
    decoded = decode_data_uri(encode_data_uri(payload, "gif"), max_bytes=64)
    assert len(decoded.payload) == 64


def test_decode_rejects_oversized_payload_with_true_size() -> None:
    """Oversized images report the actual decoded size and the ceiling."""
    # Given: A payload one byte over the 5 MiB ceiling
    payload = b"\x00" * (MAX_IMAGE_BYTES + 1)
    data_uri = encode_data_uri(payload, "jpeg")

    # When/Then: Decoding raises PayloadTooLargeError with both sizes
    with pytest.raises(PayloadTooLargeError) as exc_info:
        decode_data_uri(data_uri)
    assert exc_info.value.actual_bytes == MAX_IMAGE_BYTES + 1
    assert exc_info.value.max_bytes == MAX_IMAGE_BYTES
    assert str(MAX_IMAGE_BYTES + 1) in str(exc_info.value)


@pytest.mark.parametrize(
    "size",
    [
        pytest.param(63, id="unpadded"),
        pytest.param(64, id="double-padding"),
        pytest.param(65, id="single-padding"),
    ],
)
def test_oversized_payload_reports_exact_size_for_any_padding(size: int) -> None:
    """The reported size is the real decoded length, whatever the padding."""
    # Given: A payload whose encoding ends with 0, 2 or 1 padding characters
    data_uri = encode_data_uri(b"\x01" * size, "png")

    # When/Then: A smaller ceiling reports the exact decoded length
    with pytest.raises(PayloadTooLargeError) as exc_info:
        decode_data_uri(data_uri, max_bytes=size - 1)
    assert exc_info.value.actual_bytes == size
    assert exc_info.value.max_bytes == size - 1


def test_oversized_payload_is_rejected_before_decoding(monkeypatch: pytest.MonkeyPatch) -> None:
    """Size is enforced from the encoded length; the payload is never decoded."""
    # Given: A base64 decoder that must not be reached
    def fail_decode(*_args: object, **_kwargs: object) -> bytes:
        raise AssertionError("payload decoded before the size check")

    data_uri = encode_data_uri(b"\x00" * 100, "jpeg")
    monkeypatch.setattr("studiomedia.encoding.base64.b64decode", fail_decode)

    # When/Then: The size error is raised without decoding
    with pytest.raises(PayloadTooLargeError) as exc_info:
        decode_data_uri(data_uri, max_bytes=99)
    assert exc_info.value.actual_bytes == 100


def test_format_is_checked_before_size() -> None:
    """An oversized bmp is reported as unsupported."""
    data_uri = encode_data_uri(b"\x00" * 128, "bmp")
    with pytest.raises(UnsupportedFormatError):
        decode_data_uri(data_uri, max_bytes=16)


def test_estimate_decoded_size_approximates_length(png_bytes: bytes) -> None:
    """Estimate is within padding distance of the real decoded size."""
    # Given: A known payload
    data_uri = encode_data_uri(png_bytes, "png")

    # When: Estimating without decoding
    estimate = estimate_decoded_size(data_uri)

    # Then: Estimate never undercounts and overshoots by at most 2 bytes
    assert len(png_bytes) <= estimate <= len(png_bytes) + 2


def test_estimate_decoded_size_is_zero_for_malformed_input() -> None:
    assert estimate_decoded_size("not a data uri") == 0


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("data:image/png;base64,aGVsbG8=", True),
        ("data:image/gif;base64,", True),
        (" data:image/png;base64,aGVsbG8=", True),
        ("\n\tdata:image/png;base64,aGVsbG8=  ", True),
        ("https://cdn.example.com/a.png", False),
        ("", False),
        (None, False),
        (42, False),
    ],
)
def test_is_base64_image(value: object, expected: bool) -> None:
    assert is_base64_image(value) is expected

"""Shared pytest fixtures for studio media tests."""

from __future__ import annotations

import base64
import sys
from pathlib import Path

# Add src to sys.path for imports
src_path = Path(__file__).parent.parent.parent / "src"
if str(src_path.resolve()) not in sys.path:
    sys.path.insert(0, str(src_path.resolve()))

import pytest

from studiomedia.encoding import encode_data_uri
from studiomedia.ingest import MediaIngestor
from tests.studiomedia.mocks import MockUploader

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA"
    "60e6kgAAAABJRU5ErkJggg=="
)


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def png_data_uri() -> str:
    return encode_data_uri(PNG_BYTES, "png")


@pytest.fixture
def mock_uploader() -> MockUploader:
    return MockUploader()


@pytest.fixture
def ingestor(mock_uploader: MockUploader) -> MediaIngestor:
    return MediaIngestor(mock_uploader)


@pytest.fixture(autouse=True)
def _clear_cloudinary_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials from leaking into uploader tests."""
    for name in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
        monkeypatch.delenv(name, raising=False)

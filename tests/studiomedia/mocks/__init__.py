"""Mock implementations of studio media interfaces for testing."""

from tests.studiomedia.mocks.uploader import MockUploader

__all__ = ["MockUploader"]

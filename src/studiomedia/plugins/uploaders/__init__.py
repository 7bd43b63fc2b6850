"""Media uploader plugins."""

from __future__ import annotations

from typing import cast

from studiomedia.interfaces import MediaUploader
from studiomedia.models.config import UploaderConfig
from studiomedia.plugins.registry import PluginType, load_plugin


def create_uploader(config: UploaderConfig) -> MediaUploader:
    """Create the configured uploader backend via the plugin registry.

    Raises:
        RuntimeError: If the backend-specific config section is missing
        ValueError: If the backend is unknown
    """
    backend_name = config.backend.lower()
    specific_config = getattr(config, backend_name, None)
    if specific_config is None:
        raise RuntimeError(
            f"Missing '{backend_name}' config in uploader section. "
            f"Add 'uploader.{backend_name}' to your config."
        )
    return cast(MediaUploader, load_plugin(PluginType.UPLOADER, backend_name, specific_config))


__all__ = ["create_uploader"]

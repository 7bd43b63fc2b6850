"""Custom configuration validation helpers."""

from __future__ import annotations

from studiomedia.config.loader import ConfigError, ConfigErrorCode
from studiomedia.models.config import Config
from studiomedia.plugins.registry import PluginType, get_plugin_names, validate_plugin


def validate_plugin_names(config: Config, valid_uploaders: list[str]) -> None:
    """Validate that the configured uploader backend is registered.

    Raises:
        ConfigError: If the backend name is not recognized
    """
    valid_lower = {name.lower() for name in valid_uploaders}
    if config.uploader.backend.lower() not in valid_lower:
        raise ConfigError(
            f"Unknown uploader backend: {config.uploader.backend} (valid: {sorted(valid_lower)})",
            code=ConfigErrorCode.PLUGIN_NAMES_INVALID,
        )


def validate_plugin_configs(config: Config) -> None:
    """Validate the uploader config against its registered config model."""
    backend = config.uploader.backend
    specific = getattr(config.uploader, backend, None)
    if specific is None:
        raise ConfigError(
            f"uploader.{backend} is required when backend={backend}",
            code=ConfigErrorCode.PLUGIN_CONFIG_INVALID,
        )
    try:
        validate_plugin(PluginType.UPLOADER, backend, specific)
    except Exception as exc:
        raise ConfigError(
            f"Invalid plugin config:\n  uploader[{backend}]: {exc}",
            code=ConfigErrorCode.PLUGIN_CONFIG_INVALID,
            cause=exc,
        ) from exc


def validate_config(config: Config) -> None:
    """Run all registry-backed validation for a parsed config."""
    validate_plugin_names(config, get_plugin_names(PluginType.UPLOADER))
    validate_plugin_configs(config)

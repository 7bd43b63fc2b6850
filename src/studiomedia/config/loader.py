"""Reading the service YAML config into a validated `Config`.

Every failure is raised as `ConfigError` with a stable `ConfigErrorCode`, so
the CLI can print one line and exit without a traceback.
"""

from __future__ import annotations

import logging
import os
import stat
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from studiomedia.models.config import Config

logger = logging.getLogger(__name__)

# Group and other permission bits; the config may name credential env vars.
_SHARED_ACCESS_BITS = stat.S_IRWXG | stat.S_IRWXO


class ConfigErrorCode(str, Enum):
    FILE_NOT_FOUND = "CONFIG_FILE_NOT_FOUND"
    YAML_INVALID = "CONFIG_YAML_INVALID"
    EMPTY_FILE = "CONFIG_EMPTY_FILE"
    ROOT_NOT_MAPPING = "CONFIG_ROOT_NOT_MAPPING"
    VALIDATION_FAILED = "CONFIG_VALIDATION_FAILED"
    PLUGIN_NAMES_INVALID = "CONFIG_PLUGIN_NAMES_INVALID"
    PLUGIN_CONFIG_INVALID = "CONFIG_PLUGIN_CONFIG_INVALID"
    ENV_VAR_MISSING = "CONFIG_ENV_VAR_MISSING"
    UNKNOWN = "CONFIG_UNKNOWN"


class ConfigError(Exception):
    """The config file or environment cannot produce a usable `Config`."""

    def __init__(
        self,
        message: str,
        *,
        code: ConfigErrorCode = ConfigErrorCode.UNKNOWN,
        path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.path = path
        self.__cause__ = cause


def load_config(path: Path) -> Config:
    """Read `path` and return the validated config.

    A config readable by group or others is still loaded, with a warning.
    """
    return _build_config(_read_yaml_mapping(path), source=path)


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Validate an in-memory mapping the same way a file would be."""
    return _build_config(data, source=None)


def resolve_env_var(env_var_name: str, required: bool = True) -> str | None:
    """Look up a secret by environment variable name.

    Optional lookups return None when unset, letting the caller defer the
    failure until the value is actually needed.
    """
    value = os.environ.get(env_var_name)
    if value is None and required:
        raise ConfigError(
            f"Environment variable {env_var_name} is not set",
            code=ConfigErrorCode.ENV_VAR_MISSING,
        )
    return value


def format_validation_error(e: ValidationError, path: Path | None = None) -> str:
    """One line per failing field, e.g. `  server -> port: Input should be ...`."""
    where = f" in {path}" if path is not None else ""
    lines = [f"Invalid configuration{where}:"]
    lines.extend(
        f"  {' -> '.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
    )
    return "\n".join(lines)


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text()
    except FileNotFoundError as exc:
        raise ConfigError(
            f"No config file at {path}",
            code=ConfigErrorCode.FILE_NOT_FOUND,
            path=path,
            cause=exc,
        ) from exc
    _check_file_mode(path)

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(
            f"{path} is not valid YAML: {exc}",
            code=ConfigErrorCode.YAML_INVALID,
            path=path,
            cause=exc,
        ) from exc

    if document is None:
        raise ConfigError(
            f"{path} contains no configuration",
            code=ConfigErrorCode.EMPTY_FILE,
            path=path,
        )
    if not isinstance(document, dict):
        raise ConfigError(
            f"{path} must contain a mapping at the top level, not a {type(document).__name__}",
            code=ConfigErrorCode.ROOT_NOT_MAPPING,
            path=path,
        )
    return document


def _build_config(raw: dict[str, Any], *, source: Path | None) -> Config:
    try:
        config = Config.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(
            format_validation_error(exc, source),
            code=ConfigErrorCode.VALIDATION_FAILED,
            path=source,
            cause=exc,
        ) from exc

    # Deferred: plugin modules import this one for resolve_env_var.
    from studiomedia.config.validation import validate_config
    from studiomedia.plugins import discover_all_plugins

    discover_all_plugins()
    validate_config(config)
    logger.debug("Config loaded from %s: backend=%s", source or "<dict>", config.uploader.backend)
    return config


def _check_file_mode(path: Path) -> None:
    if os.name != "posix":
        return
    mode = stat.S_IMODE(path.stat().st_mode)
    if mode & _SHARED_ACCESS_BITS:
        logger.warning(
            "Config file permissions are too permissive: %s has mode %04o, use 0600",
            path,
            mode,
        )

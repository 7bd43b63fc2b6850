from __future__ import annotations

import json
import logging
import logging.config
import os
from contextvars import ContextVar

_CURRENT_PROJECT_NAME: ContextVar[str] = ContextVar("project_name", default="-")
_STANDARD_LOGRECORD_ATTRS = {
    "name",
    "msg",
    "message",
    "asctime",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}


class _ProjectNameFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "project_name") or getattr(record, "project_name") in (None, ""):
            record.project_name = _CURRENT_PROJECT_NAME.get()
        return True


class _JsonExtraFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = _extract_extras(record)
        if not extras:
            return base
        extras_json = json.dumps(extras, indent=2, default=str, sort_keys=True)
        return f"{base}\n{extras_json}"


def _extract_extras(record: logging.LogRecord) -> dict[str, object]:
    extras: dict[str, object] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOGRECORD_ATTRS:
            continue
        if key == "project_name":
            continue
        extras[key] = value
    return extras


def set_project_name(name: str | None) -> None:
    """Set the `project_name` value injected into log records for this context."""
    _CURRENT_PROJECT_NAME.set(name or "-")


def _install_project_filter() -> None:
    root = logging.getLogger()
    for handler in root.handlers:
        if any(isinstance(f, _ProjectNameFilter) for f in handler.filters):
            continue
        handler.addFilter(_ProjectNameFilter())


def configure_logging(*, log_level: str = "INFO") -> None:
    """Configure root logging with a consistent format.

    Format includes `project_name` plus `module:lineno`; `extra=` fields are
    appended as JSON.
    """
    console_level_name = str(log_level).upper()
    default_console_fmt = (
        "%(asctime)s %(levelname)s [%(project_name)s] "
        "%(module)s %(pathname)s:%(lineno)d %(message)s"
    )
    console_fmt = os.getenv("CONSOLE_LOG_FORMAT", default_console_fmt)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "()": "studiomedia.logging_setup._JsonExtraFormatter",
                    "format": console_fmt,
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": console_level_name,
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"level": "DEBUG", "handlers": ["console"]},
        }
    )

    _install_project_filter()
    logging.captureWarnings(True)

    # Reduce noisy third-party request logs by default.
    logging.getLogger("Cloudinary").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

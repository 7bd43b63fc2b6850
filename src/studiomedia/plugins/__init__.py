"""Unified plugin discovery for all plugin types."""

import importlib
import logging
import pkgutil
from importlib import metadata

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "studiomedia.plugins"
_BUILTIN_PACKAGES = ("uploaders",)


def discover_all_plugins() -> None:
    """Discover and register all plugins (built-in and external).

    Built-in plugins are discovered by importing all modules in plugin
    type packages. External plugins are discovered via entry points.
    Registration happens in decorators, so importing a module registers it.
    """
    for plugin_type in _BUILTIN_PACKAGES:
        package = importlib.import_module(f"studiomedia.plugins.{plugin_type}")
        for _, module_name, _ in pkgutil.iter_modules(package.__path__):
            if module_name.startswith("_"):
                continue
            try:
                importlib.import_module(f"studiomedia.plugins.{plugin_type}.{module_name}")
            except Exception as exc:
                logger.error(
                    "Failed to import built-in plugin module %s.%s: %s",
                    plugin_type,
                    module_name,
                    exc,
                    exc_info=True,
                )

    for point in metadata.entry_points(group=ENTRY_POINT_GROUP):
        try:
            importlib.import_module(point.module)
        except Exception as exc:
            logger.error(
                "Failed to load external plugin %s from %s: %s",
                point.name,
                point.module,
                exc,
                exc_info=True,
            )


__all__ = ["discover_all_plugins"]

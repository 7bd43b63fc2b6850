"""Tests for plugin registration and discovery mechanisms."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from pydantic import BaseModel, ValidationError

from studiomedia.models.config import LocalUploaderConfig, UploaderConfig
from studiomedia.plugins import discover_all_plugins
from studiomedia.plugins.registry import (
    PluginType,
    get_plugin_names,
    load_plugin,
    plugin,
    validate_plugin,
)
from studiomedia.plugins.uploaders import create_uploader
from studiomedia.plugins.uploaders.local import LocalUploader


class TestDiscovery:
    """Built-in and entry-point discovery."""

    def test_builtin_uploaders_are_registered(self) -> None:
        discover_all_plugins()
        names = get_plugin_names(PluginType.UPLOADER)
        assert "cloudinary" in names
        assert "local" in names

    def test_broken_entry_point_is_logged_not_raised(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A failing external plugin does not break discovery."""
        # Given: An entry point whose module cannot be imported
        point = MagicMock()
        point.name = "broken"
        point.module = "studiomedia_missing_plugin_module"

        # When: Discovering plugins
        with patch("studiomedia.plugins.metadata.entry_points", return_value=[point]):
            discover_all_plugins()

        # Then: The failure is logged
        assert "Failed to load external plugin broken" in caplog.text


class TestRegistration:
    """Decorator contract."""

    def test_decorator_registers_and_tags_class(self) -> None:
        class _DummyConfig(BaseModel):
            value: int = 1

        @plugin(plugin_type=PluginType.UPLOADER, name="dummy-registry-test")
        class _DummyUploader:
            config_cls = _DummyConfig

            @classmethod
            def create(cls, config: _DummyConfig) -> _DummyUploader:
                instance = cls()
                instance.config = config  # type: ignore[attr-defined]
                return instance

        assert "dummy-registry-test" in get_plugin_names(PluginType.UPLOADER)
        assert getattr(_DummyUploader, "__plugin_name__") == "dummy-registry-test"

        loaded = load_plugin(PluginType.UPLOADER, "dummy-registry-test", {"value": 5})
        assert loaded.config.value == 5

        with pytest.raises(ValidationError):
            validate_plugin(PluginType.UPLOADER, "dummy-registry-test", {"value": "nope"})

    def test_duplicate_name_is_rejected(self) -> None:
        discover_all_plugins()

        with pytest.raises(ValueError, match="already registered"):

            @plugin(plugin_type=PluginType.UPLOADER, name="local")
            class _Clash:
                config_cls = LocalUploaderConfig

                @classmethod
                def create(cls, config: LocalUploaderConfig) -> _Clash:
                    return cls()

    def test_missing_config_cls_is_rejected(self) -> None:
        with pytest.raises(TypeError, match="config_cls"):

            @plugin(plugin_type=PluginType.UPLOADER, name="no-config")
            class _NoConfig:
                pass

    def test_unknown_plugin_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown uploader plugin"):
            load_plugin(PluginType.UPLOADER, "does-not-exist", {})


class TestCreateUploader:
    def test_creates_configured_backend(self, tmp_path: Path) -> None:
        discover_all_plugins()
        config = UploaderConfig(backend="local", local=LocalUploaderConfig(root=str(tmp_path)))

        uploader = create_uploader(config)

        assert isinstance(uploader, LocalUploader)
        assert uploader.root == tmp_path.resolve()

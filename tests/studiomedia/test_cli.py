"""Tests for CLI module."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import yaml

from studiomedia.cli import StudioMedia, main, setup_logging
from studiomedia.config import ConfigError
from studiomedia.encoding import encode_data_uri


def _local_config(tmp_path: Path) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.dump(
            {
                "version": 1,
                "uploader": {"backend": "local", "local": {"root": str(tmp_path / "media")}},
            }
        )
    )
    config_path.chmod(0o600)
    return config_path


class TestSetupLogging:
    def test_configures_logging_with_custom_level(self) -> None:
        with patch("studiomedia.cli.configure_logging") as mock_configure:
            setup_logging("DEBUG")
        mock_configure.assert_called_once_with(log_level="DEBUG")


class TestValidate:
    """Tests for validate command."""

    def test_validate_valid_config(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        # Given: A valid config file
        config_path = _local_config(tmp_path)

        # When: Validating the config
        StudioMedia().validate(str(config_path))

        # Then: Success message lists the backend
        out = capsys.readouterr().out
        assert "✓ Config valid" in out
        assert "Uploader backend: local" in out

    def test_validate_nonexistent_config_exits(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            StudioMedia().validate(str(tmp_path / "missing.yaml"))

        assert exc_info.value.code == 1
        assert "✗ Config invalid" in capsys.readouterr().err


class TestRun:
    """Tests for run command."""

    def test_run_config_error_exits(self, tmp_path: Path) -> None:
        mock_app = MagicMock()
        mock_app.run = AsyncMock(side_effect=ConfigError("bad config"))

        with (
            patch("studiomedia.cli.setup_logging"),
            patch("studiomedia.cli.Application", return_value=mock_app),
        ):
            with pytest.raises(SystemExit) as exc_info:
                StudioMedia().run(str(tmp_path / "config.yaml"))

        assert exc_info.value.code == 1

    def test_run_uses_custom_log_level(self, tmp_path: Path) -> None:
        mock_app = MagicMock()
        mock_app.run = AsyncMock()

        with (
            patch("studiomedia.cli.setup_logging") as mock_setup,
            patch("studiomedia.cli.Application", return_value=mock_app),
        ):
            StudioMedia().serve(str(tmp_path / "config.yaml"), log_level="DEBUG")

        mock_setup.assert_called_once_with("DEBUG")
        mock_app.run.assert_awaited_once()


class TestUpload:
    """Tests for one-shot upload command."""

    def test_upload_file_prints_result(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        # Given: A local backend config and a file on disk
        config_path = _local_config(tmp_path)
        source = tmp_path / "hero.png"
        source.write_bytes(b"hero image")

        # When: Uploading it
        with patch("studiomedia.cli.setup_logging"):
            StudioMedia().upload(str(config_path), str(source), name="Hero Shot")

        # Then: The printed result points into the project folder
        result = json.loads(capsys.readouterr().out)
        assert result["publicId"].startswith("VDS_FOLDER/Hero_Shot/")
        assert result["sizeBytes"] == len(b"hero image")
        assert (tmp_path / "media" / result["publicId"]).read_bytes() == b"hero image"

    def test_upload_data_uri(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config_path = _local_config(tmp_path)

        with patch("studiomedia.cli.setup_logging"):
            StudioMedia().upload(str(config_path), encode_data_uri(b"gif", "gif"))

        result = json.loads(capsys.readouterr().out)
        assert result["publicId"].startswith("VDS_FOLDER/UNKNOWN_PROJECT/")

    def test_upload_media_error_exits(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config_path = _local_config(tmp_path)

        with patch("studiomedia.cli.setup_logging"):
            with pytest.raises(SystemExit) as exc_info:
                StudioMedia().upload(str(config_path), encode_data_uri(b"bm", "bmp"))

        assert exc_info.value.code == 2
        assert "UNSUPPORTED_FORMAT" in capsys.readouterr().err

    def test_upload_missing_file_exits(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config_path = _local_config(tmp_path)

        with patch("studiomedia.cli.setup_logging"):
            with pytest.raises(SystemExit) as exc_info:
                StudioMedia().upload(str(config_path), str(tmp_path / "nope.png"))

        assert exc_info.value.code == 2
        assert "Cannot read" in capsys.readouterr().err


def test_main_invokes_fire() -> None:
    with (
        patch("studiomedia.cli.fire.Fire") as mock_fire,
        patch("studiomedia.cli.sys.argv", ["studiomedia", "--help"]),
    ):
        main()
    mock_fire.assert_called_once_with(StudioMedia)

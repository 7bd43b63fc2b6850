"""CLI entrypoint for the studio media service."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import fire  # type: ignore[import-untyped]

from studiomedia.app import Application
from studiomedia.config import ConfigError, load_config
from studiomedia.errors import MediaError
from studiomedia.logging_setup import configure_logging
from studiomedia.models.upload import UploadResult
from studiomedia.plugins.registry import PluginType, get_plugin_names


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for CLI."""
    configure_logging(log_level=level)


class StudioMedia:
    """Studio media CLI - project media ingestion service."""

    def run(self, config: str, log_level: str = "INFO") -> None:
        """Serve the media ingestion API.

        Args:
            config: Path to YAML config file
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        setup_logging(log_level)
        app = Application(Path(config))

        try:
            asyncio.run(app.run())
        except ConfigError as e:
            print(f"✗ Config invalid: {e}", file=sys.stderr)
            sys.exit(1)
        except KeyboardInterrupt:
            pass  # Handled by signal handlers

    serve = run

    def validate(self, config: str) -> None:
        """Validate config file without running.

        Args:
            config: Path to YAML config file
        """
        config_path = Path(config)
        try:
            cfg = load_config(config_path)
        except ConfigError as e:
            print(f"✗ Config invalid: {e}", file=sys.stderr)
            sys.exit(1)

        print(f"✓ Config valid: {config_path}")
        print(f"  Uploader backend: {cfg.uploader.backend}")
        print(f"  Available uploaders: {get_plugin_names(PluginType.UPLOADER)}")
        print(f"  Root folder: {cfg.uploader.paths.root_folder}")
        print(f"  Listening on: {cfg.server.host}:{cfg.server.port}")

    def upload(
        self,
        config: str,
        source: str,
        name: str | None = None,
        log_level: str = "WARNING",
    ) -> None:
        """Upload one asset and print the hosted URL as JSON.

        Args:
            config: Path to YAML config file
            source: File path, or a `data:image/...;base64,` URI
            name: Project name used for the destination folder
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        setup_logging(log_level)
        app = Application(Path(config))

        try:
            result = asyncio.run(_upload_once(app, source, name))
        except ConfigError as e:
            print(f"✗ Config invalid: {e}", file=sys.stderr)
            sys.exit(1)
        except MediaError as e:
            print(f"✗ Upload failed [{e.code}]: {e}", file=sys.stderr)
            if e.detail:
                print(f"  {e.detail}", file=sys.stderr)
            sys.exit(2)
        except OSError as e:
            print(f"✗ Cannot read {source}: {e}", file=sys.stderr)
            sys.exit(2)

        print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))


async def _upload_once(app: Application, source: str, name: str | None) -> UploadResult:
    app.load()
    try:
        if source.startswith("data:"):
            return await app.ingestor.upload_data_uri(source, project_name=name)
        payload = await asyncio.to_thread(Path(source).read_bytes)
        return await app.uploader.upload(
            payload, app.ingestor.target_for(name), app.ingestor.resource_type
        )
    finally:
        await app.uploader.shutdown()


def main() -> None:
    """Main CLI entrypoint."""
    # Strip --help/-h when it's the only arg so Fire shows its commands list
    if len(sys.argv) == 2 and sys.argv[1] in ("--help", "-h"):
        sys.argv.pop()
    fire.Fire(StudioMedia)


if __name__ == "__main__":
    main()

"""Configuration models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from studiomedia.models.enums import ResourceType

DEFAULT_CHUNK_SIZE = 6_000_000
DEFAULT_TIMEOUT_S = 60.0


class CloudinaryUploaderConfig(BaseModel):
    """Cloudinary uploader configuration.

    Credentials are referenced by env var name, never stored in the file.
    """

    cloud_name: str | None = None
    cloud_name_env: str = "CLOUDINARY_CLOUD_NAME"
    api_key_env: str = "CLOUDINARY_API_KEY"
    api_secret_env: str = "CLOUDINARY_API_SECRET"
    upload_prefix: str | None = None
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, ge=1)
    timeout_s: float = Field(default=DEFAULT_TIMEOUT_S, gt=0.0)
    quality: str | None = "auto"
    fetch_format: str | None = "auto"
    resource_type: ResourceType = ResourceType.AUTO


class LocalUploaderConfig(BaseModel):
    """Local filesystem uploader configuration."""

    root: str = "./media"
    url_prefix: str | None = None


class UploadPathsConfig(BaseModel):
    """Logical destination naming at the media host."""

    root_folder: str = "VDS_FOLDER"
    default_project: str = "UNKNOWN_PROJECT"
    max_segment_length: int = Field(default=50, ge=1)


class UploaderConfig(BaseModel):
    """Uploader backend configuration.

    Note: Backend names are validated against the registry at runtime via
    validate_plugin_names(). This allows third-party uploader plugins.
    """

    model_config = {"extra": "allow"}  # Allow third-party backend configs

    backend: str = "cloudinary"
    cloudinary: CloudinaryUploaderConfig | None = None
    local: LocalUploaderConfig | None = None
    paths: UploadPathsConfig = Field(default_factory=UploadPathsConfig)

    @field_validator("backend", mode="before")
    @classmethod
    def _normalize_backend(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower()
        return value

    @model_validator(mode="after")
    def _validate_builtin_backends(self) -> UploaderConfig:
        """Fill defaults for built-in backends when their section is omitted."""
        match self.backend:
            case "cloudinary":
                if self.cloudinary is None:
                    object.__setattr__(self, "cloudinary", CloudinaryUploaderConfig())
            case "local":
                if self.local is None:
                    object.__setattr__(self, "local", LocalUploaderConfig())
            case _:
                pass
        return self


class FieldLimitsConfig(BaseModel):
    """Clamping limits for plain-text fields passed through ingestion."""

    name: int = Field(default=255, ge=1)
    client: int = Field(default=100, ge=1)
    collaborators: int = Field(default=200, ge=1)


class ServerConfig(BaseModel):
    """FastAPI server configuration."""

    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class Config(BaseModel):
    """Main configuration."""

    version: int = 1
    uploader: UploaderConfig = Field(default_factory=UploaderConfig)
    limits: FieldLimitsConfig = Field(default_factory=FieldLimitsConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

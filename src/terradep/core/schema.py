"""Pydantic schemas for backend payloads and scanner configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field, StrictStr

DEFAULT_EXCLUDED_DIRS: frozenset[str] = frozenset(
    {".terraform", ".idea", ".vscode", ".external_modules"}
)


# --- Backend payloads ---


class S3BackendConfig(BaseModel):
    """
    Attributes of an ``s3`` backend or ``terraform_remote_state`` config.

    Only bucket and key identify the object. Region and encryption take part
    in identity only when the resolver is asked to include them.
    """

    bucket: StrictStr
    key: StrictStr
    region: StrictStr | None = None
    encrypt: bool = False

    # dynamodb_table, profile, role_arn, ...
    model_config = {"extra": "allow"}


class GCSBackendConfig(BaseModel):
    """Attributes of a ``gcs`` backend or ``terraform_remote_state`` config."""

    bucket: StrictStr
    prefix: StrictStr | None = None

    model_config = {"extra": "allow"}


# --- Scanner configuration ---


class S3IdentityConfig(BaseModel):
    """Which optional S3 attributes make two states distinct."""

    include_region: bool = False
    include_encryption: bool = False


class ScannerConfigSchema(BaseModel):
    """Schema for the scanner configuration file."""

    exclude: list[str] = Field(default_factory=lambda: sorted(DEFAULT_EXCLUDED_DIRS))
    s3: S3IdentityConfig = Field(default_factory=S3IdentityConfig)

    model_config = {"extra": "forbid"}

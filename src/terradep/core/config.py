"""Scanner configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from terradep.core.errors import TerradepError
from terradep.core.registry import ResolverRegistry
from terradep.core.schema import ScannerConfigSchema


class ConfigError(TerradepError):
    """Raised when the configuration file is unreadable or invalid."""


class ScannerConfig:
    """
    Settings for one terradep run.

    Loaded from a YAML file such as::

        exclude: [.terraform, .idea, modules]
        s3:
          include_region: true
          include_encryption: false
    """

    def __init__(self, schema: ScannerConfigSchema | None = None) -> None:
        self._schema = schema or ScannerConfigSchema()

    @classmethod
    def load(cls, path: str | Path) -> ScannerConfig:
        """Load configuration from YAML file."""
        path = Path(path)
        try:
            with path.open() as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"reading configuration: {e}", path=str(path)) from e
        try:
            return cls.from_dict(data or {})
        except ConfigError as e:
            e.path = str(path)
            raise

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScannerConfig:
        """Create configuration from dictionary."""
        try:
            return cls(ScannerConfigSchema(**data))
        except (TypeError, ValidationError) as e:
            raise ConfigError(f"invalid configuration: {e}") from e

    @property
    def excluded(self) -> frozenset[str]:
        return frozenset(self._schema.exclude)

    @property
    def s3_region(self) -> bool:
        return self._schema.s3.include_region

    @property
    def s3_encryption(self) -> bool:
        return self._schema.s3.include_encryption

    def override(
        self,
        *,
        exclude: list[str] | None = None,
        s3_region: bool | None = None,
        s3_encryption: bool | None = None,
    ) -> ScannerConfig:
        """Return a copy with the given settings replaced."""
        s3 = self._schema.s3.model_copy(
            update={
                k: v
                for k, v in (("include_region", s3_region), ("include_encryption", s3_encryption))
                if v is not None
            }
        )
        update: dict[str, Any] = {"s3": s3}
        if exclude is not None:
            update["exclude"] = list(exclude)
        return ScannerConfig(self._schema.model_copy(update=update))

    def resolvers(self) -> ResolverRegistry:
        """Build the resolver registry these settings describe."""
        return ResolverRegistry.default(s3_region=self.s3_region, s3_encryption=self.s3_encryption)

    def __repr__(self) -> str:
        return (
            f"ScannerConfig(exclude={sorted(self.excluded)}, "
            f"s3_region={self.s3_region}, s3_encryption={self.s3_encryption})"
        )

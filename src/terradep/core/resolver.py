"""State resolution for backend declarations and remote state references."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar
from urllib.parse import quote, urlencode

from pydantic import BaseModel, ValidationError

from terradep.core.errors import StateResolutionError
from terradep.core.schema import GCSBackendConfig, S3BackendConfig
from terradep.core.state import State

_PATH_SAFE = "/:@!$&'()*+,;="


class StateResolver:
    """
    Turns the raw attributes of one backend type into a State.

    Subclasses declare the backend they handle, the pydantic model that
    validates its payload and how a validated payload maps to a location.
    Resolution never performs I/O.
    """

    backend: ClassVar[str]
    schema: ClassVar[type[BaseModel]]

    def resolve_own_state(self, config: Any) -> State:
        """Resolve the payload of a ``backend`` block in a terraform block."""
        return State(self.backend, self.location(self.validate(config)))

    def resolve_dependency_state(self, config: Any) -> State:
        """Resolve the ``config`` attribute of a terraform_remote_state block."""
        return State(self.backend, self.location(self.validate(config)))

    def validate(self, config: Any) -> BaseModel:
        """Validate a payload, reporting the first offending attribute."""
        if config is None:
            config = {}
        if not isinstance(config, Mapping):
            raise StateResolutionError(
                f"config must be an object, got {type(config).__name__}",
                backend=self.backend,
                attribute="config",
            )
        try:
            return self.schema.model_validate(dict(config))
        except ValidationError as e:
            error = e.errors()[0]
            attribute = ".".join(str(part) for part in error["loc"]) or "config"
            if error["type"] == "missing":
                message = "missing required attribute"
            else:
                message = f"invalid attribute: {error['msg']}"
            raise StateResolutionError(message, backend=self.backend, attribute=attribute) from e

    def location(self, config: Any) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.backend})"


class S3StateResolver(StateResolver):
    """
    Resolver for the ``s3`` backend.

    Examples:
        S3StateResolver().resolve_dependency_state({"bucket": "b", "key": "net/state"})
        # State location: s3://b/net/state

        S3StateResolver(include_region=True).resolve_dependency_state(
            {"bucket": "b", "key": "net/state", "region": "eu-west-3"}
        )
        # State location: s3://b/net/state?region=eu-west-3
    """

    backend = "s3"
    schema = S3BackendConfig

    def __init__(self, include_region: bool = False, include_encryption: bool = False) -> None:
        """
        Initialize resolver.

        Args:
            include_region: States in different regions are distinct.
                A missing region is treated as an empty string.
            include_encryption: States with different encryption are distinct.
                A missing encrypt attribute is treated as false.
        """
        self.include_region = include_region
        self.include_encryption = include_encryption

    def location(self, config: S3BackendConfig) -> str:
        key = config.key if config.key.startswith("/") else f"/{config.key}"
        url = f"s3://{config.bucket}{quote(key, safe=_PATH_SAFE)}"

        params: dict[str, str] = {}
        if self.include_encryption:
            params["encrypt"] = "true" if config.encrypt else "false"
        if self.include_region:
            params["region"] = config.region or ""
        if params:
            url = f"{url}?{urlencode(sorted(params.items()))}"
        return url

    def __repr__(self) -> str:
        return (
            f"S3StateResolver(include_region={self.include_region}, "
            f"include_encryption={self.include_encryption})"
        )


class GCSStateResolver(StateResolver):
    """Resolver for the ``gcs`` backend."""

    backend = "gcs"
    schema = GCSBackendConfig

    def location(self, config: GCSBackendConfig) -> str:
        prefix = (config.prefix or "").strip("/")
        if prefix:
            return f"gcs://{config.bucket}/{quote(prefix, safe=_PATH_SAFE)}"
        return f"gcs://{config.bucket}"

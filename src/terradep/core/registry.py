"""Registry of state resolvers keyed by backend type."""

from __future__ import annotations

from typing import Any, Iterator

from terradep.core.errors import UnsupportedBackendError
from terradep.core.resolver import GCSStateResolver, S3StateResolver, StateResolver
from terradep.core.state import State


class ResolverRegistry:
    """
    Backend type -> StateResolver.

    The registry is the only place that knows which backends are supported.
    Additional backends are added with ``register`` without touching the
    scanner.
    """

    def __init__(self, resolvers: dict[str, StateResolver] | None = None) -> None:
        self._resolvers: dict[str, StateResolver] = dict(resolvers or {})

    @classmethod
    def default(cls, s3_region: bool = False, s3_encryption: bool = False) -> ResolverRegistry:
        """Create a registry with the built-in resolvers."""
        registry = cls()
        registry.register(S3StateResolver(include_region=s3_region, include_encryption=s3_encryption))
        registry.register(GCSStateResolver())
        return registry

    def register(self, resolver: StateResolver, backend: str | None = None) -> None:
        """Register a resolver under its own backend name, or under ``backend``."""
        self._resolvers[backend or resolver.backend] = resolver

    def get(self, backend: str) -> StateResolver:
        """Get resolver for a backend, raising if none is registered."""
        resolver = self._resolvers.get(backend)
        if resolver is None:
            raise UnsupportedBackendError(backend, self.supported_backends())
        return resolver

    def supported_backends(self) -> list[str]:
        return sorted(self._resolvers)

    def resolve_own_state(self, backend: str, config: Any) -> State:
        return self.get(backend).resolve_own_state(config)

    def resolve_dependency_state(self, backend: str, config: Any) -> State:
        return self.get(backend).resolve_dependency_state(config)

    def __len__(self) -> int:
        return len(self._resolvers)

    def __iter__(self) -> Iterator[StateResolver]:
        return iter(self._resolvers.values())

    def __contains__(self, backend: str) -> bool:
        return backend in self._resolvers

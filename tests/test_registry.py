"""Tests for registry module."""

import pytest

from terradep.core.errors import StateResolutionError, UnsupportedBackendError
from terradep.core.registry import ResolverRegistry
from terradep.core.resolver import S3StateResolver, StateResolver
from terradep.core.schema import GCSBackendConfig


class LocalStateResolver(StateResolver):
    """Resolver registered by tests only."""

    backend = "local"
    schema = GCSBackendConfig

    def location(self, config):
        return f"file://{config.bucket}"


class TestResolverRegistry:
    """Tests for ResolverRegistry class."""

    def test_default(self):
        """Test the built-in resolvers are registered."""
        registry = ResolverRegistry.default()

        assert len(registry) == 2
        assert "s3" in registry
        assert "gcs" in registry
        assert registry.supported_backends() == ["gcs", "s3"]

    def test_default_s3_toggles(self):
        """Test toggles are passed to the s3 resolver."""
        registry = ResolverRegistry.default(s3_region=True, s3_encryption=True)

        resolver = registry.get("s3")
        assert isinstance(resolver, S3StateResolver)
        assert resolver.include_region
        assert resolver.include_encryption

    def test_resolve_dependency_state(self):
        """Test resolution is delegated by backend name."""
        registry = ResolverRegistry.default()

        state = registry.resolve_dependency_state("s3", {"bucket": "b", "key": "net/state"})
        assert str(state) == "s3://b/net/state"

    def test_resolve_own_state(self):
        """Test own state resolution is delegated by backend name."""
        registry = ResolverRegistry.default()

        state = registry.resolve_own_state("gcs", {"bucket": "b", "prefix": "net"})
        assert str(state) == "gcs://b/net"

    def test_unsupported_backend(self):
        """Test an unknown backend lists the supported ones."""
        registry = ResolverRegistry.default()

        with pytest.raises(UnsupportedBackendError) as exc_info:
            registry.resolve_dependency_state("azurerm", {})

        assert exc_info.value.backend == "azurerm"
        assert exc_info.value.supported == ["gcs", "s3"]
        assert "gcs, s3" in str(exc_info.value)
        assert isinstance(exc_info.value, StateResolutionError)

    def test_empty_registry(self):
        """Test an empty registry supports nothing."""
        registry = ResolverRegistry()

        with pytest.raises(UnsupportedBackendError):
            registry.resolve_own_state("s3", {"bucket": "b", "key": "k"})

    def test_register(self):
        """Test registering an additional backend."""
        registry = ResolverRegistry.default()
        registry.register(LocalStateResolver())

        assert "local" in registry
        state = registry.resolve_own_state("local", {"bucket": "/var/state"})
        assert str(state) == "file:///var/state"

    def test_register_under_other_name(self):
        """Test a resolver can serve a backend alias."""
        registry = ResolverRegistry()
        registry.register(S3StateResolver(), backend="s3-compatible")

        assert registry.supported_backends() == ["s3-compatible"]
        assert registry.get("s3-compatible").backend == "s3"

"""Error taxonomy for scanning, resolving and graph construction.

Every error is fatal for the scan, merge or encode call that raised it.
Nothing here is retried; the CLI decides how to present the failure.
"""

from __future__ import annotations

from typing import Iterable


class TerradepError(Exception):
    """Base class for all terradep failures.

    Carries the path of the deployment being processed when the failure
    happened, if known. The scanner fills it in for errors raised while
    handling a single deployment.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class RootNotFoundError(TerradepError):
    """Raised when a scan root does not exist or is not a directory."""


class ConfigurationParseError(TerradepError):
    """Raised when deployment configuration is unreadable or malformed."""


class StateResolutionError(TerradepError):
    """Raised when a backend payload cannot be turned into a State."""

    def __init__(
        self,
        message: str,
        *,
        backend: str | None = None,
        attribute: str | None = None,
        path: str | None = None,
    ) -> None:
        self.backend = backend
        self.attribute = attribute
        details = []
        if backend is not None:
            details.append(f"backend={backend!r}")
        if attribute is not None:
            details.append(f"attribute={attribute!r}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message, path=path)


class UnsupportedBackendError(StateResolutionError):
    """Raised when no resolver is registered for a backend type."""

    def __init__(self, backend: str, supported: Iterable[str], *, path: str | None = None) -> None:
        self.supported = sorted(supported)
        super().__init__(
            f"unsupported backend type, supported backends: {', '.join(self.supported) or '-'}",
            backend=backend,
            path=path,
        )


class IncompleteResolutionError(TerradepError):
    """Raised when fewer references resolve than reference blocks are declared."""

    def __init__(self, expected: int, resolved: int, *, path: str | None = None) -> None:
        self.expected = expected
        self.resolved = resolved
        super().__init__(
            f"expected to resolve {expected} remote states, but resolved {resolved}",
            path=path,
        )


class DuplicateIdentityError(TerradepError):
    """Raised when two deployments share a path or a State."""


class StructuralGraphError(TerradepError):
    """Raised when a graph cannot be well-formed (no heads, conflicting paths)."""

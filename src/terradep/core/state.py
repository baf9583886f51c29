"""State identity and scanner records."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, order=True)
class State:
    """
    Canonical identifier of where a deployment's persisted state lives.

    Two states are equal iff they were resolved for the same backend and
    produced the same canonical location. Which attributes participate in
    the location is decided by the resolver that built it.
    """

    backend: str
    location: str

    def __str__(self) -> str:
        return self.location


@dataclass(frozen=True)
class DeploymentRecord:
    """A scanned deployment: its own state and the states it depends on."""

    path: str
    state: State
    dependencies: tuple[State, ...] = field(default_factory=tuple)

    def __repr__(self) -> str:
        return f"DeploymentRecord({self.path}, state={self.state}, dependencies={len(self.dependencies)})"

"""Scanning directory trees for Terraform deployments."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Protocol

from terradep.core.errors import (
    ConfigurationParseError,
    IncompleteResolutionError,
    RootNotFoundError,
    TerradepError,
)
from terradep.core.graph import Graph, build_graph, merge_graphs
from terradep.core.registry import ResolverRegistry
from terradep.core.schema import DEFAULT_EXCLUDED_DIRS
from terradep.core.state import DeploymentRecord, State

if TYPE_CHECKING:
    from terradep.core.config import ScannerConfig
    from terradep.parsing.hcl import ParsedDeployment

logger = logging.getLogger(__name__)


class DeploymentParser(Protocol):
    """What the scanner needs from a configuration parser."""

    def is_deployment_root(self, path: str) -> bool: ...

    def load_deployment(self, path: str) -> ParsedDeployment: ...


@dataclass(frozen=True)
class WalkEntry:
    """A directory visited by ``walk``."""

    path: str
    excluded: bool = False
    deployment_root: bool = False


def _raise_walk_error(error: OSError) -> None:
    raise ConfigurationParseError(f"reading directory: {error}", path=error.filename)


def walk(
    root: str,
    excluded: Iterable[str],
    is_deployment_root: Callable[[str], bool],
) -> Iterator[WalkEntry]:
    """
    Walk ``root`` top-down in sorted order.

    Excluded directories and deployment roots are yielded but never
    descended into: deployments are not nested.
    """
    excluded = frozenset(excluded)
    for dirpath, dirnames, _ in os.walk(root, onerror=_raise_walk_error):
        if os.path.basename(os.path.normpath(dirpath)) in excluded:
            dirnames.clear()
            yield WalkEntry(dirpath, excluded=True)
        elif is_deployment_root(dirpath):
            dirnames.clear()
            yield WalkEntry(dirpath, deployment_root=True)
        else:
            dirnames.sort()
            yield WalkEntry(dirpath)


def check_root(root: str) -> None:
    """Raise RootNotFoundError unless ``root`` is an existing directory."""
    if not os.path.exists(root):
        raise RootNotFoundError(f"path does not exist: {root}")
    if not os.path.isdir(root):
        raise RootNotFoundError(f"path is not a directory: {root}")


class Scanner:
    """
    Finds deployments under a root directory and builds their graph.

    Any failure while loading or resolving one deployment aborts the whole
    scan; the error carries the path of that deployment.
    """

    def __init__(
        self,
        resolvers: ResolverRegistry,
        parser: DeploymentParser | None = None,
        excluded: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
    ) -> None:
        """
        Initialize scanner.

        Args:
            resolvers: Registry used to resolve backend declarations
            parser: Configuration parser (defaults to TerraformParser)
            excluded: Directory names which are never scanned
        """
        if parser is None:
            from terradep.parsing.hcl import TerraformParser

            parser = TerraformParser()
        self._resolvers = resolvers
        self._parser = parser
        self._excluded = frozenset(excluded)

    @classmethod
    def from_config(cls, config: ScannerConfig, parser: DeploymentParser | None = None) -> Scanner:
        return cls(config.resolvers(), parser=parser, excluded=config.excluded)

    @property
    def excluded(self) -> frozenset[str]:
        return self._excluded

    def collect(self, root: str) -> list[DeploymentRecord]:
        """Find every deployment under ``root`` and resolve its states."""
        check_root(root)
        root = os.path.abspath(root)
        logger.info("scanning directory: %s", root)

        records: list[DeploymentRecord] = []
        for entry in walk(root, self._excluded, self._parser.is_deployment_root):
            if entry.excluded:
                logger.debug("skipping excluded directory: %s", entry.path)
                continue
            if not entry.deployment_root:
                logger.debug("not a deployment directory: %s", entry.path)
                continue

            logger.info("loading deployment from path: %s", entry.path)
            try:
                records.append(self._load_record(entry.path))
            except TerradepError as e:
                if e.path is None:
                    e.path = entry.path
                raise

        logger.info("found %d deployments under %s", len(records), root)
        return records

    def scan(self, root: str) -> Graph:
        """Scan one root directory into a graph."""
        return build_graph(self.collect(root))

    def scan_all(self, roots: Iterable[str]) -> Graph:
        """Scan several root directories and merge their graphs."""
        return merge_graphs(*(self.scan(root) for root in roots))

    def _load_record(self, path: str) -> DeploymentRecord:
        deployment = self._parser.load_deployment(path)
        state = self._resolvers.resolve_own_state(deployment.backend_type, deployment.backend_config)
        dependencies = self._resolve_references(deployment)
        logger.debug("deployment %s has state %s", path, state)
        return DeploymentRecord(path=path, state=state, dependencies=tuple(dependencies))

    def _resolve_references(self, deployment: ParsedDeployment) -> list[State]:
        states: list[State] = []
        for filename, references in deployment.references_by_file().items():
            logger.debug("resolving %d remote states from %s", len(references), filename)
            for reference in references:
                state = self._resolvers.resolve_dependency_state(reference.backend_type, reference.config)
                logger.debug("remote state %r resolved to %s", reference.name, state)
                states.append(state)

        if len(states) != deployment.declared_references:
            raise IncompleteResolutionError(deployment.declared_references, len(states))
        return states

"""Core graph construction engine."""

from terradep.core.config import ScannerConfig
from terradep.core.encoding import FlatEdge, FlatGraph, FlatNode, encode, flatten
from terradep.core.errors import (
    ConfigurationParseError,
    DuplicateIdentityError,
    IncompleteResolutionError,
    RootNotFoundError,
    StateResolutionError,
    StructuralGraphError,
    TerradepError,
    UnsupportedBackendError,
)
from terradep.core.graph import Graph, Node, build_graph, merge_graphs
from terradep.core.registry import ResolverRegistry
from terradep.core.resolver import GCSStateResolver, S3StateResolver, StateResolver
from terradep.core.scanner import Scanner, walk
from terradep.core.schema import DEFAULT_EXCLUDED_DIRS
from terradep.core.state import DeploymentRecord, State

__all__ = [
    "DEFAULT_EXCLUDED_DIRS",
    "ConfigurationParseError",
    "DeploymentRecord",
    "DuplicateIdentityError",
    "FlatEdge",
    "FlatGraph",
    "FlatNode",
    "GCSStateResolver",
    "Graph",
    "IncompleteResolutionError",
    "Node",
    "ResolverRegistry",
    "RootNotFoundError",
    "S3StateResolver",
    "Scanner",
    "ScannerConfig",
    "State",
    "StateResolutionError",
    "StateResolver",
    "StructuralGraphError",
    "TerradepError",
    "UnsupportedBackendError",
    "build_graph",
    "encode",
    "flatten",
    "merge_graphs",
    "walk",
]

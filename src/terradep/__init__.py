"""
Terradep - dependency graphs of Terraform deployments.

This package provides tools for:
- Scanning directory trees for Terraform deployments and their backends
- Resolving backend declarations and terraform_remote_state references to States
- Building and merging the dependency graph between deployments
- Encoding the graph as Graphviz DOT, Mermaid or JSON Lines
"""

__version__ = "0.1.0"

from terradep.core.encoding import encode, flatten
from terradep.core.graph import Graph, Node, build_graph, merge_graphs
from terradep.core.registry import ResolverRegistry
from terradep.core.scanner import Scanner
from terradep.core.state import State

__all__ = [
    "__version__",
    "Graph",
    "Node",
    "ResolverRegistry",
    "Scanner",
    "State",
    "build_graph",
    "encode",
    "flatten",
    "merge_graphs",
]

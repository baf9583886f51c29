"""Flattening a Graph into a node/edge list for the generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from terradep.core.graph import Graph, Node
from terradep.generators import generate_dot, generate_jsonl, generate_mermaid

FORMATS: dict[str, Callable[[FlatGraph], str]] = {
    "dot": generate_dot,
    "mermaid": generate_mermaid,
    "jsonl": generate_jsonl,
}


@dataclass(frozen=True)
class FlatNode:
    """A vertex: one per distinct graph node."""

    id: str
    label: str
    path: str | None = None

    @property
    def external(self) -> bool:
        return self.path is None


@dataclass(frozen=True)
class FlatEdge:
    """From a deployment to a deployment it depends on."""

    source: str
    target: str


@dataclass
class FlatGraph:
    """Deduplicated vertices and edges of a Graph."""

    nodes: list[FlatNode] = field(default_factory=list)
    edges: list[FlatEdge] = field(default_factory=list)
    heads: list[str] = field(default_factory=list)

    def get(self, node_id: str) -> FlatNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def children(self, node_id: str) -> list[str]:
        return [e.target for e in self.edges if e.source == node_id]


def flatten(graph: Graph) -> FlatGraph:
    """
    Flatten a graph.

    A node reachable from several heads is emitted once. Every entry of
    every ``children`` list becomes one edge, so a dependency shared by
    several deployments keeps all its incoming edges.
    """
    ids: dict[Node, str] = {}
    flat = FlatGraph()
    for node in graph.nodes():
        ids[node] = f"n{len(ids)}"
        flat.nodes.append(FlatNode(id=ids[node], label=str(node.state), path=node.path))

    for node in ids:
        for child in node.children:
            flat.edges.append(FlatEdge(ids[node], ids[child]))

    flat.heads = [ids[head] for head in graph.heads]
    return flat


def encode(graph: Graph, fmt: str = "dot") -> bytes:
    """Render a graph in one of ``FORMATS``."""
    try:
        generator = FORMATS[fmt]
    except KeyError:
        raise ValueError(f"unknown format: {fmt!r}, supported: {', '.join(sorted(FORMATS))}") from None
    return generator(flatten(graph)).encode("utf-8")

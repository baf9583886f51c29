"""Dependency graph of deployments, built from scanner records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from terradep.core.errors import DuplicateIdentityError, StructuralGraphError
from terradep.core.state import DeploymentRecord, State

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Node:
    """
    A deployment in the dependency graph.

    Nodes compare by identity. ``children`` lists the nodes this deployment
    depends on. A node without a path is external: it is referenced by a
    scanned deployment but was not found under any scan root.
    """

    state: State
    path: str | None = None
    children: list[Node] = field(default_factory=list)

    @property
    def is_external(self) -> bool:
        return self.path is None

    def __repr__(self) -> str:
        where = self.path if self.path is not None else "external"
        return f"Node({self.state}, {where}, children={len(self.children)})"


class Graph:
    """
    Directed graph of deployments.

    Heads are deployments no other deployment depends on. Walking
    ``children`` from a head reaches everything it transitively depends on.
    """

    def __init__(self, heads: list[Node] | None = None) -> None:
        self._heads = list(heads or [])

    @property
    def heads(self) -> list[Node]:
        return list(self._heads)

    def nodes(self) -> list[Node]:
        """All nodes reachable from the heads, each exactly once, depth-first."""
        seen: set[Node] = set()
        ordered: list[Node] = []
        stack = list(reversed(self._heads))
        while stack:
            node = stack.pop()
            if node in seen:
                continue
            seen.add(node)
            ordered.append(node)
            stack.extend(reversed(node.children))
        return ordered

    def edges(self) -> list[tuple[Node, Node]]:
        """One (dependent, dependency) pair per ``children`` entry."""
        return [(node, child) for node in self.nodes() for child in node.children]

    def find(self, state: State) -> Node | None:
        """Get the node owning a state."""
        for node in self.nodes():
            if node.state == state:
                return node
        return None

    def find_by_path(self, path: str) -> Node | None:
        """Get the node scanned at a path."""
        for node in self.nodes():
            if node.path == path:
                return node
        return None

    def has_dependents(self, node: Node) -> bool:
        """Check if any node in the graph depends on ``node``."""
        return any(child is node for _, child in self.edges())

    def external_nodes(self) -> list[Node]:
        return [n for n in self.nodes() if n.is_external]

    def __len__(self) -> int:
        return len(self.nodes())

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes())

    def __repr__(self) -> str:
        return f"Graph(heads={[str(h.state) for h in self._heads]}, nodes={len(self)})"


def _find_heads(nodes: list[Node]) -> list[Node]:
    """Nodes that are nobody's child, in input order."""
    referenced: set[Node] = {child for node in nodes for child in node.children}
    return [node for node in nodes if node not in referenced]


def _check_reachable(heads: list[Node], nodes: Iterable[Node]) -> None:
    """Every node must hang below a head, otherwise it sits on a cycle."""
    reached = set(Graph(heads).nodes())
    lost = [node.path or str(node.state) for node in nodes if node not in reached]
    if lost:
        raise StructuralGraphError(
            "deployments not reachable from any independent deployment, "
            f"their remote state references form a cycle: {', '.join(sorted(lost))}"
        )


def build_graph(records: Iterable[DeploymentRecord]) -> Graph:
    """
    Build the dependency graph of one scan.

    Raises:
        DuplicateIdentityError: Two records share a path or a state.
        StructuralGraphError: Some deployments are not reachable from a
            head, because their references form a cycle.
    """
    records = list(records)
    logger.info("building dependency graph from %d deployments", len(records))

    by_path: dict[str, Node] = {}
    for record in records:
        if record.path in by_path:
            raise DuplicateIdentityError(
                f"more than one deployment has the same path: {record.path!r}"
            )
        logger.debug("deployment %s has state %s and %d dependencies",
                     record.path, record.state, len(record.dependencies))
        by_path[record.path] = Node(record.state, path=record.path)

    by_state: dict[State, Node] = {}
    for node in by_path.values():
        existing = by_state.get(node.state)
        if existing is not None:
            raise DuplicateIdentityError(
                f"more than one deployment has the same state: {node.state}, "
                f"first: {existing.path!r}, second: {node.path!r}"
            )
        by_state[node.state] = node

    for record in records:
        parent = by_path[record.path]
        for state in record.dependencies:
            child = by_state.get(state)
            if child is None:
                # Not known to the scanner: no path and never any children
                logger.info("found external deployment with state: %s", state)
                child = Node(state)
                by_state[state] = child
            parent.children.append(child)

    heads = _find_heads(list(by_path.values()))
    if records and not heads:
        raise StructuralGraphError(
            "none of the deployments is independent, the remote state references form a cycle"
        )
    _check_reachable(heads, by_path.values())
    return Graph(heads)


def merge_graphs(*graphs: Graph) -> Graph:
    """
    Merge graphs of independently scanned roots into one graph.

    Nodes sharing a state are unified. The unified node keeps the path of
    whichever side scanned it and the union of both sides' children. Input
    graphs are left untouched.

    Raises:
        DuplicateIdentityError: One state was scanned at two different paths.
        StructuralGraphError: One path resolved to two different states,
            or some merged deployment is not reachable from a head.
    """
    by_state: dict[State, Node] = {}
    state_by_path: dict[str, State] = {}
    sources: list[Node] = []

    for graph in graphs:
        for node in graph.nodes():
            sources.append(node)
            merged = by_state.get(node.state)
            if merged is None:
                merged = by_state[node.state] = Node(node.state, path=node.path)
            elif node.path is not None:
                if merged.path is None:
                    merged.path = node.path
                elif merged.path != node.path:
                    raise DuplicateIdentityError(
                        f"state {node.state} is owned by two deployments: "
                        f"{merged.path!r} and {node.path!r}"
                    )

            if node.path is not None:
                known = state_by_path.setdefault(node.path, node.state)
                if known != node.state:
                    raise StructuralGraphError(
                        f"path {node.path!r} maps to two different states: {known} and {node.state}"
                    )

    for node in sources:
        merged = by_state[node.state]
        # Children already contributed by another graph are not duplicated
        available = list(merged.children)
        for child in node.children:
            target = by_state[child.state]
            if target in available:
                available.remove(target)
            else:
                merged.children.append(target)

    heads = _find_heads(list(by_state.values()))
    if by_state and not heads:
        raise StructuralGraphError("merged graph has no independent deployments")
    _check_reachable(heads, by_state.values())

    logger.info("merged %d graphs into %d nodes with %d heads", len(graphs), len(by_state), len(heads))
    return Graph(heads)

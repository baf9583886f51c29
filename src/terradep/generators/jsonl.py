"""JSON Lines generation, mostly for debugging."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from terradep.core.encoding import FlatGraph


def _tree(graph: FlatGraph, node_id: str, ancestors: tuple[str, ...]) -> dict[str, Any]:
    node = graph.get(node_id)
    tree: dict[str, Any] = {"name": node.label if node else node_id}
    children = [
        _tree(graph, child, ancestors + (node_id,))
        for child in graph.children(node_id)
        if child not in ancestors and child != node_id
    ]
    if children:
        tree["children"] = children
    return tree


def generate_jsonl(graph: FlatGraph) -> str:
    """
    Generate one JSON document per head.

    Each document nests the head's dependencies under ``children``. A
    dependency shared by several deployments is repeated under each of them.
    """
    lines = [json.dumps(_tree(graph, head, ())) for head in graph.heads]
    return "\n".join(lines) + "\n" if lines else ""

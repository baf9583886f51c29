"""Graphviz DOT diagram generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from terradep.core.encoding import FlatGraph


def quote(value: str) -> str:
    """Quote a DOT string."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def generate_dot(graph: FlatGraph) -> str:
    """
    Generate Graphviz DOT diagram.

    Edges point from a deployment to the deployment it depends on.
    Can be rendered with: dot -Tpng deployments.dot -o deployments.png
    or piped to graph-easy for ASCII output.
    """
    lines = [
        "digraph terradep {",
        "    rankdir=LR;",
        "    node [shape=box, style=filled, fillcolor=lightblue];",
        "",
        "    // Deployments",
    ]

    for node in graph.nodes:
        attrs = [f"label={quote(node.label)}"]
        if node.external:
            # Referenced but not found under any scanned directory
            attrs.append('style="filled,dashed"')
            attrs.append("fillcolor=lightgray")
        else:
            attrs.append(f"tooltip={quote(node.path or '')}")
        lines.append(f"    {node.id} [{', '.join(attrs)}];")

    lines.append("")
    lines.append("    // Dependencies")
    for edge in graph.edges:
        lines.append(f"    {edge.source} -> {edge.target};")

    lines.append("}")
    lines.append("")

    return "\n".join(lines)

"""Mermaid diagram generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from terradep.core.encoding import FlatGraph


def generate_mermaid(graph: FlatGraph) -> str:
    """
    Generate Mermaid flowchart diagram.

    External deployments are drawn with a dashed border.
    """
    lines = ["flowchart LR"]

    for node in graph.nodes:
        # Escape special characters
        label = node.label.replace('"', "#quot;")
        suffix = ":::external" if node.external else ""
        lines.append(f'    {node.id}["{label}"]{suffix}')

    lines.append("")
    lines.append("    %% Dependencies")
    for edge in graph.edges:
        lines.append(f"    {edge.source} --> {edge.target}")

    if any(node.external for node in graph.nodes):
        lines.append("")
        lines.append("    classDef external stroke-dasharray: 5 5")

    lines.append("")
    return "\n".join(lines)

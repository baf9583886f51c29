"""Generators for graph descriptions."""

from terradep.generators.dot import generate_dot
from terradep.generators.jsonl import generate_jsonl
from terradep.generators.mermaid import generate_mermaid

__all__ = [
    "generate_dot",
    "generate_jsonl",
    "generate_mermaid",
]

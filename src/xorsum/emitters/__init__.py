"""
Output emitters.
"""

from .mermaid import mermaid_lines, emit_mermaid, MermaidReceipt

__all__ = [
    "mermaid_lines",
    "emit_mermaid",
    "MermaidReceipt",
]

"""
Diagram Emitter: Mermaid flowchart of a provenance graph

Output (exact):
  - header line "flowchart TD"
  - for a node with children:  HEX[HEX=C1^C2^...] --> PARENT_HEX
    (no " --> PARENT_HEX" suffix on the root)
  - for a leaf:                HEX --> PARENT_HEX
    (a childless root is written as HEX alone)
  - optional footer comment:   %% lines: N   (N counts every line above it)

Walk order is root first, depth-first over children in attachment order.
A line already written is never written again. A node whose children were
already walked is not walked a second time: its subtree lines are all
duplicates by then, so only its own line for the new parent can be new.

Mermaid caps a chart at 500 edges by default; anything over ~16 target bits
usually needs maxEdges raised in the Mermaid config.
"""

from typing import Iterator, List, Optional, Tuple, TypedDict

from ..core.bytesio import to_hex
from ..core.errors import raise_if_cancelled
from ..core.registry import param_registry
from ..graph.provenance import ProvenanceGraph


class MermaidReceipt(TypedDict):
    line_count: int       # lines written, header included, footer excluded
    node_lines: int
    leaf_lines: int
    duplicates_suppressed: int


def mermaid_lines(graph: ProvenanceGraph, cancel=None) -> Iterator[str]:
    """
    Yield the distinct body lines of the flowchart (no header, no footer).
    """
    labels = [to_hex(node.value) for node in graph.nodes]
    seen = set()
    walked = [False] * len(graph.nodes)

    # (node index, parent label or None for the root)
    stack: List[Tuple[int, Optional[str]]] = [(ProvenanceGraph.ROOT, None)]
    while stack:
        raise_if_cancelled(cancel, "render.walk")
        idx, parent = stack.pop()
        node = graph.node(idx)
        label = labels[idx]

        if node.children:
            item = f"{label}[{label}={'^'.join(labels[c] for c in node.children)}]"
            line = item if parent is None else f"{item} --> {parent}"
        else:
            line = label if parent is None else f"{label} --> {parent}"

        if line not in seen:
            seen.add(line)
            yield line

        if node.children and not walked[idx]:
            walked[idx] = True
            for child in reversed(node.children):
                stack.append((child, label))


def emit_mermaid(graph: ProvenanceGraph, sink, cancel=None, footer: bool = False) -> MermaidReceipt:
    """
    Write the flowchart for graph to sink.

    Args:
        graph: ProvenanceGraph to draw.
        sink: Any object with write(str) (file, io.StringIO, sys.stdout).
        cancel: Optional cancellation signal.
        footer: Append a "%% lines: N" comment line.

    Returns:
        MermaidReceipt
    """
    registry = param_registry()
    header = registry["diagram_header"]
    comment = registry["diagram_comment_prefix"]

    sink.write(header + "\n")
    line_count = 1
    node_lines = 0
    leaf_lines = 0

    for line in mermaid_lines(graph, cancel):
        sink.write(line + "\n")
        line_count += 1
        if "[" in line:
            node_lines += 1
        else:
            leaf_lines += 1

    if footer:
        sink.write(f"{comment} lines: {line_count}\n")

    # Every (node, parent) reference is one candidate line
    references = 1 + sum(len(n.children) for n in graph.nodes)
    return {
        "line_count": line_count,
        "node_lines": node_lines,
        "leaf_lines": leaf_lines,
        "duplicates_suppressed": references - (line_count - 1),
    }

from typing import List

from .nodes import KeyNode, Node


def serialize(root: KeyNode, spaces_per_indent: int = 2) -> str:
    """Serializes a node tree back into config text.

    The tree is walked depth-first, starting with the root's children at
    depth 0. Key lines are indented by `depth * spaces_per_indent` spaces.
    Comment and blank lines keep the indentation they were read with, so a
    document that was not modified is reproduced as it was written.

    Args:
        root: The sentinel root node, as produced by `parser.deserialize`.
        spaces_per_indent: Number of spaces per nesting level for key lines.

    Returns:
        The document text. Lines are joined with a single newline and no
        trailing newline is added.
    """
    result: List[str] = []
    for node in root.children:
        _serialize_node(node, 0, spaces_per_indent, result)
    return "\n".join(result)


def _serialize_node(node: Node, depth: int, spaces_per_indent: int, result: List[str]):
    """Recursively renders a node and, for key nodes, its children."""
    result.append(node.render(depth, spaces_per_indent))
    if isinstance(node, KeyNode):
        for child in node.children:
            _serialize_node(child, depth + 1, spaces_per_indent, result)

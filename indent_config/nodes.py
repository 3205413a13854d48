"""
Tree nodes for the indentation-structured config format.

A document is a tree of three node kinds:
- `KeyNode`: a `key: value` line with an optional trailing comment and any
  number of nested children.
- `CommentNode`: one standalone comment line, or a run of consecutive ones.
- `BlankNode`: a run of blank lines that share the same width.

The root of every tree is an ordinary `KeyNode` whose key is the empty
string. It is never rendered; only its children are.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

ROOT_KEY = ""


@dataclass(eq=False)
class KeyNode:
    """A key with an optional value, trailing comment, and child nodes.

    `children` keeps every child in document order, while `key_children`
    indexes the KeyNode children by their local key for direct lookup. The
    two are only changed through `add_child` and `detach_child`, which keep
    them consistent.
    """
    key: str
    value: Optional[str] = None
    comment: Optional[str] = None
    colon_space: int = 1
    children: List["Node"] = field(default_factory=list)
    key_children: Dict[str, "KeyNode"] = field(default_factory=dict)

    def child(self, key: str) -> Optional["KeyNode"]:
        return self.key_children.get(key)

    def add_child(self, node: "Node") -> None:
        """Appends a node, registering KeyNodes under their key."""
        self.children.append(node)
        if isinstance(node, KeyNode):
            self.key_children[node.key] = node

    def detach_child(self, node: "Node") -> None:
        """Removes a node from both the ordered children and the keyed index."""
        self.children = [child for child in self.children if child is not node]
        if isinstance(node, KeyNode) and self.key_children.get(node.key) is node:
            del self.key_children[node.key]

    def render(self, depth: int, spaces_per_indent: int) -> str:
        return (
            " " * (depth * spaces_per_indent)
            + self.key + ":" + " " * self.colon_space
            + (self.value or "")
            + (self.comment or "")
        )


@dataclass
class CommentNode:
    """A standalone comment. Runs of comment lines are joined with newlines.

    The text is stored exactly as written, including its indentation and
    the `#` marker, and is rendered verbatim regardless of depth.
    """
    text: str

    def append(self, text: str) -> None:
        self.text = f"{self.text}\n{text}"

    def render(self, depth: int, spaces_per_indent: int) -> str:
        return self.text


@dataclass
class BlankNode:
    """A run of `count` blank lines, each `indent` spaces wide.

    Equality compares both fields. Two runs of the same length but different
    widths are different runs.
    """
    count: int = 1
    indent: int = 0

    def render(self, depth: int, spaces_per_indent: int) -> str:
        return "\n".join(" " * self.indent for _ in range(self.count))


Node = Union[KeyNode, CommentNode, BlankNode]


def new_root() -> KeyNode:
    """Creates the sentinel node that holds every top-level entry."""
    return KeyNode(ROOT_KEY, colon_space=0)

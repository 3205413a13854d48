"""
Deserializes the indentation-structured config format into a node tree.

The format has no explicit block delimiters: a key line that is indented
deeper than the line before it becomes a child of the most recent key, and a
line indented less closes as many levels as needed. Comments and blank lines
are kept in the tree so the document can be written back as it was read.

Next to the tree, the parser builds a flat index that maps the dotted path of
every key holding a value (`parent.child`) to that value.
"""
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from .lines import BlankLine, CommentLine, KeyLine, classify_line
from .nodes import BlankNode, CommentNode, KeyNode, Node, new_root

LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")


@dataclass
class ParseResult:
    """The outcome of a successful parse.

    Attributes:
        root: The sentinel root node holding all top-level entries.
        cache: Flat index from dotted path to value.
        indent_step: The first positive nesting step seen in the document, or
            None if nothing was nested.
    """
    root: KeyNode
    cache: Dict[str, str]
    indent_step: Optional[int] = None


class _Resolver:
    """
    A stateful parser that rebuilds the node tree from classified lines.

    The resolver keeps a stack of open ancestors together with the indent
    each of them was opened at. The stack is seeded with the root and an
    indent of -1, which no real line can reach, so the root is never closed.
    Comments and blank lines never open or close a level. They are placed
    under whichever ancestor is open when they are read, and kept as a
    pending run until the next key line. If that key line opens a level, the
    run moves into the new section ahead of the key.

    The main entry point is the `deserialize` method. The public-facing
    `deserialize()` function in this module is a lightweight facade that
    instantiates this class and calls its `deserialize` method.
    """
    def __init__(self):
        self.root: KeyNode = new_root()
        self.cache: Dict[str, str] = {}
        self.indent_stack: List[int] = [-1]
        self.parent_stack: List[KeyNode] = [self.root]
        self.previous_key: Optional[KeyNode] = None
        self.previous_node: Optional[Node] = None
        self.previous_indent: int = 0
        self.pending: List[Node] = []
        self.indent_step: Optional[int] = None
        self.line_num: int = 0

    def _resolve_indent(self, indent: int):
        """Opens or closes ancestor levels for a key line at `indent`."""
        if indent > self.previous_indent:
            # With no key to nest under, an indented line stays at the current level.
            if self.previous_key is None:
                return
            if self.indent_step is None:
                self.indent_step = indent - self.previous_indent
            self.parent_stack.append(self.previous_key)
            self.indent_stack.append(self.previous_indent)
            self._adopt_pending(self.previous_key)
        elif indent < self.previous_indent:
            while indent <= self.indent_stack[-1]:
                self.indent_stack.pop()
                self.parent_stack.pop()

    def _adopt_pending(self, section: KeyNode):
        """Moves the comments and blank lines read since the last key into `section`."""
        owner = self.parent_stack[-2]
        for node in self.pending:
            owner.detach_child(node)
            section.add_child(node)
        self.pending = []

    def _path_for(self, key: str) -> str:
        """Builds the dotted path of `key` under the currently open ancestors."""
        return ".".join([parent.key for parent in self.parent_stack[1:]] + [key])

    def _append(self, node: Node):
        """Adds a node to the open ancestor unless it continues the previous run."""
        if node is not self.previous_node:
            self.parent_stack[-1].add_child(node)
        self.previous_node = node

    def _append_pending(self, node: Node):
        self._append(node)
        self.pending.append(node)

    def _handle_key(self, line: KeyLine):
        self._resolve_indent(line.indent)
        self.pending = []
        parent = self.parent_stack[-1]

        node = parent.child(line.key)
        if node is None:
            node = KeyNode(line.key, colon_space=line.colon_space, comment=line.comment)
            self._append(node)
        else:
            # A repeated key continues the existing entry instead of adding a sibling.
            node.colon_space = line.colon_space
            if line.comment is not None:
                node.comment = line.comment
            self.previous_node = node

        if line.value:
            node.value = line.value
            self.cache[self._path_for(line.key)] = line.value

        self.previous_key = node
        self.previous_indent = line.indent

    def _handle_comment(self, line: CommentLine):
        if isinstance(self.previous_node, CommentNode):
            self.previous_node.append(line.text)
        else:
            self._append_pending(CommentNode(line.text))

    def _handle_blank(self, line: BlankLine):
        previous = self.previous_node
        if isinstance(previous, BlankNode) and previous.indent == line.indent:
            previous.count += 1
        else:
            self._append_pending(BlankNode(count=1, indent=line.indent))

    def _process_line(self, line: str):
        """Classifies a single line and updates the parser's state."""
        self.line_num += 1
        classified = classify_line(line, self.line_num)

        if isinstance(classified, KeyLine):
            self._handle_key(classified)
        elif isinstance(classified, CommentLine):
            self._handle_comment(classified)
        else:
            self._handle_blank(classified)

    def deserialize(self, text: str) -> ParseResult:
        """Main entry point for the parser instance. Processes the entire text."""
        for line in split_lines(text):
            self._process_line(line)
        return ParseResult(root=self.root, cache=self.cache, indent_step=self.indent_step)


def split_lines(text: str) -> List[str]:
    """Splits text on `\\r\\n`, `\\r` and `\\n`, keeping an empty last line after a final newline.

    Other characters that `str.splitlines` treats as breaks, such as form
    feeds, stay part of the line. The empty last line lets `"a: 1\\n"` be
    written back with its newline.
    """
    if not text:
        return []
    return LINE_BREAK_PATTERN.split(text)


def deserialize(text: str) -> ParseResult:
    """Deserializes a config document into a node tree and a flat index.

    This function is a facade that instantiates a stateful parser and runs it
    over every line of `text`. Parsing either completes or raises; no partial
    tree is ever returned.

    Args:
        text: The complete document.

    Returns:
        A `ParseResult` with the root node, the flat index and the detected
        indent step.

    Raises:
        StructuralError: If a line is not a key line, a comment, or blank.
    """
    resolver = _Resolver()
    return resolver.deserialize(text)

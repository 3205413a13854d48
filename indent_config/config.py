"""
The `Config` class: a commented config document with a flat key index.

A `Config` holds two views of one document:
- an ordered node tree, which keeps comments, blank lines and the order of
  entries so the document can be written back as it was read, and
- a flat index from dotted paths (`server.port`) to string values, which
  serves all lookups directly.

Every method that changes a value changes both views in the same call.

Missing-key policy: `get`, `put`, `remove` and `kill` treat a None or empty
path as "nothing there" and return None without raising. `load`,
`load_from_text` and `save` need a real argument and raise `UsageError` for
None or empty input.

A `Config` is not thread-safe. Callers sharing one between threads must
synchronize access themselves.
"""
import os
import sys
from types import MappingProxyType
from typing import IO, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .exceptions import ConfigIOError, NotFoundError, StructuralError, UsageError
from .lines import COMMENT_MARKER
from .nodes import BlankNode, CommentNode, KeyNode, new_root
from .options import ConfigOptions, validate_spaces_per_indent
from .parser import deserialize
from .serializer import serialize

PathLike = Union[str, "os.PathLike[str]"]

_FORBIDDEN_KEY_CHARS = (":", COMMENT_MARKER, "\n", "\r")
_FORBIDDEN_VALUE_CHARS = (":", COMMENT_MARKER, "\n", "\r")


class Config:
    """An indentation-structured config document with comment preservation.

    Args:
        options: Reading and writing settings. Defaults to `ConfigOptions()`.
    """

    def __init__(self, options: Optional[ConfigOptions] = None):
        self.options = options or ConfigOptions()
        self._spaces_per_indent = self.options.spaces_per_indent
        self._root: KeyNode = new_root()
        self._cache: Dict[str, str] = {}

    def __repr__(self) -> str:
        return f"Config(size={len(self._cache)}, spaces_per_indent={self._spaces_per_indent})"

    @property
    def spaces_per_indent(self) -> int:
        """How many spaces each nesting level adds when key lines are written."""
        return self._spaces_per_indent

    @spaces_per_indent.setter
    def spaces_per_indent(self, value: int):
        self._spaces_per_indent = validate_spaces_per_indent(value)

    @property
    def root(self) -> KeyNode:
        """The root node of the document tree. Treat it as read-only."""
        return self._root

    def _debug(self, message: str):
        if self.options.debug:
            print(f"--- DEBUG: {message}", file=sys.stderr)

    # --- Loading and saving ---

    def load(self, path: PathLike) -> None:
        """Loads a config file, dropping all previous keys, values and comments.

        Args:
            path: Path of the file to read.

        Raises:
            UsageError: If `path` is None or empty.
            NotFoundError: If no file exists at `path`.
            ConfigIOError: If the file cannot be read or decoded.
            StructuralError: If the file is not a valid config document. The
                previous contents of this `Config` are kept in that case.
        """
        if path is None or path == "":
            raise UsageError("File name must not be empty or None")
        path = os.fspath(path)
        if not os.path.isfile(path):
            raise NotFoundError(f"File {path} could not be found", path=path)

        try:
            with open(path, 'r', encoding=self.options.encoding) as f:
                text = f.read()
        except (OSError, UnicodeError) as e:
            raise ConfigIOError(f"Could not read config file '{path}': {e}", path=path) from e

        self._load_text(text, source=f"'{path}'")

    def load_stream(self, stream: IO) -> None:
        """Loads a config document from an open text or binary stream.

        The stream is read to its end but not closed; it belongs to the
        caller. Byte streams are decoded with `options.encoding`.

        Raises:
            UsageError: If `stream` is None.
            ConfigIOError: If the stream cannot be read or decoded.
            StructuralError: If the content is not a valid config document.
        """
        if stream is None:
            raise UsageError("Stream must not be None")
        name = getattr(stream, "name", None)
        try:
            data = stream.read()
            if isinstance(data, bytes):
                data = data.decode(self.options.encoding)
        except (OSError, UnicodeError) as e:
            raise ConfigIOError(f"Could not read config stream: {e}", path=name) from e

        self._load_text(data, source=f"'{name}'" if name else "stream")

    def load_from_text(self, text: str) -> None:
        """Loads a config document from a string, e.g. one made by `save_to_text`.

        Raises:
            UsageError: If `text` is None or empty.
            StructuralError: If `text` is not a valid config document.
        """
        if text is None or text == "":
            raise UsageError("Config text must not be empty or None")
        self._load_text(text, source="text")

    def _load_text(self, text: str, source: str):
        try:
            result = deserialize(text)
        except StructuralError as e:
            self._debug(f"Failed to parse {source}: {e}")
            raise

        self._root = result.root
        self._cache = result.cache
        if self.options.detect_indent and result.indent_step:
            self._spaces_per_indent = result.indent_step
        self._debug(f"Loaded {len(self._cache)} keys from {source}")

    def save_to_text(self) -> str:
        """Generates the text that reconstructs the current state of the config."""
        return serialize(self._root, self._spaces_per_indent)

    def save(self, target: Union[PathLike, IO[str]]) -> None:
        """Writes the config to a file or a writable text stream.

        A file is created if it does not exist, together with any missing
        parent directories, and overwritten if it does.

        Raises:
            UsageError: If `target` is None or empty.
            ConfigIOError: If the file or stream cannot be written.
        """
        if target is None or target == "":
            raise UsageError("Save target must not be empty or None")
        text = self.save_to_text()

        if hasattr(target, "write"):
            try:
                target.write(text)
            except OSError as e:
                raise ConfigIOError(f"Could not write config stream: {e}") from e
            return

        path = os.fspath(target)
        try:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(path, 'w', encoding=self.options.encoding) as f:
                f.write(text)
        except OSError as e:
            raise ConfigIOError(f"Could not write config file '{path}': {e}", path=path) from e
        self._debug(f"Saved {len(self._cache)} keys to '{path}'")

    # --- Read accessors ---

    def get(self, path: str) -> Optional[str]:
        """Returns the value at a dotted path, or None if there is none."""
        if not isinstance(path, str):
            return None
        return self._cache.get(path)

    def get_or_default(self, path: str, default: Optional[str]) -> Optional[str]:
        value = self.get(path)
        return default if value is None else value

    def contains_key(self, path: str) -> bool:
        return isinstance(path, str) and path in self._cache

    def contains_value(self, value: str) -> bool:
        return value in self._cache.values()

    def size(self) -> int:
        """The number of key-value pairs currently stored."""
        return len(self._cache)

    def is_empty(self) -> bool:
        return not self._cache

    def keys(self) -> List[str]:
        return list(self._cache)

    def values(self) -> List[str]:
        return list(self._cache.values())

    def entries(self) -> List[Tuple[str, str]]:
        return list(self._cache.items())

    def snapshot(self) -> Mapping[str, str]:
        """Returns a read-only copy of the flat index."""
        return MappingProxyType(dict(self._cache))

    def get_node(self, path: str) -> Optional[KeyNode]:
        """Returns the key node at a dotted path, with or without a value."""
        if not path or not isinstance(path, str):
            return None
        return self._walk(path)[1]

    def _walk(self, path: str) -> Tuple[KeyNode, Optional[KeyNode]]:
        """Follows a dotted path from the root.

        Returns:
            A `(parent, node)` tuple. `node` is None if a segment is missing,
            in which case `parent` is the last node that was found.
        """
        parent = node = self._root
        for segment in path.split("."):
            parent = node
            node = node.child(segment)
            if node is None:
                return parent, None
        return parent, node

    # --- Mutations ---

    def put(self, path: str, value: Optional[str], comment: Optional[str] = None) -> Optional[str]:
        """Sets the value at a dotted path, creating missing sections.

        Missing path segments are created as empty section keys at the end of
        their parent. A None or empty `path` is ignored.

        Args:
            path: Dotted key path, e.g. `"server.port"`.
            value: The new value. None clears the value like `remove`.
            comment: Optional trailing comment for the key's line. A `#` is
                added in front if the text does not start with one.

        Returns:
            The value previously stored at `path`, or None.

        Raises:
            UsageError: If a path segment or the value could not be written
                as valid config text.
        """
        if not path or not isinstance(path, str):
            return None
        if value is None:
            return self.remove(path)

        segments = _split_path(path)
        _check_value(value)
        if comment:
            comment = _normalize_comment(comment)

        node = self._root
        for segment in segments:
            child = node.child(segment)
            if child is None:
                child = KeyNode(segment, colon_space=0)
                node.add_child(child)
            node = child

        previous = node.value
        if previous is None and node.colon_space == 0:
            node.colon_space = 1
        node.value = value
        if comment:
            node.comment = comment
        self._cache[path] = value
        return previous

    def put_all(self, entries: Union[Mapping[str, str], Iterable[Tuple[str, str]]]) -> None:
        """Puts every key-value pair of a mapping or of an iterable of pairs."""
        items = entries.items() if isinstance(entries, Mapping) else entries
        for path, value in items:
            self.put(path, value)

    def remove(self, path: str) -> Optional[str]:
        """Clears the value at a path while keeping the key and its children.

        The key stays in the document as an empty section, and values nested
        below it are untouched. Use `kill` to drop the whole subtree.

        Returns:
            The value previously stored at `path`, or None.
        """
        node = self.get_node(path)
        if node is None:
            return None
        previous = node.value
        node.value = None
        self._cache.pop(path, None)
        return previous

    def kill(self, path: str) -> Optional[str]:
        """Removes the key at a path together with all keys nested below it.

        Under most circumstances `remove` is the operation you want.

        Returns:
            The value previously stored at `path`, or None.
        """
        if not path or not isinstance(path, str):
            return None
        parent, node = self._walk(path)
        if node is None:
            return None
        previous = node.value
        parent.detach_child(node)
        self._purge(node, path)
        return previous

    def _purge(self, node: KeyNode, full_path: str):
        """Drops the index entries of a detached node and its descendants."""
        self._cache.pop(full_path, None)
        for child in list(node.key_children.values()):
            node.detach_child(child)
            self._purge(child, f"{full_path}.{child.key}")

    def add_comment(self, text: str, indent_level: int = 0) -> None:
        """Adds a standalone comment at the end of the document.

        The `#` marker is added automatically; any space after it must be
        part of `text`. Each line of a multi-line `text` becomes its own
        comment line.

        Args:
            text: The comment text.
            indent_level: Number of nesting levels to indent the comment by.
        """
        if text is None:
            raise UsageError("Comment text must not be None")
        prefix = " " * (_check_level(indent_level) * self._spaces_per_indent) + COMMENT_MARKER
        lines = text.splitlines() or [""]
        self._root.add_child(CommentNode("\n".join(prefix + line for line in lines)))

    def add_blank_lines(self, count: int, indent_level: int = 0) -> None:
        """Adds `count` blank lines at the end of the document.

        Args:
            count: Number of blank lines, at least 1.
            indent_level: Number of nesting levels worth of spaces each blank
                line should contain.
        """
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise UsageError(f"Blank line count must be a positive integer, got {count!r}")
        width = _check_level(indent_level) * self._spaces_per_indent
        self._root.add_child(BlankNode(count=count, indent=width))

    def clear(self) -> None:
        """Removes all keys, values, comments and blank lines."""
        self._root.children.clear()
        self._root.key_children.clear()
        self._cache.clear()


def _split_path(path: str) -> List[str]:
    """Splits a dotted path for writing, rejecting segments that are not valid keys."""
    segments = path.split(".")
    for segment in segments:
        if not segment:
            raise UsageError(f"Key path '{path}' contains an empty segment")
        if segment != segment.strip() or any(c in segment for c in _FORBIDDEN_KEY_CHARS):
            raise UsageError(f"Key '{segment}' in path '{path}' cannot be written to a config file")
    return segments


def _check_value(value: str):
    if not isinstance(value, str):
        raise UsageError(f"Values must be strings, got {type(value).__name__}")
    if not value:
        raise UsageError("Values must not be empty; use remove() to clear a value")
    if value != value.strip() or any(c in value for c in _FORBIDDEN_VALUE_CHARS):
        raise UsageError(f"Value {value!r} cannot be written to a config file")


def _normalize_comment(comment: str) -> str:
    if "\n" in comment or "\r" in comment:
        raise UsageError("Trailing comments must fit on one line")
    if comment.lstrip(" ").startswith(COMMENT_MARKER):
        return comment if comment.startswith(" ") else " " + comment
    return f" {COMMENT_MARKER} {comment}"


def _check_level(indent_level: int) -> int:
    if isinstance(indent_level, bool) or not isinstance(indent_level, int) or indent_level < 0:
        raise UsageError(f"Indent level must be a non-negative integer, got {indent_level!r}")
    return indent_level

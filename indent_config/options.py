from dataclasses import dataclass

from .exceptions import UsageError


@dataclass
class ConfigOptions:
    """A data class to hold the settings that control reading and writing.

    Attributes:
        spaces_per_indent: Number of spaces each nesting level adds when key
            lines are written. Parsing always reads the actual indent widths,
            so this only affects serialization.
        encoding: Text encoding used for files and byte streams.
        detect_indent: If True, loading a document replaces
            `spaces_per_indent` with the first nesting step found in it, so
            files indented by 4 spaces are written back unchanged.
        debug: If True, prints diagnostic messages about loads and saves to
            stderr.
    """
    spaces_per_indent: int = 2
    encoding: str = "utf-8"
    detect_indent: bool = False
    debug: bool = False

    def __post_init__(self):
        validate_spaces_per_indent(self.spaces_per_indent)
        if not self.encoding:
            raise UsageError("Encoding must not be empty or None")


def validate_spaces_per_indent(value: int) -> int:
    """Checks that an indent width is a positive integer and returns it.

    A width of 0 would write nested keys at column 0, where they read back as
    top-level keys.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise UsageError(f"Spaces per indent must be a positive integer, got {value!r}")
    return value

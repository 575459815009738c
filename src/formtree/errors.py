"""Exception classes and error results for formtree.

Two kinds of failure live here:

- Exceptions (``FormtreeError`` and subclasses) for conditions that are raised
  and caught inside the package, or that signal a bug in a collaborator.
- ``ParseError``, a plain result value returned (never raised) when source text
  cannot be read. Downstream functions treat it as "no result".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeGuard


class FormtreeError(Exception):
    """Base exception for all formtree errors.

    Subclass this for specific error categories.
    """

    pass


class ReaderError(FormtreeError):
    """Error while reading source text into a raw syntax tree.

    Raised by the lexer, the parser and literal reading. Public entry points
    catch it and return a ``ParseError`` instead.
    """

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize reader error with optional location.

        Args:
            message: Error description
            lineno: Line number where error occurred (1-indexed)
            col_offset: Column offset where error occurred (1-indexed)
            source_file: Path to source file (optional)
        """
        self.message = message
        self.lineno = lineno
        self.col_offset = col_offset
        self.source_file = source_file

        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
            if col_offset is not None:
                location += f"{col_offset}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message}")


class ConversionError(FormtreeError):
    """Raw syntax tree has a shape the converter cannot accept.

    This points at a bug in the raw-tree producer, not at bad source text,
    so it propagates instead of becoming a ``ParseError``.
    """

    def __init__(self, tag: str, message: str) -> None:
        self.tag = tag
        super().__init__(f"Raw node {tag!r}: {message}")


class CodecError(FormtreeError, ValueError):
    """Portable (JSON) form does not describe a valid node tree."""

    pass


@dataclass(frozen=True, slots=True)
class ParseError:
    """Result of a failed parse.

    Not an exception: returned in place of a node tree so callers can branch
    on it without try/except.

    Attributes:
        message: Human-readable reason, including line/column when known
        input: The original input (source text, or the path for unreadable files)

    """

    message: str
    input: str

    def __str__(self) -> str:
        return self.message


def is_error(result: Any) -> TypeGuard[ParseError]:
    """Return True if ``result`` is a ``ParseError``."""
    return isinstance(result, ParseError)


__all__ = [
    "CodecError",
    "ConversionError",
    "FormtreeError",
    "ParseError",
    "ReaderError",
    "is_error",
]

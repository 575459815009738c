"""Token and TokenType definitions for the formtree lexer.

The lexer produces a stream of Token objects that the parser consumes.
Each Token has a type, value, and source location (lazy). Tokens cover the
source completely: concatenating every token value reproduces the input.

Thread Safety:
Token is frozen (immutable) and safe to share across threads.
TokenType is an enum (inherently immutable).

Performance Note:
Token stores raw coordinates and lazily creates SourceLocation on demand.
Most tokens never have their location read.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from formtree.location import SourceLocation


class TokenType(Enum):
    """Token types produced by the lexer.

    Organized by category:
    - Trivia (whitespace, newlines, comments)
    - Delimiters
    - Prefix markers (consume the following form)
    - Atoms

    """

    EOF = auto()

    # Trivia
    WHITESPACE = auto()  # spaces, tabs, commas
    NEWLINE = auto()  # run of \n / \r
    COMMENT = auto()  # ; to end of line (newline included), or #!

    # Delimiters
    LIST_OPEN = auto()  # (
    VECTOR_OPEN = auto()  # [
    MAP_OPEN = auto()  # {
    SET_OPEN = auto()  # #{
    FN_OPEN = auto()  # #(
    CLOSE = auto()  # ) ] }

    # Prefix markers
    QUOTE = auto()  # '
    SYNTAX_QUOTE = auto()  # `
    UNQUOTE = auto()  # ~
    UNQUOTE_SPLICING = auto()  # ~@
    DEREF = auto()  # @
    META = auto()  # ^
    OLD_META = auto()  # #^
    VAR_QUOTE = auto()  # #'
    DISCARD = auto()  # #_
    EVAL = auto()  # #=
    READER_CONDITIONAL = auto()  # #? or #?@
    TAGGED_LITERAL = auto()  # #inst, #uuid, #my/tag
    NAMESPACED_MAP = auto()  # #:ns or #::ns

    # Atoms
    ATOM = auto()  # symbol, keyword, number, ##Inf
    STRING = auto()  # "..."
    CHAR = auto()  # \a
    REGEX = auto()  # #"..."


@dataclass(frozen=True, slots=True)
class Token:
    """A token produced by the lexer.

    Attributes:
        type: The token type (from TokenType enum)
        value: The raw string value from source
        _lineno: Start line number (1-indexed)
        _col: Start column offset (1-indexed)
        _start_offset: Absolute start position in source
        _end_offset: Absolute end position in source
        _source_file: Optional source file path

    Performance:
        SourceLocation is created lazily on first access to `.location`.

    Thread Safety:
        Frozen dataclass ensures immutability for safe sharing.
        The lazy cache uses idempotent write (safe for concurrent access).

    """

    type: TokenType
    value: str
    _lineno: int
    _col: int
    _start_offset: int
    _end_offset: int
    _source_file: str | None = None
    # Cache field - excluded from repr and comparison
    _location_cache: SourceLocation | None = field(
        default=None, repr=False, compare=False, hash=False
    )

    @property
    def location(self) -> SourceLocation:
        """Get source location (lazily created and cached).

        Returns:
            SourceLocation object for this token.
        """
        if self._location_cache is not None:
            return self._location_cache

        # Import here to avoid circular import at module load
        from formtree.location import SourceLocation

        loc = SourceLocation(
            lineno=self._lineno,
            col_offset=self._col,
            offset=self._start_offset,
            end_offset=self._end_offset,
            source_file=self._source_file,
        )
        # Safe mutation of frozen dataclass cache field (idempotent write)
        object.__setattr__(self, "_location_cache", loc)
        return loc

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        val = self.value
        if len(val) > 20:
            val = val[:17] + "..."
        return f"Token({self.type.name}, {val!r}, {self._lineno}:{self._col})"

    @property
    def lineno(self) -> int:
        """Line number (convenience accessor)."""
        return self._lineno

    @property
    def col(self) -> int:
        """Column offset (convenience accessor)."""
        return self._col

    @property
    def is_trivia(self) -> bool:
        """Whitespace, newline and comment tokens carry no syntax."""
        return self.type in TRIVIA_TYPES


TRIVIA_TYPES: frozenset[TokenType] = frozenset(
    {TokenType.WHITESPACE, TokenType.NEWLINE, TokenType.COMMENT}
)

# Prefix markers and how many forms each one consumes.
PREFIX_ARITY: dict[TokenType, int] = {
    TokenType.QUOTE: 1,
    TokenType.SYNTAX_QUOTE: 1,
    TokenType.UNQUOTE: 1,
    TokenType.UNQUOTE_SPLICING: 1,
    TokenType.DEREF: 1,
    TokenType.META: 2,
    TokenType.OLD_META: 2,
    TokenType.VAR_QUOTE: 1,
    TokenType.DISCARD: 1,
    TokenType.EVAL: 1,
    TokenType.READER_CONDITIONAL: 1,
    TokenType.TAGGED_LITERAL: 1,
    TokenType.NAMESPACED_MAP: 1,
}

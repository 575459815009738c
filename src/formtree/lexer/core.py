"""Formatting-preserving lexer with O(n) guaranteed performance.

Every character of the source belongs to exactly one token, trivia included,
so joining the token values reproduces the input byte for byte. Each scan
step consumes at least one character, which guarantees forward progress.

Thread Safety:
Lexer instances are single-use. Create one per source string.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from collections.abc import Iterator

from formtree.charsets import (
    CLOSE_DELIMITERS,
    NEWLINE_CHARS,
    OPEN_DELIMITERS,
    is_atom_char,
    is_whitespace,
)
from formtree.errors import ReaderError
from formtree.lexer.scanners import DispatchScannerMixin, LiteralScannerMixin
from formtree.tokens import Token, TokenType

_OPEN_TYPES: dict[str, TokenType] = {
    "(": TokenType.LIST_OPEN,
    "[": TokenType.VECTOR_OPEN,
    "{": TokenType.MAP_OPEN,
}

_SINGLE_CHAR_PREFIXES: dict[str, TokenType] = {
    "'": TokenType.QUOTE,
    "`": TokenType.SYNTAX_QUOTE,
    "@": TokenType.DEREF,
    "^": TokenType.META,
}


class Lexer(
    LiteralScannerMixin,
    DispatchScannerMixin,
):
    """Tokenizer for Clojure source text.

    Usage:
            >>> lexer = Lexer("(+ 1 2)")
            >>> for token in lexer.tokenize():
            ...     print(token)
        Token(LIST_OPEN, '(', 1:1)
        Token(ATOM, '+', 1:2)
        Token(WHITESPACE, ' ', 1:3)
        Token(ATOM, '1', 1:4)
        Token(WHITESPACE, ' ', 1:5)
        Token(ATOM, '2', 1:6)
        Token(CLOSE, ')', 1:7)
        Token(EOF, '', 1:8)

    Thread Safety:
        Lexer instances are single-use. Create one per source string.

    """

    __slots__ = (
        "_source",
        "_source_len",
        "_pos",
        "_lineno",
        "_col",
        "_source_file",
    )

    def __init__(self, source: str, source_file: str | None = None) -> None:
        """Initialize lexer with source text.

        Args:
            source: Clojure source text
            source_file: Optional source file path for error messages
        """
        self._source = source
        self._source_len = len(source)
        self._pos = 0
        self._lineno = 1
        self._col = 1
        self._source_file = source_file

    def tokenize(self) -> Iterator[Token]:
        """Tokenize source into token stream.

        Yields:
            Token objects one at a time, ending with a single EOF token.

        Raises:
            ReaderError: On unterminated strings, regexes and dispatch forms.

        Complexity: O(n) where n = len(source)
        """
        while self._pos < self._source_len:
            yield self._scan_token()
        yield self._emit(TokenType.EOF, self._pos)

    def _scan_token(self) -> Token:
        """Scan exactly one token starting at the current position."""
        source = self._source
        pos = self._pos
        char = source[pos]

        if char in NEWLINE_CHARS:
            return self._emit(TokenType.NEWLINE, self._run_end(pos, NEWLINE_CHARS.__contains__))
        if is_whitespace(char):
            return self._emit(TokenType.WHITESPACE, self._run_end(pos, is_whitespace))
        if char == ";":
            return self._emit(TokenType.COMMENT, self._line_end(pos))
        if char in OPEN_DELIMITERS:
            return self._emit(_OPEN_TYPES[char], pos + 1)
        if char in CLOSE_DELIMITERS:
            return self._emit(TokenType.CLOSE, pos + 1)
        if char == '"':
            return self._emit(TokenType.STRING, self._string_end(pos + 1))
        if char == "\\":
            return self._emit(TokenType.CHAR, self._char_end(pos))
        if char == "#":
            return self._scan_dispatch()
        if char == "~":
            if source.startswith("@", pos + 1):
                return self._emit(TokenType.UNQUOTE_SPLICING, pos + 2)
            return self._emit(TokenType.UNQUOTE, pos + 1)
        prefix = _SINGLE_CHAR_PREFIXES.get(char)
        if prefix is not None:
            return self._emit(prefix, pos + 1)
        return self._emit(TokenType.ATOM, self._run_end(pos + 1, is_atom_char))

    # =========================================================================
    # Window navigation helpers
    # =========================================================================

    def _run_end(self, pos: int, accept) -> int:  # type: ignore[no-untyped-def]
        """Return the end of the run of characters accepted by ``accept``."""
        source = self._source
        end = self._source_len
        while pos < end and accept(source[pos]):
            pos += 1
        return pos

    def _line_end(self, pos: int) -> int:
        """Return the position just past the line terminator (or EOF).

        A ``\\r\\n`` pair counts as one terminator.
        """
        source = self._source
        end = self._source_len
        while pos < end:
            char = source[pos]
            if char == "\n":
                return pos + 1
            if char == "\r":
                return pos + 2 if source.startswith("\n", pos + 1) else pos + 1
            pos += 1
        return end

    def _emit(self, token_type: TokenType, end: int) -> Token:
        """Create a token for source[pos:end] and commit the position."""
        start = self._pos
        value = self._source[start:end]
        token = Token(
            type=token_type,
            value=value,
            _lineno=self._lineno,
            _col=self._col,
            _start_offset=start,
            _end_offset=end,
            _source_file=self._source_file,
        )
        newlines = value.count("\n")
        if newlines:
            self._lineno += newlines
            self._col = end - (start + value.rfind("\n"))
        else:
            self._col += end - start
        self._pos = end
        return token

    def _error(self, message: str) -> ReaderError:
        """Build a ReaderError located at the start of the current token."""
        return ReaderError(
            message,
            lineno=self._lineno,
            col_offset=self._col,
            source_file=self._source_file,
        )

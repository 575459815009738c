"""Scanner mixin for ``#`` dispatch forms."""

from __future__ import annotations

from typing import TYPE_CHECKING

from formtree.charsets import is_atom_char
from formtree.tokens import TokenType

if TYPE_CHECKING:
    from formtree.errors import ReaderError
    from formtree.tokens import Token

# Two-character dispatch markers that map directly onto a token type.
_DISPATCH_TYPES: dict[str, TokenType] = {
    "{": TokenType.SET_OPEN,
    "(": TokenType.FN_OPEN,
    "'": TokenType.VAR_QUOTE,
    "_": TokenType.DISCARD,
    "=": TokenType.EVAL,
    "^": TokenType.OLD_META,
}


class DispatchScannerMixin:
    """Mixin scanning everything that starts with ``#``.

    Covers sets, anonymous functions, regexes, var quotes, discards, reader
    conditionals, namespaced maps, symbolic values, tagged literals and
    ``#!`` line comments.

    """

    _source: str
    _source_len: int
    _pos: int

    def _emit(self, token_type: TokenType, end: int) -> Token:
        """Create a token and commit the position."""
        raise NotImplementedError

    def _error(self, message: str) -> ReaderError:
        """Build a located reader error."""
        raise NotImplementedError

    def _run_end(self, pos: int, accept) -> int:  # type: ignore[no-untyped-def]
        """Return the end of an accepted character run."""
        raise NotImplementedError

    def _line_end(self, pos: int) -> int:
        """Return the position just past the line terminator."""
        raise NotImplementedError

    def _string_end(self, pos: int, *, what: str = "string") -> int:
        """Return the position just past a closing quote."""
        raise NotImplementedError

    def _scan_dispatch(self) -> Token:
        """Scan a token starting with ``#``."""
        source = self._source
        pos = self._pos
        if pos + 1 >= self._source_len:
            raise self._error("EOF while reading dispatch macro")
        char = source[pos + 1]

        token_type = _DISPATCH_TYPES.get(char)
        if token_type is not None:
            return self._emit(token_type, pos + 2)
        if char == '"':
            return self._emit(TokenType.REGEX, self._string_end(pos + 2, what="regex"))
        if char == "?":
            end = pos + 3 if source.startswith("@", pos + 2) else pos + 2
            return self._emit(TokenType.READER_CONDITIONAL, end)
        if char == ":":
            return self._emit(TokenType.NAMESPACED_MAP, self._run_end(pos + 2, is_atom_char))
        if char == "#":
            return self._emit(TokenType.ATOM, self._run_end(pos + 2, is_atom_char))
        if char == "!":
            return self._emit(TokenType.COMMENT, self._line_end(pos))
        if char.isalpha():
            return self._emit(TokenType.TAGGED_LITERAL, self._run_end(pos + 2, is_atom_char))
        raise self._error(f"No dispatch macro for: {char}")

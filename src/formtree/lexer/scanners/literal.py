"""Scanner mixin for strings, regexes and character literals."""

from __future__ import annotations

from typing import TYPE_CHECKING

from formtree.charsets import is_atom_char

if TYPE_CHECKING:
    from formtree.errors import ReaderError


class LiteralScannerMixin:
    """Mixin locating the end of quoted and backslash literals.

    Only finds token boundaries; decoding escapes is left to
    ``formtree.literals`` so the raw token text stays verbatim.

    """

    _source: str
    _source_len: int

    def _error(self, message: str) -> ReaderError:
        """Build a located reader error."""
        raise NotImplementedError

    def _string_end(self, pos: int, *, what: str = "string") -> int:
        """Return the position just past the closing quote.

        Args:
            pos: Position of the first character after the opening quote.
            what: Literal kind for the error message.

        Raises:
            ReaderError: If the source ends before the closing quote.
        """
        source = self._source
        end = self._source_len
        while pos < end:
            char = source[pos]
            if char == "\\":
                pos += 2
                continue
            if char == '"':
                return pos + 1
            pos += 1
        raise self._error(f"EOF while reading {what}")

    def _char_end(self, pos: int) -> int:
        """Return the end of a character literal starting at a backslash.

        The character right after the backslash is always taken, even a
        delimiter or a space, and any atom characters after it extend the
        literal. So ``\\newline`` is one token, and so is ``\\ x``, which then
        fails to read as a character; ``\\ )`` lexes as ``\\ `` then ``)``.
        """
        if pos + 1 >= self._source_len:
            raise self._error("EOF while reading character")
        source = self._source
        end = self._source_len
        pos += 2
        while pos < end and is_atom_char(source[pos]):
            pos += 1
        return pos

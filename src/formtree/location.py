"""Source location tracking for reader errors and raw syntax nodes.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Position of a raw syntax node or token in the source text.

    Line and column are 1-indexed; offsets are 0-indexed positions into the
    source string (``end_offset`` is exclusive).

    Examples:
            >>> loc = SourceLocation(lineno=1, col_offset=1)
            >>> str(loc)
            '1:1'

            >>> loc = SourceLocation(3, 5, source_file="src/app/core.clj")
            >>> str(loc)
            'src/app/core.clj:3:5'

    """

    lineno: int
    col_offset: int
    offset: int = 0
    end_offset: int = 0
    source_file: str | None = None

    def __str__(self) -> str:
        """Format location for error messages.

        Returns:
            Formatted string like "core.clj:10:5" or "10:5"
        """
        if self.source_file:
            return f"{self.source_file}:{self.lineno}:{self.col_offset}"
        return f"{self.lineno}:{self.col_offset}"

"""Character sets for O(1) classification in the lexer.

All sets are frozensets for:
- O(1) membership testing (vs O(n) for strings)
- Immutability (thread-safe)
- Module-level caching (no per-call allocation)

Usage:
    from formtree.charsets import TERMINATING_MACRO_CHARS

    if char in TERMINATING_MACRO_CHARS:  # O(1) lookup
        ...
"""

# Line terminators. Runs of these become NEWLINE tokens.
NEWLINE_CHARS: frozenset[str] = frozenset("\n\r")

# Commas are whitespace in Clojure.
INLINE_WHITESPACE_CHARS: frozenset[str] = frozenset(" \t\f\v,")

# Characters that end an atom (symbol, keyword, number) without whitespace.
# '#', '\'' and '%' are macro characters too, but may appear inside atoms.
TERMINATING_MACRO_CHARS: frozenset[str] = frozenset("\";@^`~()[]{}\\")

OPEN_DELIMITERS: dict[str, str] = {"(": ")", "[": "]", "{": "}"}

CLOSE_DELIMITERS: frozenset[str] = frozenset(")]}")


def is_whitespace(char: str) -> bool:
    """Check if character separates forms (whitespace or comma), newlines excluded."""
    return char in INLINE_WHITESPACE_CHARS or (char.isspace() and char not in NEWLINE_CHARS)


def is_atom_char(char: str) -> bool:
    """Check if character can continue an atom (symbol, keyword, number, char)."""
    return not (
        char in TERMINATING_MACRO_CHARS
        or char in NEWLINE_CHARS
        or is_whitespace(char)
    )

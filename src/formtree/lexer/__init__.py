"""Formatting-preserving lexer for Clojure source text.

Architecture:
lexer/
├── __init__.py          # Re-exports Lexer
├── core.py              # Lexer class (mixin composition + navigation)
└── scanners/            # Boundary scanners
    ├── literal.py       # Strings, regexes, character literals
    └── dispatch.py      # '#' dispatch forms

Usage:
    >>> from formtree.lexer import Lexer
    >>> [t.value for t in Lexer("(inc x)").tokenize()]
    ['(', 'inc', ' ', 'x', ')', '']

"""

from formtree.lexer.core import Lexer

__all__ = ["Lexer"]

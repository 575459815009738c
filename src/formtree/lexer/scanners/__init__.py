"""Scanner mixins for the lexer.

Each mixin locates token boundaries for one family of syntax; the Lexer
composes them and owns position bookkeeping.
"""

from formtree.lexer.scanners.dispatch import DispatchScannerMixin
from formtree.lexer.scanners.literal import LiteralScannerMixin

__all__ = [
    "DispatchScannerMixin",
    "LiteralScannerMixin",
]

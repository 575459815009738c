"""Scalar token values.

Tokens store their value, not their spelling. Numbers, strings, booleans and
nil map onto Python's own types (``int``, ``float``, ``Fraction``,
``Decimal``, ``str``, ``bool``, ``None``); the types below cover the scalars
Python has no native equivalent for.

Thread Safety:
All value types are frozen (immutable) and safe to share across threads.

"""

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction


@dataclass(frozen=True, slots=True)
class Symbol:
    """A symbol such as ``defn``, ``my.app`` or ``clojure.string/join``.

    ``name`` is the full spelling, namespace included.

    """

    name: str

    @property
    def namespace(self) -> str | None:
        """Namespace part of a qualified symbol, or None."""
        if self.name == "/" or "/" not in self.name:
            return None
        return self.name.split("/", 1)[0]

    @property
    def local_name(self) -> str:
        """Name without its namespace qualifier."""
        if self.name == "/" or "/" not in self.name:
            return self.name
        return self.name.split("/", 1)[1]

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Keyword:
    """A keyword such as ``:require``.

    ``name`` excludes the leading colon. Auto-resolved keywords keep their
    second colon: ``::local`` is ``Keyword(":local")``.

    """

    name: str

    def __str__(self) -> str:
        return f":{self.name}"


@dataclass(frozen=True, slots=True)
class Char:
    """A character literal such as ``\\a`` or ``\\newline``.

    ``value`` is the character itself (a one-character string).

    """

    value: str


@dataclass(frozen=True, slots=True)
class Regex:
    """A regex literal ``#"..."``; ``pattern`` is stored exactly as written."""

    pattern: str


type Scalar = (
    Symbol | Keyword | Char | Regex | str | int | float | Fraction | Decimal | bool | None
)


__all__ = [
    "Char",
    "Keyword",
    "Regex",
    "Scalar",
    "Symbol",
]

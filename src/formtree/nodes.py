"""Typed AST nodes for formtree.

All AST nodes are frozen dataclasses with slots for:
- Type safety: IDE autocomplete, catch errors at dev time
- Immutability: Safe sharing across threads
- Memory efficiency: __slots__ reduces memory footprint
- Pattern matching: match statements work naturally

Node Hierarchy:
Node (base)
├── Token               scalar leaf (symbol, keyword, number, string, ...)
├── Collections
│   ├── List            ( ... )
│   ├── Vector          [ ... ]
│   ├── MapLit          { ... }
│   ├── SetLit          #{ ... }
│   └── Forms           parse-result root
├── Metadata            ^meta value
├── ReaderMacro         'x  @x  #'x  #(...)  #inst "..."  ...
├── Whitespace          retained only on request
├── Comment             retained only on request
└── Unknown             raw tags the model does not cover

Formatting fields (``Token.text``, ``Metadata.lead``/``gap``,
``ReaderMacro.gap``) are excluded from comparison: two trees are equal when
their tags and contents are equal, however they were spelled.

Thread Safety:
All nodes are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from formtree.values import Scalar

# =============================================================================
# Base Node
# =============================================================================


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all AST nodes."""


# =============================================================================
# Leaves
# =============================================================================


@dataclass(frozen=True, slots=True, eq=False)
class Token(Node):
    """A scalar leaf.

    ``text`` is the literal source spelling, recorded only when whitespace is
    retained so the original spelling (``0x1F``, ``\\u0041``) survives
    reconstruction.

    Equality is type-aware: ``Token(1)``, ``Token(1.0)`` and ``Token(True)``
    are three different tokens, and ``Token(math.nan)`` equals itself.

    """

    value: Scalar
    text: str | None = field(default=None, compare=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        a, b = self.value, other.value
        if type(a) is not type(b):
            return False
        if isinstance(a, float) and math.isnan(a):
            return math.isnan(b)  # type: ignore[arg-type]
        return a == b

    def __hash__(self) -> int:
        value = self.value
        if isinstance(value, float) and math.isnan(value):
            return hash((float, "nan"))
        return hash((type(value), value))


@dataclass(frozen=True, slots=True)
class Whitespace(Node):
    """Whitespace between forms (spaces, commas, newlines).

    An empty ``text`` records that two forms were adjacent with no gap.

    """

    text: str


@dataclass(frozen=True, slots=True)
class Comment(Node):
    """Line comment, including the leading ``;`` and the trailing newline."""

    text: str


@dataclass(frozen=True, slots=True)
class Unknown(Node):
    """Raw node whose tag the model does not cover (``#_x``, ``#^x``, ...).

    Keeps the raw text so reconstruction stays lossless.

    """

    tag: str
    raw_text: str


# =============================================================================
# Collections
# =============================================================================


@dataclass(frozen=True, slots=True)
class List(Node):
    """List form: ``(f x y)``."""

    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class Vector(Node):
    """Vector literal: ``[x y]``."""

    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class MapLit(Node):
    """Map literal: ``{:a 1}``. Significant children alternate key/value."""

    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class SetLit(Node):
    """Set literal: ``#{1 2}``."""

    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class Forms(Node):
    """Sequence of top-level forms; only ever the root of a parse result."""

    children: tuple[Node, ...] = ()


# =============================================================================
# Wrappers
# =============================================================================


@dataclass(frozen=True, slots=True)
class Metadata(Node):
    """Metadata attached to a form: ``^{:private true} x``, ``^:dynamic *x*``.

    ``lead`` is the text between ``^`` and the metadata form, ``gap`` the
    text between the metadata and the value.

    """

    meta: Node
    value: Node
    lead: str = field(default="", compare=False)
    gap: str = field(default=" ", compare=False)


@dataclass(frozen=True, slots=True)
class ReaderMacro(Node):
    """A form wrapped by a reader-macro marker.

    Markers: ``'``, ``` ` ```, ``~``, ``~@``, ``@``, ``#'``, ``#`` (anonymous
    function, whose child is a List), ``#?``, ``#?@``, tagged literals
    (``#inst``) and namespaced maps (``#:ns``). ``gap`` is the text between
    the marker and the child.

    """

    marker: str
    child: Node
    gap: str = field(default="", compare=False)


# =============================================================================
# Type aliases
# =============================================================================

type Collection = List | Vector | MapLit | SetLit | Forms

COLLECTION_TYPES: tuple[type[Node], ...] = (List, Vector, MapLit, SetLit, Forms)


def is_collection(node: Node) -> bool:
    """Return True for List, Vector, MapLit, SetLit and Forms nodes."""
    return isinstance(node, COLLECTION_TYPES)


def significant_children(node: Collection) -> tuple[Node, ...]:
    """Children of a collection without Whitespace and Comment nodes."""
    return tuple(c for c in node.children if not isinstance(c, (Whitespace, Comment)))


__all__ = [
    "COLLECTION_TYPES",
    "Collection",
    "Comment",
    "Forms",
    "List",
    "MapLit",
    "Metadata",
    "Node",
    "ReaderMacro",
    "SetLit",
    "Token",
    "Unknown",
    "Vector",
    "Whitespace",
    "is_collection",
    "significant_children",
]

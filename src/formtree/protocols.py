"""Protocols for formtree.

Defines the contract between a raw-tree producer and the converter, so any
reader yielding nodes of this shape can feed ``formtree.converter.convert``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class RawNode(Protocol):
    """Node of a formatting-preserving syntax tree.

    Thread Safety:
        Implementations should be immutable. The converter only reads them.

    """

    @property
    def tag(self) -> str:
        """Raw node kind such as ``"list"``, ``"token"`` or ``"whitespace"``."""
        ...

    @property
    def text(self) -> str:
        """Literal source text spanned by the node."""
        ...

    @property
    def is_leaf(self) -> bool:
        """True if the node has no children."""
        ...

    @property
    def children(self) -> Sequence[RawNode]:
        """Child nodes in source order."""
        ...


__all__ = ["RawNode"]

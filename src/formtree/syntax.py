"""Raw syntax tree produced by the reader.

The raw tree is the lossless intermediate between source text and the typed
AST: every character of the source, trivia included, belongs to exactly one
node. Leaves carry their literal text; inner nodes carry the source slice
they span.

Raw tags:
    forms               whole-document root
    list vector map set collections
    fn                  anonymous function ``#(...)``
    token regex         atoms
    whitespace newline comment
    marker              the leading marker leaf of every prefix form
    quote syntax-quote unquote unquote-splicing deref var
    meta meta*          metadata (``^`` and the legacy ``#^``)
    uneval eval         ``#_`` discard and ``#=`` read-eval
    reader-macro        ``#?``, ``#?@`` and tagged literals
    namespaced-map      ``#:ns{...}``

Thread Safety:
SyntaxNode is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass

from formtree.location import SourceLocation


@dataclass(frozen=True, slots=True)
class SyntaxNode:
    """One node of the raw syntax tree.

    Attributes:
        tag: Raw node kind (see module docstring)
        text: Literal source text spanned by this node
        is_leaf: True for tokens, trivia and markers
        children: Child nodes in source order (empty for leaves)
        location: Where the node starts in source

    """

    tag: str
    text: str
    is_leaf: bool
    children: tuple[SyntaxNode, ...] = ()
    location: SourceLocation | None = None

    @property
    def significant_children(self) -> tuple[SyntaxNode, ...]:
        """Children that are neither whitespace, newlines nor comments."""
        return tuple(c for c in self.children if c.tag not in TRIVIA_TAGS)

    def __repr__(self) -> str:
        if self.is_leaf:
            return f"SyntaxNode({self.tag}, {self.text!r})"
        return f"SyntaxNode({self.tag}, {len(self.children)} children)"


TRIVIA_TAGS: frozenset[str] = frozenset({"whitespace", "newline", "comment"})


__all__ = ["TRIVIA_TAGS", "SyntaxNode"]

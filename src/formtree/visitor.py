"""Traversal primitives and visitor for formtree ASTs.

Provides pre-order and post-order rewriting walks, lazy iteration, search,
counting, a bottom-up fold, and a base visitor class with match-based
dispatch.

Scope:
``walk``, ``postwalk``, ``iter_nodes``, ``find_all`` and ``node_count``
descend into collection nodes only (List, Vector, MapLit, SetLit, Forms);
Metadata and ReaderMacro are treated as leaves. ``fold`` and ``BaseVisitor``
descend into every sub-node, wrapper contents included.

Example (rename a symbol everywhere):

    def rename(node: Node) -> Node:
        if node == Token(Symbol("old")):
            return Token(Symbol("new"))
        return node

    new_ast = walk(rename, ast)

Example (count keywords):

    keywords = find_all(
        lambda n: isinstance(n, Token) and isinstance(n.value, Keyword), ast
    )

Every traversal uses an explicit work stack, so nesting depth is bounded
only by memory.

Thread Safety:
    Visitors are NOT shared across threads by default (they may accumulate
    mutable state). Create a new visitor per thread. All functions are pure
    and safe to call from any thread.

"""

import dataclasses
from collections.abc import Callable, Iterator

from formtree.literals import render_value
from formtree.nodes import (
    Collection,
    Comment,
    Forms,
    List,
    MapLit,
    Metadata,
    Node,
    ReaderMacro,
    SetLit,
    Token,
    Unknown,
    Vector,
    Whitespace,
    is_collection,
)

# =============================================================================
# Structure
# =============================================================================


def subnodes(node: Node) -> tuple[Node, ...]:
    """Every direct sub-node, wrapper contents included."""
    match node:
        case List() | Vector() | MapLit() | SetLit() | Forms():
            return node.children
        case Metadata(meta=meta, value=value):
            return (meta, value)
        case ReaderMacro(child=child):
            return (child,)
        case Token() | Whitespace() | Comment() | Unknown():
            return ()
        case _:
            msg = f"Unknown node type: {type(node).__name__}"
            raise TypeError(msg)


def _rebuild(node: Collection, children: list[Node]) -> Node:
    """Return ``node`` with new children, reusing it when nothing changed."""
    if len(children) == len(node.children) and all(
        a is b for a, b in zip(children, node.children, strict=True)
    ):
        return node
    return dataclasses.replace(node, children=tuple(children))


# =============================================================================
# Rewriting walks
# =============================================================================


def walk(fn: Callable[[Node], Node], node: Node) -> Node:
    """Rewrite a tree top-down.

    ``fn`` is applied to ``node`` first; if the result is a collection, each
    of its children is walked (left to right) and the collection is rebuilt
    from the walked children. Replacement nodes returned by ``fn`` are
    descended into, not the originals.

    Args:
        fn: Function from a node to its (possibly identical) replacement.
        node: Root of the tree to walk.

    Returns:
        The rewritten tree. Unchanged subtrees are shared, not copied.

    """
    root = fn(node)
    if not is_collection(root):
        return root

    stack: list[tuple[Collection, list[Node]]] = [(root, [])]  # type: ignore[list-item]
    while True:
        parent, done = stack[-1]
        if len(done) < len(parent.children):
            child = fn(parent.children[len(done)])
            if is_collection(child):
                stack.append((child, []))  # type: ignore[arg-type]
            else:
                done.append(child)
            continue
        stack.pop()
        rebuilt = _rebuild(parent, done)
        if not stack:
            return rebuilt
        stack[-1][1].append(rebuilt)


def postwalk(fn: Callable[[Node], Node], node: Node) -> Node:
    """Rewrite a tree bottom-up.

    Children are rebuilt first, then ``fn`` is applied to the rebuilt node,
    so ``fn`` always sees already-rewritten children.

    """
    if not is_collection(node):
        return fn(node)

    stack: list[tuple[Collection, list[Node]]] = [(node, [])]  # type: ignore[list-item]
    while True:
        parent, done = stack[-1]
        if len(done) < len(parent.children):
            child = parent.children[len(done)]
            if is_collection(child):
                stack.append((child, []))  # type: ignore[arg-type]
            else:
                done.append(fn(child))
            continue
        stack.pop()
        result = fn(_rebuild(parent, done))
        if not stack:
            return result
        stack[-1][1].append(result)


# =============================================================================
# Inspection
# =============================================================================


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield ``node`` and every node below it through collections, pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if is_collection(current):
            stack.extend(reversed(current.children))  # type: ignore[attr-defined]


def find_all(predicate: Callable[[Node], bool], node: Node) -> list[Node]:
    """Every node matching ``predicate``, in pre-order visitation order."""
    return [n for n in iter_nodes(node) if predicate(n)]


def node_count(node: Node) -> int:
    """1 for a non-collection, 1 + the children's counts for a collection."""
    return sum(1 for _ in iter_nodes(node))


def fold[T](node: Node, combine: Callable[[Node, tuple[T, ...]], T]) -> T:
    """Reduce a tree bottom-up.

    ``combine(n, results)`` receives a node and the already-folded results of
    its sub-nodes (see ``subnodes``) and returns the node's result.

    Example:
        >>> depth = fold(ast, lambda n, rs: 1 + max(rs, default=0))

    """
    stack: list[tuple[Node, tuple[Node, ...], list[T]]] = [(node, subnodes(node), [])]
    while True:
        current, children, results = stack[-1]
        if len(results) < len(children):
            child = children[len(results)]
            stack.append((child, subnodes(child), []))
            continue
        stack.pop()
        value = combine(current, tuple(results))
        if not stack:
            return value
        stack[-1][2].append(value)


# =============================================================================
# Compact printed form
# =============================================================================

_COMPACT_TAGS: dict[type[Node], str] = {
    List: "list",
    Vector: "vec",
    MapLit: "map",
    SetLit: "set",
    Forms: "forms",
    Metadata: "meta",
    ReaderMacro: "reader-macro",
}


def _compact(node: Node, parts: tuple[str, ...]) -> str:
    match node:
        case Token(value=value):
            return f"[:tok {render_value(value)}]"
        case Whitespace(text=text):
            return f"[:ws {render_value(text)}]"
        case Comment(text=text):
            return f"[:comment {render_value(text)}]"
        case Unknown(tag=tag, raw_text=raw_text):
            return f"[:unknown :{tag} {render_value(raw_text)}]"
        case ReaderMacro(marker=marker):
            return f"[:reader-macro {render_value(marker)} {parts[0]}]"
        case _:
            return "[:" + " ".join((_COMPACT_TAGS[type(node)], *parts)) + "]"


def compact_repr(node: Node) -> str:
    """The compact printed form of a tree, e.g. ``[:list [:tok +] [:tok 1]]``."""
    return fold(node, _compact)


def serialized_size(node: Node) -> int:
    """Length of the compact printed form; for reporting only."""
    return len(compact_repr(node))


# =============================================================================
# Visitor
# =============================================================================


class BaseVisitor[T]:
    """Base AST visitor with match-based dispatch.

    Subclass and override ``visit_*`` methods for node types you care about.
    Unhandled node types fall through to ``visit_default``. Sub-nodes are
    visited automatically, in pre-order, after the root's ``visit_*`` call.

    Example:

        class SymbolCollector(BaseVisitor[None]):
            def __init__(self) -> None:
                self.symbols: list[Symbol] = []

            def visit_token(self, node: Token) -> None:
                if isinstance(node.value, Symbol):
                    self.symbols.append(node.value)

    """

    def visit(self, node: Node) -> T:
        """Dispatch on ``node`` and every node below it; return the root's result."""
        result = self._dispatch(node)
        stack = list(reversed(subnodes(node)))
        while stack:
            current = stack.pop()
            self._dispatch(current)
            stack.extend(reversed(subnodes(current)))
        return result

    def visit_default(self, node: Node) -> T:
        """Called for node types without a specific ``visit_*`` override."""
        return None  # type: ignore[return-value]

    def visit_token(self, node: Token) -> T:
        return self.visit_default(node)

    def visit_list(self, node: List) -> T:
        return self.visit_default(node)

    def visit_vector(self, node: Vector) -> T:
        return self.visit_default(node)

    def visit_map(self, node: MapLit) -> T:
        return self.visit_default(node)

    def visit_set(self, node: SetLit) -> T:
        return self.visit_default(node)

    def visit_forms(self, node: Forms) -> T:
        return self.visit_default(node)

    def visit_metadata(self, node: Metadata) -> T:
        return self.visit_default(node)

    def visit_reader_macro(self, node: ReaderMacro) -> T:
        return self.visit_default(node)

    def visit_whitespace(self, node: Whitespace) -> T:
        return self.visit_default(node)

    def visit_comment(self, node: Comment) -> T:
        return self.visit_default(node)

    def visit_unknown(self, node: Unknown) -> T:
        return self.visit_default(node)

    def _dispatch(self, node: Node) -> T:
        """Match-based dispatch to visit_* methods."""
        match node:
            case Token():
                return self.visit_token(node)
            case List():
                return self.visit_list(node)
            case Vector():
                return self.visit_vector(node)
            case MapLit():
                return self.visit_map(node)
            case SetLit():
                return self.visit_set(node)
            case Forms():
                return self.visit_forms(node)
            case Metadata():
                return self.visit_metadata(node)
            case ReaderMacro():
                return self.visit_reader_macro(node)
            case Whitespace():
                return self.visit_whitespace(node)
            case Comment():
                return self.visit_comment(node)
            case Unknown():
                return self.visit_unknown(node)
            case _:
                return self.visit_default(node)


__all__ = [
    "BaseVisitor",
    "compact_repr",
    "find_all",
    "fold",
    "iter_nodes",
    "node_count",
    "postwalk",
    "serialized_size",
    "subnodes",
    "walk",
]

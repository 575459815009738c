"""AST serialization: JSON round-trip for formtree AST nodes.

Converts typed AST nodes to/from JSON-compatible dicts. Useful for:
- Persisting parsed ASTs (change tracking, indexing)
- Caching parse results between runs
- Debugging and inspection

Every node dict carries a ``_type`` discriminator. Token values that JSON
cannot represent natively are tagged::

    Symbol("foo")      {"__type": "symbol",  "__value": "foo"}
    Keyword("as")      {"__type": "keyword", "__value": "as"}
    Char("a")          {"__type": "char",    "__value": "a"}
    Regex("\\d+")      {"__type": "regex",   "__value": "\\d+"}
    Fraction(1, 2)     {"__type": "ratio",   "__value": "1/2"}
    Decimal("1.5")     {"__type": "decimal", "__value": "1.5"}
    math.inf           {"__type": "float",   "__value": "Inf"}

Strings, integers, finite floats, booleans and nil stay as they are.
All output is deterministic (sorted keys) for cache-key stability.

Example:
    from formtree import parse
    from formtree.serialization import to_json, from_json

    ast = parse("(ns my.app (:require [clojure.string :as str]))")
    assert from_json(to_json(ast)) == ast

Thread Safety:
    All functions are pure. Safe to call from any thread.

"""

import json
import math
from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any

from formtree.errors import CodecError
from formtree.nodes import (
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
)
from formtree.protocols import RawNode
from formtree.values import Char, Keyword, Regex, Scalar, Symbol
from formtree.visitor import fold, serialized_size

# Registry of node type names to classes for deserialization
_NODE_TYPES: dict[str, type[Node]] = {
    "Token": Token,
    "List": List,
    "Vector": Vector,
    "MapLit": MapLit,
    "SetLit": SetLit,
    "Forms": Forms,
    "Metadata": Metadata,
    "ReaderMacro": ReaderMacro,
    "Whitespace": Whitespace,
    "Comment": Comment,
    "Unknown": Unknown,
}

_NON_FINITE: dict[str, float] = {"Inf": math.inf, "-Inf": -math.inf, "NaN": math.nan}


# =============================================================================
# Token values
# =============================================================================


def encode_value(value: Scalar) -> Any:
    """Encode a token value into its portable (JSON-compatible) form."""
    match value:
        case None | bool() | str() | int():
            return value
        case float():
            if math.isfinite(value):
                return value
            spelling = "NaN" if math.isnan(value) else ("Inf" if value > 0 else "-Inf")
            return _tagged("float", spelling)
        case Symbol(name=name):
            return _tagged("symbol", name)
        case Keyword(name=name):
            return _tagged("keyword", name)
        case Char(value=char):
            return _tagged("char", char)
        case Regex(pattern=pattern):
            return _tagged("regex", pattern)
        case Fraction():
            return _tagged("ratio", f"{value.numerator}/{value.denominator}")
        case Decimal():
            return _tagged("decimal", str(value))
        case _:
            msg = f"Not a token value: {value!r}"
            raise CodecError(msg)


def decode_value(data: Any) -> Scalar:
    """Decode a portable token value.

    Raises:
        CodecError: On unknown tags or malformed tagged values.

    """
    if data is None or isinstance(data, (bool, str, int, float)):
        return data
    if not isinstance(data, dict) or set(data) != {"__type", "__value"}:
        msg = f"Invalid token value: {data!r}"
        raise CodecError(msg)
    tag, raw = data["__type"], data["__value"]
    if not isinstance(raw, str):
        msg = f"Tagged value must be a string: {data!r}"
        raise CodecError(msg)
    match tag:
        case "symbol":
            return Symbol(raw)
        case "keyword":
            return Keyword(raw)
        case "char":
            if len(raw) != 1:
                msg = f"Char value must be one character: {raw!r}"
                raise CodecError(msg)
            return Char(raw)
        case "regex":
            return Regex(raw)
        case "ratio":
            try:
                return Fraction(raw)
            except (ValueError, ZeroDivisionError):
                raise CodecError(f"Invalid ratio: {raw!r}") from None
        case "decimal":
            try:
                return Decimal(raw)
            except InvalidOperation:
                raise CodecError(f"Invalid decimal: {raw!r}") from None
        case "float":
            if raw not in _NON_FINITE:
                msg = f"Invalid float value: {raw!r}"
                raise CodecError(msg)
            return _NON_FINITE[raw]
        case _:
            msg = f"Unknown value type: {tag!r}"
            raise CodecError(msg)


def _tagged(tag: str, value: str) -> dict[str, str]:
    return {"__type": tag, "__value": value}


# =============================================================================
# Nodes
# =============================================================================


def _encode_node(node: Node, encoded: tuple[dict[str, Any], ...]) -> dict[str, Any]:
    """Encode one node, given its already-encoded sub-nodes (see ``fold``)."""
    result: dict[str, Any] = {"_type": type(node).__name__}
    match node:
        case Token(value=value, text=text):
            result["value"] = encode_value(value)
            if text is not None:
                result["text"] = text
        case List() | Vector() | MapLit() | SetLit() | Forms():
            result["children"] = list(encoded)
        case Metadata(lead=lead, gap=gap):
            result.update(meta=encoded[0], value=encoded[1], lead=lead, gap=gap)
        case ReaderMacro(marker=marker, gap=gap):
            result.update(marker=marker, child=encoded[0], gap=gap)
        case _:
            for f in fields(node):
                result[f.name] = getattr(node, f.name)
    return result


def to_dict(node: Node) -> dict[str, Any]:
    """Convert an AST node to a JSON-compatible dict.

    Includes a ``_type`` discriminator field for deserialization.

    Args:
        node: Any formtree AST node.

    Returns:
        Dict with ``_type`` and all node fields.

    """
    return fold(node, _encode_node)


def from_dict(data: dict[str, Any]) -> Node:
    """Reconstruct a typed AST node from a dict.

    Uses the ``_type`` discriminator to determine the node class. Decoding
    runs on an explicit frame stack, so any tree ``to_dict`` produced
    decodes regardless of nesting depth.

    Args:
        data: Dict with ``_type`` and node fields (as produced by to_dict).

    Returns:
        Typed AST node (frozen dataclass).

    Raises:
        CodecError: If the dict does not describe a valid node.

    """
    stack: list[_DecodeFrame] = [_DecodeFrame.start(data)]
    while True:
        frame = stack[-1]
        if len(frame.results) < len(frame.pending):
            stack.append(_DecodeFrame.start(frame.pending[len(frame.results)]))
            continue
        stack.pop()
        node = frame.finish()
        if not stack:
            return node
        stack[-1].results.append(node)


_COLLECTION_TYPES: frozenset[type[Node]] = frozenset({List, Vector, MapLit, SetLit, Forms})

# Fields holding a single sub-node, in ``subnodes`` order
_NODE_FIELDS: dict[type[Node], tuple[str, ...]] = {
    Metadata: ("meta", "value"),
    ReaderMacro: ("child",),
}


@dataclass(slots=True)
class _DecodeFrame:
    """One node being decoded: its dict, pending sub-node dicts, decoded results."""

    data: dict[str, Any]
    node_cls: type[Node]
    node_fields: tuple[str, ...]
    pending: tuple[Any, ...]
    results: list[Node]

    @classmethod
    def start(cls, data: Any) -> "_DecodeFrame":
        if not isinstance(data, dict):
            msg = f"Serialized node must be a dict, got {type(data).__name__}"
            raise CodecError(msg)
        type_name = data.get("_type")
        if type_name is None:
            msg = "Missing '_type' field in serialized node"
            raise CodecError(msg)
        node_cls = _NODE_TYPES.get(type_name)
        if node_cls is None:
            msg = f"Unknown node type: {type_name!r}"
            raise CodecError(msg)

        node_fields: tuple[str, ...] = ()
        pending: tuple[Any, ...] = ()
        if node_cls in _COLLECTION_TYPES and "children" in data:
            children = data["children"]
            if not isinstance(children, list):
                msg = f"'children' must be a list, got {type(children).__name__}"
                raise CodecError(msg)
            pending = tuple(children)
        else:
            node_fields = tuple(name for name in _NODE_FIELDS.get(node_cls, ()) if name in data)
            pending = tuple(data[name] for name in node_fields)
        return cls(data, node_cls, node_fields, pending, [])

    def finish(self) -> Node:
        kwargs: dict[str, Any] = {}
        for f in fields(self.node_cls):
            if f.name not in self.data:
                continue
            if f.name == "children" and self.node_cls in _COLLECTION_TYPES:
                kwargs[f.name] = tuple(self.results)
            elif f.name in self.node_fields:
                kwargs[f.name] = self.results[self.node_fields.index(f.name)]
            elif self.node_cls is Token and f.name == "value":
                kwargs[f.name] = decode_value(self.data[f.name])
            else:
                kwargs[f.name] = _string_field(f.name, self.data[f.name])
        try:
            return self.node_cls(**kwargs)
        except TypeError as exc:
            raise CodecError(f"Invalid {self.node_cls.__name__} node: {exc}") from None


def _string_field(name: str, value: Any) -> str | None:
    if not isinstance(value, str | None):
        msg = f"Field {name!r} must be a string, got {type(value).__name__}"
        raise CodecError(msg)
    return value


def to_json(node: Node, *, indent: int | None = None) -> str:
    """Serialize an AST to a JSON string.

    Output is deterministic (sorted keys) for cache-key stability.

    The text goes through the stdlib ``json`` module, which recurses per
    nesting level. Trees nested deeper than the interpreter's recursion
    limit raise ``RecursionError`` here; ``to_dict``/``from_dict`` have no
    such limit.

    Args:
        node: Root node to serialize.
        indent: JSON indentation level (None for compact).

    """
    return json.dumps(to_dict(node), sort_keys=True, indent=indent)


def from_json(data: str) -> Node:
    """Deserialize an AST from a JSON string.

    Subject to the same ``json`` nesting limit as ``to_json``.

    Raises:
        CodecError: If the text is not JSON or does not describe a node.

    """
    try:
        raw = json.loads(data)
    except json.JSONDecodeError as exc:
        raise CodecError(f"Invalid JSON: {exc}") from None
    return from_dict(raw)


# =============================================================================
# Raw trees and size comparison
# =============================================================================


def syntax_to_dict(raw: RawNode) -> dict[str, Any]:
    """Verbose dict form of a raw syntax tree: tag, literal text, children.

    This is the storage format the compact AST replaces; see ``compare_sizes``.

    """
    root: dict[str, Any] = {"tag": raw.tag, "string": raw.text}
    stack: list[tuple[RawNode, dict[str, Any]]] = [(raw, root)]
    while stack:
        current, result = stack.pop()
        if current.is_leaf:
            continue
        children: list[dict[str, Any]] = []
        result["children"] = children
        for child in current.children:
            entry: dict[str, Any] = {"tag": child.tag, "string": child.text}
            children.append(entry)
            stack.append((child, entry))
    return root


def _verbose_size(raw: RawNode) -> int:
    """Length of ``json.dumps(syntax_to_dict(raw), sort_keys=True)``, without building it."""
    size = 0
    stack: list[RawNode] = [raw]
    while stack:
        current = stack.pop()
        # {"children": [...], "string": "...", "tag": "..."}
        size += len('{"string": , "tag": }')
        size += len(json.dumps(current.text)) + len(json.dumps(current.tag))
        if not current.is_leaf:
            children = tuple(current.children)
            size += len('"children": [], ')
            size += 2 * max(len(children) - 1, 0)
            stack.extend(children)
    return size


@dataclass(frozen=True, slots=True)
class SizeComparison:
    """Serialized size of a raw tree versus its compact AST.

    Attributes:
        verbose_size: Length of the verbose raw-tree JSON
        compact_size: Length of the compact printed AST
        reduction_bytes: verbose_size - compact_size
        reduction_percent: Reduction as a percentage of verbose_size
        compression_ratio: verbose_size / compact_size (0.0 if compact is empty)

    """

    verbose_size: int
    compact_size: int
    reduction_bytes: int
    reduction_percent: float
    compression_ratio: float


def compare_sizes(raw: RawNode, node: Node) -> SizeComparison:
    """Compare the verbose raw-tree form against the compact AST."""
    verbose_size = _verbose_size(raw)
    compact_size = serialized_size(node)
    reduction = verbose_size - compact_size
    return SizeComparison(
        verbose_size=verbose_size,
        compact_size=compact_size,
        reduction_bytes=reduction,
        reduction_percent=100.0 * reduction / verbose_size,
        compression_ratio=verbose_size / compact_size if compact_size else 0.0,
    )


__all__ = [
    "SizeComparison",
    "compare_sizes",
    "decode_value",
    "encode_value",
    "from_dict",
    "from_json",
    "syntax_to_dict",
    "to_dict",
    "to_json",
]

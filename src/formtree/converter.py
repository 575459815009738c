"""Conversion from the raw syntax tree to the typed AST.

The raw tree keeps every character of the source. Conversion drops what the
options say to drop, reads token text into values, and folds prefix forms
(``'x``, ``@x``, ``^:m x``, ``#(...)``) into ReaderMacro and Metadata nodes.

Trivia Rules (whitespace retained):
- whitespace and newline leaves become Whitespace nodes
- a dropped comment leaves its terminating newline behind as Whitespace
- two adjacent surviving forms get a zero-width ``Whitespace("")`` between
  them, so reconstruction knows no gap existed
- token spelling is recorded in ``Token.text``

Without whitespace, prefix gaps collapse to their canonical spacing, but a
retained comment inside a gap stays there.

Conversion walks the raw tree with an explicit stack, so nesting depth is
bounded only by memory.

Thread Safety:
Stateless aside from per-call locals. Safe to call from any thread.

"""

from __future__ import annotations

from dataclasses import dataclass, field

from formtree.config import ConvertOptions, get_convert_options
from formtree.errors import ConversionError, ParseError, ReaderError
from formtree.literals import read_regex, read_token
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
from formtree.parser import read
from formtree.protocols import RawNode
from formtree.syntax import TRIVIA_TAGS
from formtree.utils.logger import get_logger

logger = get_logger(__name__)

_COLLECTION_TYPES: dict[str, type[List | Vector | MapLit | SetLit | Forms]] = {
    "forms": Forms,
    "list": List,
    "vector": Vector,
    "map": MapLit,
    "set": SetLit,
    "fn": List,
}

# Marker used when a raw prefix node carries no marker leaf of its own.
_PREFIX_MARKERS: dict[str, str] = {
    "quote": "'",
    "syntax-quote": "`",
    "unquote": "~",
    "unquote-splicing": "~@",
    "deref": "@",
    "var": "#'",
}

# Tags whose marker text varies and must come from the raw tree.
_MARKED_TAGS: frozenset[str] = frozenset({"reader-macro", "namespaced-map"})

_INNER_TAGS: frozenset[str] = frozenset(
    {*_COLLECTION_TYPES, *_PREFIX_MARKERS, *_MARKED_TAGS, "meta"}
)


@dataclass(slots=True)
class _Frame:
    """A raw inner node whose children are being converted."""

    raw: RawNode
    index: int = 0
    converted: list[tuple[RawNode, Node | None]] = field(default_factory=list)


def convert(raw: RawNode, options: ConvertOptions | None = None) -> Node | ParseError:
    """Convert a raw syntax tree into the typed AST.

    Args:
        raw: Root of a raw tree (any object with tag/text/is_leaf/children)
        options: Conversion options; defaults to the context's options

    Returns:
        The converted node, or a ParseError if a literal cannot be read.

    Raises:
        ConversionError: If the raw tree has a shape no reader produces.

    Example:
        >>> from formtree.parser import read
        >>> convert(read("(+ 1 2)"))
        Forms(children=(List(children=(Token(value=Symbol(name='+'), ...

    """
    if options is None:
        options = get_convert_options()
    try:
        return _Converter(options).run(raw)
    except ReaderError as exc:
        logger.debug("Conversion failed: %s", exc)
        return ParseError(message=str(exc), input=raw.text)


def parse_string(
    source: str,
    options: ConvertOptions | None = None,
    source_file: str | None = None,
) -> Node | ParseError:
    """Read and convert source text in one step.

    Returns:
        A Forms node, or a ParseError whose ``input`` is ``source``.

    """
    try:
        raw = read(source, source_file)
    except ReaderError as exc:
        logger.debug("Read failed: %s", exc)
        return ParseError(message=str(exc), input=source)
    return convert(raw, options)


class _Converter:
    __slots__ = ("_retain_whitespace", "_retain_comments")

    def __init__(self, options: ConvertOptions) -> None:
        self._retain_whitespace = options.retain_whitespace
        self._retain_comments = options.retain_comments

    def run(self, root: RawNode) -> Node:
        if root.is_leaf:
            node = self._leaf(root)
            if node is not None:
                return node
            if root.tag == "comment":
                return Comment(root.text)
            if root.tag == "marker":
                raise ConversionError(root.tag, "marker outside a prefix form")
            return Whitespace(root.text)
        if root.tag not in _INNER_TAGS:
            return self._unknown(root)

        stack = [_Frame(root)]
        while True:
            frame = stack[-1]
            children = frame.raw.children
            if frame.index < len(children):
                child = children[frame.index]
                frame.index += 1
                if child.is_leaf:
                    frame.converted.append((child, self._leaf(child)))
                elif child.tag in _INNER_TAGS:
                    stack.append(_Frame(child))
                else:
                    frame.converted.append((child, self._unknown(child)))
                continue

            stack.pop()
            node = self._build(frame.raw, frame.converted)
            if not stack:
                return node
            stack[-1].converted.append((frame.raw, node))

    # =========================================================================
    # Leaves
    # =========================================================================

    def _leaf(self, raw: RawNode) -> Node | None:
        """Convert a leaf; None means the leaf is dropped."""
        tag = raw.tag
        text = raw.text
        if tag == "token" or tag == "regex":
            spelling = text if self._retain_whitespace else None
            try:
                if tag == "regex":
                    return Token(read_regex(text), text=spelling)
                return Token(read_token(text), text=spelling)
            except ReaderError as exc:
                raise _locate(exc, raw) from None
        if tag == "whitespace" or tag == "newline":
            return Whitespace(text) if self._retain_whitespace else None
        if tag == "comment":
            if self._retain_comments:
                return Comment(text)
            if self._retain_whitespace:
                newline = _line_terminator(text)
                return Whitespace(newline) if newline else None
            return None
        if tag == "marker":
            return None
        return self._unknown(raw)

    def _unknown(self, raw: RawNode) -> Unknown:
        logger.debug("Unmodelled raw tag %r kept as Unknown", raw.tag)
        return Unknown(tag=raw.tag, raw_text=raw.text)

    # =========================================================================
    # Inner nodes
    # =========================================================================

    def _build(self, raw: RawNode, converted: list[tuple[RawNode, Node | None]]) -> Node:
        tag = raw.tag
        collection_type = _COLLECTION_TYPES.get(tag)
        if collection_type is not None:
            for child_raw, _ in converted:
                if child_raw.tag == "marker":
                    raise ConversionError(tag, "collection contains a marker leaf")
            node = collection_type(children=self._arrange(converted))
            if tag == "fn":
                return ReaderMacro(marker="#", child=node)
            return node
        return self._prefix(raw, converted)

    def _arrange(self, converted: list[tuple[RawNode, Node | None]]) -> tuple[Node, ...]:
        """Collect surviving children, marking adjacency when retaining whitespace."""
        items: list[Node] = []
        mark = self._retain_whitespace
        for _, node in converted:
            if node is None:
                continue
            if (
                mark
                and items
                and not isinstance(node, Whitespace)
                and not isinstance(items[-1], Whitespace)
            ):
                items.append(Whitespace(""))
            items.append(node)
        return tuple(items)

    def _prefix(self, raw: RawNode, converted: list[tuple[RawNode, Node | None]]) -> Node:
        """Build a ReaderMacro or Metadata node from a raw prefix node."""
        tag = raw.tag
        if converted and converted[0][0].tag == "marker":
            marker = converted[0][0].text
            rest = converted[1:]
        elif tag in _PREFIX_MARKERS or tag == "meta":
            marker = _PREFIX_MARKERS.get(tag, "^")
            rest = converted
        else:
            raise ConversionError(tag, "missing marker leaf")

        # Split the remaining children into forms and the text between them.
        forms: list[Node] = []
        gaps: list[list[str]] = [[]]
        notes: list[list[str]] = [[]]
        for child_raw, node in rest:
            if child_raw.tag in TRIVIA_TAGS or child_raw.tag == "uneval" or node is None:
                gaps[-1].append(self._gap_text(child_raw))
                if child_raw.tag == "comment" and self._retain_comments:
                    notes[-1].append(child_raw.text)
            else:
                forms.append(node)
                gaps.append([])
                notes.append([])

        expected = 2 if tag == "meta" else 1
        if len(forms) != expected:
            raise ConversionError(tag, f"expected {expected} form(s), found {len(forms)}")

        if tag == "meta":
            if self._retain_whitespace:
                return Metadata(
                    meta=forms[0],
                    value=forms[1],
                    lead="".join(gaps[0]),
                    gap="".join(gaps[1]),
                )
            return Metadata(
                meta=forms[0],
                value=forms[1],
                lead="".join(notes[0]),
                gap=" " + "".join(notes[1]),
            )

        if self._retain_whitespace:
            gap = "".join(gaps[0])
        else:
            gap = (" " if _is_tagged_literal(marker) else "") + "".join(notes[0])
        return ReaderMacro(marker=marker, child=forms[0], gap=gap)

    def _gap_text(self, raw: RawNode) -> str:
        """Text a trivia or discarded child contributes to a prefix gap."""
        if raw.tag == "comment" and not self._retain_comments:
            return _line_terminator(raw.text)
        return raw.text


def _is_tagged_literal(marker: str) -> bool:
    """``#inst``, ``#uuid``, ``#my/tag`` (but not ``#?`` or ``#:ns``)."""
    return len(marker) > 1 and marker[0] == "#" and marker[1].isalpha()


def _line_terminator(text: str) -> str:
    """The trailing newline characters of a comment, if any."""
    return text[len(text.rstrip("\r\n")) :]


def _locate(exc: ReaderError, raw: RawNode) -> ReaderError:
    """Attach the raw node's position to a literal-reading error."""
    location = getattr(raw, "location", None)
    if exc.lineno is not None or location is None:
        return exc
    return ReaderError(
        exc.message,
        lineno=location.lineno,
        col_offset=location.col_offset,
        source_file=location.source_file,
    )


__all__ = ["convert", "parse_string"]

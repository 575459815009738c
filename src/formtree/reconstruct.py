"""Render AST nodes back into Clojure source text.

Rendering rules:
- Token: its recorded spelling when present, else the canonical rendering
- List, Vector, MapLit, SetLit: delimiters around the children, joined by a
  single space; Forms children are joined by a blank line
- a collection holding any Whitespace child is rendered verbatim (children
  concatenated), which is what makes the lossless round trip work
- Whitespace, Comment, Unknown: their stored text
- Metadata: ``^`` + lead + meta + gap + value
- ReaderMacro: marker + gap + child

Without retained whitespace the output is normalized: re-reading it gives an
equal tree, but gaps collapse to single spaces.

Thread Safety:
All functions are pure. Safe to call from any thread.

"""

from formtree.literals import render_value
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
from formtree.stringbuilder import StringBuilder

_DELIMITERS: dict[type[Node], tuple[str, str]] = {
    List: ("(", ")"),
    Vector: ("[", "]"),
    MapLit: ("{", "}"),
    SetLit: ("#{", "}"),
    Forms: ("", ""),
}


def reconstruct(node: Node) -> str:
    """Render a node (and everything below it) as source text.

    Example:
        >>> from formtree import parse
        >>> reconstruct(parse("(defn  add [x y]\\n  (+ x y))"))
        '(defn add [x y] (+ x y))'

    """
    sb = StringBuilder()
    # Pending work, popped from the end: literal fragments or nodes to expand.
    stack: list[Node | str] = [node]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            sb.append(item)
        else:
            stack.extend(reversed(_fragments(item)))
    return sb.build()


def _fragments(node: Node) -> list[Node | str]:
    """One level of rendering: literal text interleaved with sub-nodes."""
    match node:
        case Token(value=value, text=text):
            return [text if text is not None else render_value(value)]
        case Whitespace(text=text) | Comment(text=text):
            return [text]
        case Unknown(raw_text=raw_text):
            return [raw_text]
        case Metadata(meta=meta, value=value, lead=lead, gap=gap):
            return ["^", lead, meta, gap, value]
        case ReaderMacro(marker=marker, child=child, gap=gap):
            return [marker, gap, child]
        case List() | Vector() | MapLit() | SetLit() | Forms():
            opening, closing = _DELIMITERS[type(node)]
            children = node.children
            if any(isinstance(c, Whitespace) for c in children):
                separator = ""
            elif isinstance(node, Forms):
                separator = "\n\n"
            else:
                separator = " "
            parts: list[Node | str] = [opening]
            for index, child in enumerate(children):
                if index:
                    parts.append(separator)
                parts.append(child)
            parts.append(closing)
            return parts
        case _:
            msg = f"Unknown node type: {type(node).__name__}"
            raise TypeError(msg)


__all__ = ["reconstruct", "render_value"]

"""Named-definition extraction.

Recognizes three definition shapes, all as a List whose first child is a
symbol Token:

    (defn name "doc"? params body...)     DefinitionKind.FUNCTION
    (def name "doc"? value)               DefinitionKind.VALUE
    (ns name "doc"? (:require [...])...)  DefinitionKind.NAMESPACE

The name is the second child (it must be a Token). A docstring is the third
child when, and only when, that child is a string Token. This is a purely
positional rule: ``(def greeting "hello")`` reports ``"hello"`` as its
docstring.

Extraction never raises. A form that does not match yields None, and a
ParseError in place of an AST yields no definitions.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from formtree.errors import ParseError
from formtree.nodes import (
    COLLECTION_TYPES,
    List,
    Node,
    Token,
    Vector,
    significant_children,
)
from formtree.reconstruct import reconstruct
from formtree.values import Keyword, Scalar, Symbol
from formtree.visitor import find_all


_REQUIRE = Keyword("require")


class DefinitionKind(Enum):
    """Definition forms the extractor recognizes, valued by their head symbol."""

    FUNCTION = "defn"
    VALUE = "def"
    NAMESPACE = "ns"

    @property
    def symbol(self) -> Symbol:
        return Symbol(self.value)


@dataclass(frozen=True, slots=True)
class NamedDefinition:
    """A definition found in an AST.

    Attributes:
        kind: Which definition form this is
        name: Value of the name token (usually a Symbol)
        docstring: Third-position string, if any
        node: The List node of the whole form
        source_text: ``reconstruct(node)``
        requires: Require specs, for namespace declarations only

    """

    kind: DefinitionKind
    name: Scalar
    docstring: str | None
    node: List
    source_text: str
    requires: tuple[tuple[Scalar, ...], ...] = ()


@dataclass(frozen=True, slots=True)
class TopLevelForm:
    """Summary of one top-level list form.

    ``form_type`` is the spelling of the head token (``"defn"``,
    ``"comment"``, ...) or None when the head is not a token.

    """

    form_type: str | None
    source_text: str
    node: List


# =============================================================================
# Predicates
# =============================================================================


def _head(node: Node) -> Token | None:
    """First significant child of a List, if it is a Token."""
    if not isinstance(node, List):
        return None
    children = significant_children(node)
    if children and isinstance(children[0], Token):
        return children[0]
    return None


def _is_headed_by(node: Node, value: Scalar) -> bool:
    head = _head(node)
    return head is not None and head == Token(value)


def definition_kind(node: Node) -> DefinitionKind | None:
    """The definition kind of ``node``, or None if it is not a definition."""
    head = _head(node)
    if head is None:
        return None
    for kind in DefinitionKind:
        if head.value == kind.symbol:
            return kind
    return None


def is_defn_form(node: Node) -> bool:
    """True for ``(defn ...)`` lists."""
    return definition_kind(node) is DefinitionKind.FUNCTION


def is_def_form(node: Node) -> bool:
    """True for ``(def ...)`` lists."""
    return definition_kind(node) is DefinitionKind.VALUE


def is_ns_form(node: Node) -> bool:
    """True for ``(ns ...)`` lists."""
    return definition_kind(node) is DefinitionKind.NAMESPACE


# =============================================================================
# Field extraction
# =============================================================================


def extract_name(node: Node) -> Scalar | None:
    """Value of the name token of a definition form."""
    if definition_kind(node) is None:
        return None
    children = significant_children(node)  # type: ignore[arg-type]
    if len(children) < 2 or not isinstance(children[1], Token):
        return None
    return children[1].value


def extract_docstring(node: Node) -> str | None:
    """Docstring of a definition form: the third child, if it is a string token."""
    if definition_kind(node) is None:
        return None
    children = significant_children(node)  # type: ignore[arg-type]
    if len(children) < 3:
        return None
    third = children[2]
    if isinstance(third, Token) and isinstance(third.value, str):
        return third.value
    return None


def extract_requires(node: Node) -> tuple[tuple[Scalar, ...], ...]:
    """Require specs of a namespace declaration.

    Finds the first nested list headed by ``:require`` and reads each of its
    vector children as a flat sequence of token values; nested collections
    inside a spec are spliced in, other non-token children are skipped.

    Example:
        >>> ns = parse("(ns my.app (:require [clojure.string :as str]))").children[0]
        >>> extract_requires(ns)
        ((Symbol(name='clojure.string'), Keyword(name='as'), Symbol(name='str')),)

    """
    if not is_ns_form(node):
        return ()
    require_list = next(
        (
            candidate
            for candidate in find_all(lambda n: isinstance(n, List), node)
            if candidate is not node and _is_headed_by(candidate, _REQUIRE)
        ),
        None,
    )
    if require_list is None:
        return ()
    return tuple(
        _token_values(spec)
        for spec in significant_children(require_list)  # type: ignore[arg-type]
        if isinstance(spec, Vector)
    )


def _token_values(spec: Vector) -> tuple[Scalar, ...]:
    """Token values of a collection, nested collections spliced flat."""
    return tuple(
        n.value
        for n in find_all(lambda n: isinstance(n, Token), spec)
        if isinstance(n, Token)
    )


def extract_definition(node: Node) -> NamedDefinition | None:
    """Build a NamedDefinition from a definition form, or None on a miss.

    Forms without a token in name position are misses, not partial records.

    """
    kind = definition_kind(node)
    if kind is None:
        return None
    children = significant_children(node)  # type: ignore[arg-type]
    if len(children) < 2 or not isinstance(children[1], Token):
        return None
    assert isinstance(node, List)
    return NamedDefinition(
        kind=kind,
        name=children[1].value,
        docstring=extract_docstring(node),
        node=node,
        source_text=reconstruct(node),
        requires=extract_requires(node) if kind is DefinitionKind.NAMESPACE else (),
    )


# =============================================================================
# Finders
# =============================================================================


def find_definitions(
    ast: Node | ParseError, kind: DefinitionKind | None = None
) -> list[NamedDefinition]:
    """Every definition in the tree (of ``kind``, if given), in source order."""
    if isinstance(ast, ParseError):
        return []
    found: list[NamedDefinition] = []
    for node in find_all(lambda n: isinstance(n, List), ast):
        definition = extract_definition(node)
        if definition is not None and (kind is None or definition.kind is kind):
            found.append(definition)
    return found


def find_defns(ast: Node | ParseError) -> list[NamedDefinition]:
    """Every ``defn`` in the tree."""
    return find_definitions(ast, DefinitionKind.FUNCTION)


def find_defs(ast: Node | ParseError) -> list[NamedDefinition]:
    """Every ``def`` in the tree."""
    return find_definitions(ast, DefinitionKind.VALUE)


def find_namespace(ast: Node | ParseError) -> NamedDefinition | None:
    """The first ``ns`` declaration in the tree."""
    namespaces = find_definitions(ast, DefinitionKind.NAMESPACE)
    return namespaces[0] if namespaces else None


def top_level_forms(ast: Node | ParseError) -> list[TopLevelForm]:
    """Summaries of the list forms directly under the root."""
    if not isinstance(ast, COLLECTION_TYPES):
        return []
    forms: list[TopLevelForm] = []
    for child in significant_children(ast):  # type: ignore[arg-type]
        if not isinstance(child, List):
            continue
        head = _head(child)
        forms.append(
            TopLevelForm(
                form_type=reconstruct(head) if head is not None else None,
                source_text=reconstruct(child),
                node=child,
            )
        )
    return forms


__all__ = [
    "DefinitionKind",
    "NamedDefinition",
    "TopLevelForm",
    "definition_kind",
    "extract_definition",
    "extract_docstring",
    "extract_name",
    "extract_requires",
    "find_defns",
    "find_definitions",
    "find_defs",
    "find_namespace",
    "is_def_form",
    "is_defn_form",
    "is_ns_form",
    "top_level_forms",
]

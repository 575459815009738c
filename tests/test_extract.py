"""Tests for named-definition extraction."""

import pytest

from formtree import parse
from formtree.config import ConvertOptions
from formtree.errors import ParseError
from formtree.extract import (
    DefinitionKind,
    definition_kind,
    extract_definition,
    extract_docstring,
    extract_name,
    extract_requires,
    find_definitions,
    find_defns,
    find_defs,
    find_namespace,
    is_def_form,
    is_defn_form,
    is_ns_form,
    top_level_forms,
)
from formtree.nodes import Forms, List, Node, Token
from formtree.values import Keyword, Symbol

NS_SOURCE = """(ns my.app
  "Application entry point."
  (:require [clojure.string :as str]
            [clojure.set :refer [union]])
  (:import (java.util Date)))
"""


def _first(source: str) -> Node:
    result = parse(source)
    assert isinstance(result, Forms)
    return result.children[0]


class TestPredicates:
    @pytest.mark.parametrize(
        ("source", "kind"),
        [
            ("(defn f [])", DefinitionKind.FUNCTION),
            ("(def x 1)", DefinitionKind.VALUE),
            ("(ns a.b)", DefinitionKind.NAMESPACE),
            ("(defmacro m [])", None),
            ("[defn f []]", None),
            ("(:defn f)", None),
            ("()", None),
            ("('defn f [])", None),
        ],
    )
    def test_definition_kind(self, source: str, kind: DefinitionKind | None) -> None:
        assert definition_kind(_first(source)) is kind

    def test_boolean_predicates(self) -> None:
        defn = _first("(defn f [])")
        assert is_defn_form(defn)
        assert not is_def_form(defn)
        assert not is_ns_form(defn)
        assert is_def_form(_first("(def x 1)"))
        assert is_ns_form(_first("(ns a)"))

    def test_kind_symbols(self) -> None:
        assert DefinitionKind.FUNCTION.symbol == Symbol("defn")
        assert DefinitionKind.VALUE.value == "def"


class TestFieldExtraction:
    def test_name_and_docstring(self) -> None:
        node = _first('(defn add "Adds two numbers" [x y] (+ x y))')
        assert extract_name(node) == Symbol("add")
        assert extract_docstring(node) == "Adds two numbers"

    def test_no_docstring(self) -> None:
        assert extract_docstring(_first("(defn sub [x y] (- x y))")) is None

    def test_def_value_string_counts_as_docstring(self) -> None:
        assert extract_docstring(_first('(def greeting "hello")')) == "hello"

    def test_missing_name(self) -> None:
        assert extract_name(_first("(defn)")) is None
        assert extract_definition(_first("(defn)")) is None

    def test_non_token_name(self) -> None:
        assert extract_name(_first("(defn [x] x)")) is None
        assert extract_definition(_first("(defn [x] x)")) is None

    def test_non_definitions(self) -> None:
        node = _first("(println 1)")
        assert extract_name(node) is None
        assert extract_docstring(node) is None
        assert extract_definition(node) is None
        assert extract_definition(Token(Symbol("defn"))) is None

    def test_requires(self) -> None:
        assert extract_requires(_first(NS_SOURCE)) == (
            (Symbol("clojure.string"), Keyword("as"), Symbol("str")),
            (Symbol("clojure.set"), Keyword("refer"), Symbol("union")),
        )

    def test_requires_absent(self) -> None:
        assert extract_requires(_first("(ns a.b (:import (java.util Date)))")) == ()

    def test_requires_only_for_namespaces(self) -> None:
        assert extract_requires(_first("(defn f [] (:require [x]))")) == ()

    def test_bare_symbol_requires_are_skipped(self) -> None:
        node = _first("(ns a (:require clojure.walk [clojure.edn :as edn]))")
        assert extract_requires(node) == ((Symbol("clojure.edn"), Keyword("as"), Symbol("edn")),)


class TestExtractDefinition:
    def test_defn_record(self) -> None:
        source = '(defn add "Adds two numbers" [x y] (+ x y))'
        definition = extract_definition(_first(source))
        assert definition is not None
        assert definition.kind is DefinitionKind.FUNCTION
        assert definition.name == Symbol("add")
        assert definition.docstring == "Adds two numbers"
        assert definition.source_text == source
        assert isinstance(definition.node, List)
        assert definition.requires == ()

    def test_source_text_is_normalized(self) -> None:
        definition = extract_definition(_first("(defn  f\n  [x]\n  x)"))
        assert definition is not None
        assert definition.source_text == "(defn f [x] x)"

    def test_source_text_is_verbatim_when_retained(self) -> None:
        source = "(defn f\n  [x]\n  x)"
        ast = parse(source, options=ConvertOptions.lossless())
        [definition] = find_defns(ast)
        assert definition.source_text == source

    def test_namespace_record(self) -> None:
        definition = extract_definition(_first(NS_SOURCE))
        assert definition is not None
        assert definition.kind is DefinitionKind.NAMESPACE
        assert definition.name == Symbol("my.app")
        assert definition.docstring == "Application entry point."
        assert len(definition.requires) == 2


class TestFinders:
    SOURCE = """(ns my.app (:require [clojure.string :as str]))

(def version "1.0")

(defn add "Adds two numbers" [x y] (+ x y))

(defn sub [x y] (- x y))

(comment
  (defn scratch [] nil))
"""

    def test_find_defns(self) -> None:
        defns = find_defns(parse(self.SOURCE))
        assert [d.name for d in defns] == [Symbol("add"), Symbol("sub"), Symbol("scratch")]
        assert [d.docstring for d in defns] == ["Adds two numbers", None, None]

    def test_find_defs(self) -> None:
        [version] = find_defs(parse(self.SOURCE))
        assert version.name == Symbol("version")
        assert version.docstring == "1.0"

    def test_find_definitions_all_kinds(self) -> None:
        kinds = [d.kind for d in find_definitions(parse(self.SOURCE))]
        assert kinds == [
            DefinitionKind.NAMESPACE,
            DefinitionKind.VALUE,
            DefinitionKind.FUNCTION,
            DefinitionKind.FUNCTION,
            DefinitionKind.FUNCTION,
        ]

    def test_find_namespace(self) -> None:
        namespace = find_namespace(parse(self.SOURCE))
        assert namespace is not None
        assert namespace.name == Symbol("my.app")
        assert namespace.requires == ((Symbol("clojure.string"), Keyword("as"), Symbol("str")),)

    def test_find_namespace_missing(self) -> None:
        assert find_namespace(parse("(defn f [])")) is None

    def test_parse_error_yields_nothing(self) -> None:
        error = parse("(defn broken")
        assert isinstance(error, ParseError)
        assert find_defns(error) == []
        assert find_defs(error) == []
        assert find_definitions(error) == []
        assert find_namespace(error) is None
        assert top_level_forms(error) == []

    def test_definitions_inside_wrappers_are_not_found(self) -> None:
        assert find_defns(parse("'(defn quoted [] 1)")) == []

    def test_with_retained_trivia(self) -> None:
        ast = parse(self.SOURCE, options=ConvertOptions.lossless())
        assert [d.name for d in find_defns(ast)] == [
            Symbol("add"),
            Symbol("sub"),
            Symbol("scratch"),
        ]


class TestTopLevelForms:
    def test_form_types(self) -> None:
        forms = top_level_forms(parse("(ns a) (defn f []) :kw [1] (comment x) ((fn []))"))
        assert [f.form_type for f in forms] == ["ns", "defn", "comment", None]
        assert forms[1].source_text == "(defn f [])"

    def test_keyword_head(self) -> None:
        [form] = top_level_forms(parse("(:a {:a 1})"))
        assert form.form_type == ":a"

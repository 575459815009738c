"""Tests for AST serialization (to_dict/from_dict, to_json/from_json)."""

import json
import math
from decimal import Decimal
from fractions import Fraction

import pytest

from formtree import parse, reconstruct
from formtree.config import ConvertOptions
from formtree.errors import CodecError
from formtree.nodes import (
    Comment,
    Forms,
    List,
    Metadata,
    ReaderMacro,
    Token,
    Unknown,
    Whitespace,
)
from formtree.parser import read
from formtree.serialization import (
    compare_sizes,
    decode_value,
    encode_value,
    from_dict,
    from_json,
    syntax_to_dict,
    to_dict,
    to_json,
)
from formtree.values import Char, Keyword, Regex, Symbol
from formtree.visitor import node_count

SAMPLE = """(ns my.app
  "Sample namespace."
  (:require [clojure.string :as str]))

;; helpers
(def ^:private limit 1.5M)

(defn ratio [x] (/ x 1/3 ##Inf \\a #"\\d+" nil true))

@state #'my.app/ratio #(inc %) #{:a} {:k [1 2]}
#inst "2020-01-01" #_ignored
"""


class TestTokenValues:
    @pytest.mark.parametrize(
        ("value", "encoded"),
        [
            (None, None),
            (True, True),
            (42, 42),
            (1.5, 1.5),
            ("s", "s"),
            (Symbol("foo"), {"__type": "symbol", "__value": "foo"}),
            (Keyword("as"), {"__type": "keyword", "__value": "as"}),
            (Char("a"), {"__type": "char", "__value": "a"}),
            (Regex("\\d+"), {"__type": "regex", "__value": "\\d+"}),
            (Fraction(1, 2), {"__type": "ratio", "__value": "1/2"}),
            (Decimal("1.5"), {"__type": "decimal", "__value": "1.5"}),
            (math.inf, {"__type": "float", "__value": "Inf"}),
            (-math.inf, {"__type": "float", "__value": "-Inf"}),
        ],
    )
    def test_encode_decode(self, value: object, encoded: object) -> None:
        assert encode_value(value) == encoded  # type: ignore[arg-type]
        decoded = decode_value(encoded)
        assert decoded == value
        assert type(decoded) is type(value)

    def test_nan(self) -> None:
        encoded = encode_value(math.nan)
        assert encoded == {"__type": "float", "__value": "NaN"}
        assert math.isnan(decode_value(encoded))  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "data",
        [
            {"__type": "symbol"},
            {"__type": "bogus", "__value": "x"},
            {"__type": "char", "__value": "ab"},
            {"__type": "ratio", "__value": "1/0"},
            {"__type": "decimal", "__value": "abc"},
            {"__type": "float", "__value": "Big"},
            {"__type": "symbol", "__value": 1},
            [1, 2],
        ],
    )
    def test_invalid_values(self, data: object) -> None:
        with pytest.raises(CodecError):
            decode_value(data)

    def test_encode_rejects_non_values(self) -> None:
        with pytest.raises(CodecError):
            encode_value(object())  # type: ignore[arg-type]


class TestNodeRoundTrip:
    def test_dict_shape(self) -> None:
        assert to_dict(List((Token(Symbol("f")), Token(1)))) == {
            "_type": "List",
            "children": [
                {"_type": "Token", "value": {"__type": "symbol", "__value": "f"}},
                {"_type": "Token", "value": 1},
            ],
        }

    def test_wrapper_shapes(self) -> None:
        assert to_dict(ReaderMacro("'", Token(1))) == {
            "_type": "ReaderMacro",
            "marker": "'",
            "child": {"_type": "Token", "value": 1},
            "gap": "",
        }
        meta = to_dict(Metadata(Token(Keyword("m")), Token(1)))
        assert meta["meta"] == {"_type": "Token", "value": {"__type": "keyword", "__value": "m"}}
        assert (meta["lead"], meta["gap"]) == ("", " ")

    def test_sample_round_trip(self) -> None:
        ast = parse(SAMPLE)
        assert isinstance(ast, Forms)
        assert from_json(to_json(ast)) == ast

    def test_lossless_round_trip_keeps_formatting(self) -> None:
        ast = parse(SAMPLE, options=ConvertOptions.lossless())
        restored = from_json(to_json(ast))
        assert restored == ast
        assert to_json(restored) == to_json(ast)

    def test_trivia_nodes(self) -> None:
        node = Forms((Whitespace(" "), Comment("; c\n"), Unknown("uneval", "#_x")))
        assert from_dict(to_dict(node)) == node

    def test_token_text_survives(self) -> None:
        restored = from_dict(to_dict(Token(31, text="0x1F")))
        assert isinstance(restored, Token)
        assert restored.text == "0x1F"

    def test_json_is_deterministic(self) -> None:
        ast = parse(SAMPLE)
        assert isinstance(ast, Forms)
        assert to_json(ast) == to_json(parse(SAMPLE))  # type: ignore[arg-type]
        assert list(json.loads(to_json(ast, indent=2))) == ["_type", "children"]

    def test_deep_tree(self) -> None:
        ast = parse("[" * 5000 + "]" * 5000)
        assert isinstance(ast, Forms)
        data = to_dict(ast)
        depth = 0
        while data.get("children"):
            data = data["children"][0]
            depth += 1
        assert depth == 5000

    def test_deep_tree_round_trip(self) -> None:
        source = "[" * 5000 + "]" * 5000
        ast = parse(source)
        assert isinstance(ast, Forms)
        restored = from_dict(to_dict(ast))
        assert node_count(restored) == node_count(ast) == 5001
        assert reconstruct(restored) == source

    def test_nested_round_trip_is_equal(self) -> None:
        ast = parse("(" * 200 + "x" + ")" * 200)
        assert isinstance(ast, Forms)
        assert from_dict(to_dict(ast)) == ast

    def test_deep_wrappers_round_trip(self) -> None:
        source = "'^:m @" * 2000 + "x"
        ast = parse(source, options=ConvertOptions.lossless())
        assert isinstance(ast, Forms)
        assert reconstruct(from_dict(to_dict(ast))) == source


class TestInvalidInput:
    @pytest.mark.parametrize(
        "data",
        [
            {"children": []},
            {"_type": "Paragraph"},
            {"_type": "List", "children": "nope"},
            {"_type": "List", "children": [{"_type": "Bogus"}]},
            {"_type": "Token"},
            {"_type": "Whitespace", "text": 3},
            {"_type": "ReaderMacro", "marker": "'", "child": 1},
            {"_type": "Token", "value": {"__type": "bogus", "__value": "x"}},
            "List",
        ],
    )
    def test_from_dict_rejects(self, data: object) -> None:
        with pytest.raises(CodecError):
            from_dict(data)  # type: ignore[arg-type]

    def test_codec_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            from_dict({"_type": "Nope"})

    def test_from_json_rejects_bad_json(self) -> None:
        with pytest.raises(CodecError, match="Invalid JSON"):
            from_json("{not json")


class TestRawTreeComparison:
    def test_syntax_to_dict(self) -> None:
        assert syntax_to_dict(read("(a)")) == {
            "tag": "forms",
            "string": "(a)",
            "children": [
                {
                    "tag": "list",
                    "string": "(a)",
                    "children": [{"tag": "token", "string": "a"}],
                }
            ],
        }

    def test_compare_sizes(self) -> None:
        raw = read(SAMPLE)
        ast = parse(SAMPLE)
        assert isinstance(ast, Forms)
        sizes = compare_sizes(raw, ast)
        assert sizes.verbose_size > sizes.compact_size > 0
        assert sizes.reduction_bytes == sizes.verbose_size - sizes.compact_size
        assert 0 < sizes.reduction_percent < 100
        assert sizes.compression_ratio > 1

    @pytest.mark.parametrize("source", ["", "x", "(a)", "[]", SAMPLE, '{"k\u00e9" #{1 2}}'])
    def test_verbose_size_matches_json(self, source: str) -> None:
        raw = read(source)
        ast = parse(source)
        assert isinstance(ast, Forms)
        expected = len(json.dumps(syntax_to_dict(raw), sort_keys=True))
        assert compare_sizes(raw, ast).verbose_size == expected

    def test_deep_raw_tree(self) -> None:
        source = "[" * 5000 + "]" * 5000
        raw = read(source)
        data = syntax_to_dict(raw)
        depth = 0
        while data.get("children"):
            data = data["children"][0]
            depth += 1
        assert depth == 5000
        ast = parse(source)
        assert isinstance(ast, Forms)
        assert compare_sizes(raw, ast).verbose_size > 0

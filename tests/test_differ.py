"""Tests for the definition differ."""

import logging

import pytest

from formtree import parse
from formtree.config import ConvertOptions
from formtree.differ import ChangeRecord, ChangeType, compare_defns, compare_forms, diff
from formtree.extract import DefinitionKind, find_defns
from formtree.values import Symbol


def _summary(changes: list[ChangeRecord]) -> set[tuple[ChangeType, Symbol]]:
    return {(c.change_type, c.name) for c in changes}  # type: ignore[misc]


class TestDiff:
    def test_update_and_addition(self) -> None:
        old = find_defns(parse("(defn foo [] 1)"))
        new = find_defns(parse("(defn foo [] 2) (defn bar [] 3)"))
        changes = diff(old, new)
        assert _summary(changes) == {
            (ChangeType.UPDATE, Symbol("foo")),
            (ChangeType.ADDITION, Symbol("bar")),
        }

    def test_removal(self) -> None:
        old = find_defns(parse("(defn foo [] 1) (defn bar [] 2)"))
        new = find_defns(parse("(defn foo [] 1)"))
        assert _summary(diff(old, new)) == {(ChangeType.REMOVAL, Symbol("bar"))}

    def test_identical_revisions(self) -> None:
        defs = find_defns(parse("(defn a [] 1) (defn b [x] x)"))
        assert diff(defs, defs) == []

    def test_formatting_changes_are_not_updates(self) -> None:
        old = find_defns(parse("(defn foo [x]\n  (inc x))"))
        new = find_defns(parse("(defn  foo  [x] (inc x))"))
        assert diff(old, new) == []

    def test_record_sources(self) -> None:
        old = find_defns(parse("(defn foo [] 1) (defn gone [] 0)"))
        new = find_defns(parse("(defn foo [] 2) (defn fresh [] 3)"))
        by_name = {c.name: c for c in diff(old, new)}

        update = by_name[Symbol("foo")]
        assert (update.old_source, update.new_source) == ("(defn foo [] 1)", "(defn foo [] 2)")

        removal = by_name[Symbol("gone")]
        assert (removal.old_source, removal.new_source) == ("(defn gone [] 0)", None)

        addition = by_name[Symbol("fresh")]
        assert (addition.old_source, addition.new_source) == (None, "(defn fresh [] 3)")

    def test_empty_sides(self) -> None:
        defs = find_defns(parse("(defn a [] 1)"))
        assert _summary(diff([], defs)) == {(ChangeType.ADDITION, Symbol("a"))}
        assert _summary(diff(defs, [])) == {(ChangeType.REMOVAL, Symbol("a"))}
        assert diff([], []) == []


class TestDuplicates:
    def test_later_definition_wins(self) -> None:
        old = find_defns(parse("(defn foo [] 1)"))
        new = find_defns(parse("(defn foo [] 2) (defn foo [] 1)"))
        assert diff(old, new) == []

    def test_duplicate_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        defs = find_defns(parse("(defn foo [] 1) (defn foo [] 2)"))
        with caplog.at_level(logging.WARNING, logger="formtree.differ"):
            diff(defs, [])
        assert any("Duplicate definition foo" in r.getMessage() for r in caplog.records)

    def test_names_of_different_types_are_distinct(self) -> None:
        changes = compare_forms(
            "(def 1 :a) (def true :b)", "(def 1.0 :a) (def 1 :b)", DefinitionKind.VALUE
        )
        assert {(c.change_type, c.path) for c in changes} == {
            (ChangeType.UPDATE, "def[1]"),
            (ChangeType.REMOVAL, "def[true]"),
            (ChangeType.ADDITION, "def[1.0]"),
        }

    def test_no_duplicate_warning_across_types(self, caplog: pytest.LogCaptureFixture) -> None:
        source = "(def 1 :a) (def 1.0 :b) (def true :c)"
        with caplog.at_level(logging.WARNING, logger="formtree.differ"):
            changes = compare_forms(source, "", DefinitionKind.VALUE)
        assert len(changes) == 3
        assert not any("Duplicate" in r.getMessage() for r in caplog.records)


class TestChangeRecord:
    def test_path(self) -> None:
        record = ChangeRecord(ChangeType.ADDITION, Symbol("bar"), DefinitionKind.FUNCTION)
        assert record.path == "defn[bar]"

    def test_path_for_value_and_namespace(self) -> None:
        assert ChangeRecord(ChangeType.UPDATE, Symbol("x"), DefinitionKind.VALUE).path == "def[x]"
        record = ChangeRecord(ChangeType.REMOVAL, Symbol("my.app"), DefinitionKind.NAMESPACE)
        assert record.path == "ns[my.app]"

    def test_path_for_string_name(self) -> None:
        record = ChangeRecord(ChangeType.ADDITION, "odd", DefinitionKind.VALUE)
        assert record.path == "def[odd]"


class TestCompareForms:
    def test_compare_defns_from_source(self) -> None:
        changes = compare_defns("(defn foo [] 1)", "(defn foo [] 2) (defn bar [] 3)")
        assert {c.path for c in changes} == {"defn[foo]", "defn[bar]"}

    def test_compare_defs(self) -> None:
        changes = compare_forms("(def x 1) (defn f [] 1)", "(def x 2)", DefinitionKind.VALUE)
        assert _summary(changes) == {(ChangeType.UPDATE, Symbol("x"))}

    def test_parse_error_side_has_no_definitions(self) -> None:
        changes = compare_defns("(defn broken", "(defn foo [] 1)")
        assert _summary(changes) == {(ChangeType.ADDITION, Symbol("foo"))}

    def test_both_sides_broken(self) -> None:
        assert compare_defns("(", ")") == []

    def test_mixed_inputs(self) -> None:
        old = parse("(defn foo [] 1)")
        changes = compare_defns(old, "(defn foo [] 1)")
        assert changes == []

    def test_options_apply_to_source_inputs(self) -> None:
        lossless = ConvertOptions.lossless()
        changes = compare_defns("(defn foo [x] x)", "(defn foo  [x] x)", options=lossless)
        assert _summary(changes) == {(ChangeType.UPDATE, Symbol("foo"))}

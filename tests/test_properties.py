"""Property-based tests for AST invariants using Hypothesis.

Sources are generated from a small grammar of well-formed Clojure so every
example parses; the properties then check fidelity, counting, codec and
differ behavior over arbitrary shapes.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from formtree import (
    ChangeType,
    ConvertOptions,
    Forms,
    ParseError,
    diff,
    find_defns,
    from_json,
    node_count,
    parse,
    reconstruct,
    to_json,
)
from formtree.nodes import is_collection
from formtree.values import Symbol
from formtree.visitor import iter_nodes

ATOMS = st.sampled_from(
    [
        "foo",
        "my.ns/bar",
        ":kw",
        "::local",
        "42",
        "-7",
        "0x1F",
        "1.5",
        "1/2",
        "2.5M",
        "##Inf",
        "nil",
        "true",
        '"s"',
        '"esc\\n"',
        "\\a",
        "\\newline",
        '#"re+"',
    ]
)
SEPARATORS = st.sampled_from([" ", "  ", "\n", ", ", "\t", "\r\n", " ;; note\n"])
PREFIXES = st.sampled_from(["'", "`", "~", "~@", "@", "#'", "^:m ", "#inst "])


def _joined(items: list[str], seps: list[str]) -> str:
    out = []
    for index, item in enumerate(items):
        if index:
            out.append(seps[index % len(seps)])
        out.append(item)
    return "".join(out)


def _extend(inner: st.SearchStrategy[str]) -> st.SearchStrategy[str]:
    items = st.lists(inner, max_size=4)
    seps = st.lists(SEPARATORS, min_size=1, max_size=3)
    pairs = st.lists(st.tuples(inner, inner), max_size=3)
    return st.one_of(
        st.builds(lambda xs, ss: "(" + _joined(xs, ss) + ")", items, seps),
        st.builds(lambda xs, ss: "[" + _joined(xs, ss) + "]", items, seps),
        st.builds(lambda xs, ss: "#{" + _joined(xs, ss) + "}", items, seps),
        st.builds(lambda xs, ss: "#(" + _joined(xs, ss) + ")", items, seps),
        st.builds(
            lambda ps, ss: "{" + _joined([f"{k} {v}" for k, v in ps], ss) + "}", pairs, seps
        ),
        st.builds(lambda p, x: p + x, PREFIXES, inner),
    )


FORMS = st.recursive(ATOMS, _extend, max_leaves=20)

DOCUMENTS = st.builds(
    lambda lead, forms, seps, trail: lead + _joined(forms, seps) + trail,
    st.sampled_from(["", "\n", ";; header\n"]),
    st.lists(FORMS, max_size=5),
    st.lists(SEPARATORS, min_size=1, max_size=3),
    st.sampled_from(["", "\n", " ; end"]),
)

LOSSLESS = ConvertOptions.lossless()


class TestFidelity:
    """Reconstruction invariants."""

    @given(DOCUMENTS)
    @settings(max_examples=200)
    def test_lossless_round_trip(self, source: str) -> None:
        ast = parse(source, options=LOSSLESS)
        assert not isinstance(ast, ParseError), ast
        assert reconstruct(ast) == source

    @given(DOCUMENTS)
    @settings(max_examples=200)
    def test_normalized_rendering_rereads_equal(self, source: str) -> None:
        ast = parse(source)
        assert isinstance(ast, Forms)
        assert parse(reconstruct(ast)) == ast

    @given(DOCUMENTS)
    @settings(max_examples=100)
    def test_normalized_rendering_is_stable(self, source: str) -> None:
        ast = parse(source)
        assert isinstance(ast, Forms)
        once = reconstruct(ast)
        reparsed = parse(once)
        assert isinstance(reparsed, Forms)
        assert reconstruct(reparsed) == once


class TestCounting:
    @given(DOCUMENTS)
    @settings(max_examples=100)
    def test_node_count_is_additive(self, source: str) -> None:
        ast = parse(source, options=LOSSLESS)
        assert isinstance(ast, Forms)
        for node in iter_nodes(ast):
            if is_collection(node):
                children = node.children  # type: ignore[attr-defined]
                assert node_count(node) == 1 + sum(node_count(c) for c in children)
            else:
                assert node_count(node) == 1


class TestCodec:
    @given(DOCUMENTS, st.booleans())
    @settings(max_examples=100)
    def test_json_round_trip(self, source: str, lossless: bool) -> None:
        ast = parse(source, options=LOSSLESS if lossless else None)
        assert isinstance(ast, Forms)
        restored = from_json(to_json(ast))
        assert restored == ast
        assert reconstruct(restored) == reconstruct(ast)


NAMES = st.sampled_from(["alpha", "beta", "gamma", "delta", "epsilon"])
REVISIONS = st.dictionaries(NAMES, st.integers(min_value=0, max_value=3), max_size=5)


def _source(revision: dict[str, int]) -> str:
    return "\n".join(f"(defn {name} [] {body})" for name, body in revision.items())


class TestDiffer:
    @given(REVISIONS, REVISIONS)
    @settings(max_examples=200)
    def test_diff_is_total(self, old: dict[str, int], new: dict[str, int]) -> None:
        changes = diff(find_defns(parse(_source(old))), find_defns(parse(_source(new))))
        names = [c.name for c in changes]
        assert len(names) == len(set(names))

        by_type = {t: {c.name for c in changes if c.change_type is t} for t in ChangeType}
        assert by_type[ChangeType.ADDITION] == {Symbol(n) for n in new.keys() - old.keys()}
        assert by_type[ChangeType.REMOVAL] == {Symbol(n) for n in old.keys() - new.keys()}
        assert by_type[ChangeType.UPDATE] == {
            Symbol(n) for n in old.keys() & new.keys() if old[n] != new[n]
        }

    @given(REVISIONS)
    @settings(max_examples=50)
    def test_no_op_diff(self, revision: dict[str, int]) -> None:
        definitions = find_defns(parse(_source(revision)))
        assert diff(definitions, definitions) == []

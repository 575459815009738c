"""Tests for ``#`` dispatch scanning."""

import pytest

from formtree.errors import ReaderError
from formtree.lexer import Lexer
from formtree.tokens import TokenType


def _first(source: str):  # type: ignore[no-untyped-def]
    return next(iter(Lexer(source).tokenize()))


class TestDispatchMarkers:
    """Each dispatch form maps to one token."""

    @pytest.mark.parametrize(
        ("source", "token_type", "value"),
        [
            ("#{1 2}", TokenType.SET_OPEN, "#{"),
            ("#(inc %)", TokenType.FN_OPEN, "#("),
            ("#'foo", TokenType.VAR_QUOTE, "#'"),
            ("#_ignored", TokenType.DISCARD, "#_"),
            ("#=(+ 1 2)", TokenType.EVAL, "#="),
            ("#^:m x", TokenType.OLD_META, "#^"),
            ("#?(:clj 1)", TokenType.READER_CONDITIONAL, "#?"),
            ("#?@(:clj [1])", TokenType.READER_CONDITIONAL, "#?@"),
            ("#:user{:a 1}", TokenType.NAMESPACED_MAP, "#:user"),
            ("#::{:a 1}", TokenType.NAMESPACED_MAP, "#::"),
            ("##Inf", TokenType.ATOM, "##Inf"),
            ('#inst "2020-01-01"', TokenType.TAGGED_LITERAL, "#inst"),
            ("#my/tag [1]", TokenType.TAGGED_LITERAL, "#my/tag"),
        ],
    )
    def test_dispatch_token(self, source: str, token_type: TokenType, value: str) -> None:
        token = _first(source)
        assert token.type == token_type
        assert token.value == value

    def test_regex_literal(self) -> None:
        token = _first('#"\\d+" x')
        assert token.type == TokenType.REGEX
        assert token.value == '#"\\d+"'

    def test_shebang_is_a_comment(self) -> None:
        tokens = list(Lexer("#!/usr/bin/env bb\n(println 1)").tokenize())
        assert tokens[0].type == TokenType.COMMENT
        assert tokens[0].value == "#!/usr/bin/env bb\n"
        assert tokens[1].type == TokenType.LIST_OPEN


class TestDispatchErrors:
    """Malformed dispatch forms raise ReaderError."""

    def test_hash_at_eof(self) -> None:
        with pytest.raises(ReaderError, match="EOF while reading dispatch macro"):
            list(Lexer("(a #").tokenize())

    def test_unknown_dispatch_character(self) -> None:
        with pytest.raises(ReaderError, match="No dispatch macro for: <"):
            list(Lexer("#<foo>").tokenize())

    def test_unterminated_regex(self) -> None:
        with pytest.raises(ReaderError, match="EOF while reading regex"):
            list(Lexer('#"abc').tokenize())

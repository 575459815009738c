"""Reader producing the raw syntax tree.

Consumes the token stream from Lexer and builds an immutable SyntaxNode tree
that keeps every token, trivia included. Nesting is tracked on an explicit
frame stack, so deeply nested input never hits the recursion limit.

Frame Stack:
Each open collection or prefix form is a FormFrame. Collections close on
their delimiter; prefix forms close once they have read enough forms
(one for ``'x``, two for ``^meta x``). Closing a frame turns it into a
SyntaxNode that is added to the frame below, which may in turn complete.

Thread Safety:
- Parser instances are single-use. Create one per source string.
- The resulting tree is immutable and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass, field

from formtree.errors import ReaderError
from formtree.lexer import Lexer
from formtree.location import SourceLocation
from formtree.syntax import TRIVIA_TAGS, SyntaxNode
from formtree.tokens import PREFIX_ARITY, Token, TokenType

# Opening token -> (raw tag, closing delimiter)
_COLLECTIONS: dict[TokenType, tuple[str, str]] = {
    TokenType.LIST_OPEN: ("list", ")"),
    TokenType.VECTOR_OPEN: ("vector", "]"),
    TokenType.MAP_OPEN: ("map", "}"),
    TokenType.SET_OPEN: ("set", "}"),
    TokenType.FN_OPEN: ("fn", ")"),
}

_PREFIX_TAGS: dict[TokenType, str] = {
    TokenType.QUOTE: "quote",
    TokenType.SYNTAX_QUOTE: "syntax-quote",
    TokenType.UNQUOTE: "unquote",
    TokenType.UNQUOTE_SPLICING: "unquote-splicing",
    TokenType.DEREF: "deref",
    TokenType.META: "meta",
    TokenType.OLD_META: "meta*",
    TokenType.VAR_QUOTE: "var",
    TokenType.DISCARD: "uneval",
    TokenType.EVAL: "eval",
    TokenType.READER_CONDITIONAL: "reader-macro",
    TokenType.TAGGED_LITERAL: "reader-macro",
    TokenType.NAMESPACED_MAP: "namespaced-map",
}

_TRIVIA_TAGS: dict[TokenType, str] = {
    TokenType.WHITESPACE: "whitespace",
    TokenType.NEWLINE: "newline",
    TokenType.COMMENT: "comment",
}

_LEAF_TAGS: dict[TokenType, str] = {
    TokenType.ATOM: "token",
    TokenType.STRING: "token",
    TokenType.CHAR: "token",
    TokenType.REGEX: "regex",
}


@dataclass(slots=True)
class FormFrame:
    """An open collection or prefix form on the parser's stack.

    Attributes:
        tag: Raw tag of the node being built
        opener: Token that opened the frame (None for the document root)
        closer: Closing delimiter for collections, None otherwise
        needed: Forms still required before a prefix frame completes
        children: Nodes read so far, in source order

    """

    tag: str
    opener: Token | None
    closer: str | None = None
    needed: int = 0
    children: list[SyntaxNode] = field(default_factory=list)

    @property
    def is_prefix(self) -> bool:
        return self.closer is None and self.opener is not None


class Parser:
    """Reader for Clojure source text.

    Usage:
            >>> tree = Parser("(+ 1 2)").parse()
            >>> tree.tag, tree.children[0].tag
            ('forms', 'list')

    Thread Safety:
        Parser instances are single-use and not thread-safe. The resulting
        tree is immutable and thread-safe.

    """

    __slots__ = (
        "_source",
        "_source_file",
        "_stack",
    )

    def __init__(self, source: str, source_file: str | None = None) -> None:
        """Initialize parser with source text.

        Args:
            source: Clojure source text
            source_file: Optional source file path for error messages
        """
        self._source = source
        self._source_file = source_file
        self._stack: list[FormFrame] = []

    def parse(self) -> SyntaxNode:
        """Read the whole source into a ``forms`` root node.

        Returns:
            Root SyntaxNode whose text is the entire source.

        Raises:
            ReaderError: On unbalanced delimiters, unterminated literals,
                prefix markers without a form, or odd map literals.
        """
        self._stack = [FormFrame(tag="forms", opener=None)]

        for token in Lexer(self._source, self._source_file).tokenize():
            token_type = token.type
            if token_type is TokenType.EOF:
                self._check_eof(token)
                break
            if token_type in _TRIVIA_TAGS:
                self._stack[-1].children.append(self._leaf(_TRIVIA_TAGS[token_type], token))
            elif token_type in _LEAF_TAGS:
                self._add_form(self._leaf(_LEAF_TAGS[token_type], token))
            elif token_type in _COLLECTIONS:
                tag, closer = _COLLECTIONS[token_type]
                self._stack.append(FormFrame(tag=tag, opener=token, closer=closer))
            elif token_type in _PREFIX_TAGS:
                frame = FormFrame(
                    tag=_PREFIX_TAGS[token_type],
                    opener=token,
                    needed=PREFIX_ARITY[token_type],
                )
                frame.children.append(self._leaf("marker", token))
                self._stack.append(frame)
            elif token_type is TokenType.CLOSE:
                self._close(token)

        root = self._stack.pop()
        return SyntaxNode(
            tag="forms",
            text=self._source,
            is_leaf=False,
            children=tuple(root.children),
            location=SourceLocation(
                lineno=1,
                col_offset=1,
                offset=0,
                end_offset=len(self._source),
                source_file=self._source_file,
            ),
        )

    # =========================================================================
    # Frame handling
    # =========================================================================

    def _add_form(self, node: SyntaxNode) -> None:
        """Add a completed form to the top frame, completing prefix frames."""
        while True:
            frame = self._stack[-1]
            frame.children.append(node)
            if not frame.is_prefix or node.tag == "uneval":
                return
            frame.needed -= 1
            if frame.needed > 0:
                return
            self._stack.pop()
            node = self._finish(frame)

    def _close(self, token: Token) -> None:
        frame = self._stack[-1]
        if frame.closer is None:
            raise self._error(f"Unmatched delimiter: {token.value}", token)
        if frame.closer != token.value:
            raise self._error(
                f"Mismatched delimiter: expected {frame.closer} but found {token.value}",
                token,
            )
        self._stack.pop()
        if frame.tag == "map" and len(_forms(frame.children)) % 2:
            raise self._error("Map literal must contain an even number of forms", frame.opener)
        node = self._finish(frame, token._end_offset)
        self._add_form(node)

    def _finish(self, frame: FormFrame, end: int | None = None) -> SyntaxNode:
        """Turn a completed frame into a SyntaxNode.

        Delimiters are implied by the tag and kept only in the node text.
        """
        opener = frame.opener
        assert opener is not None
        children = frame.children
        if end is None:
            last = children[-1].location
            assert last is not None
            end = last.end_offset

        if frame.tag == "namespaced-map":
            if _forms(children[1:])[0].tag != "map":
                raise self._error("Namespaced map must specify a map", opener)

        return SyntaxNode(
            tag=frame.tag,
            text=self._source[opener._start_offset : end],
            is_leaf=False,
            children=tuple(children),
            location=SourceLocation(
                lineno=opener.lineno,
                col_offset=opener.col,
                offset=opener._start_offset,
                end_offset=end,
                source_file=self._source_file,
            ),
        )

    def _check_eof(self, token: Token) -> None:
        frame = self._stack[-1]
        if frame.opener is None:
            return
        if frame.is_prefix:
            raise self._error(
                f"EOF while reading form after {frame.opener.value}", frame.opener
            )
        raise self._error(
            f"EOF while reading, starting at line {frame.opener.lineno}", token
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _leaf(self, tag: str, token: Token) -> SyntaxNode:
        return SyntaxNode(tag=tag, text=token.value, is_leaf=True, location=token.location)

    def _error(self, message: str, token: Token | None) -> ReaderError:
        if token is None:
            return ReaderError(message, source_file=self._source_file)
        return ReaderError(
            message,
            lineno=token.lineno,
            col_offset=token.col,
            source_file=self._source_file,
        )


def _forms(children: list[SyntaxNode]) -> list[SyntaxNode]:
    """Children that count as forms: no trivia, no discarded forms."""
    return [c for c in children if c.tag not in TRIVIA_TAGS and c.tag != "uneval"]


def read(source: str, source_file: str | None = None) -> SyntaxNode:
    """Read source text into a raw syntax tree.

    Raises:
        ReaderError: If the source is not well-formed.

    """
    return Parser(source, source_file).parse()


__all__ = ["FormFrame", "Parser", "read"]

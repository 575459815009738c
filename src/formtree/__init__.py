"""
formtree: Compact, serializable ASTs for Clojure source

Reads Clojure source into a formatting-preserving raw tree, converts it into
a compact typed AST, and builds on that AST to find named definitions,
reconstruct source text, and diff two revisions of a file. Iterative
throughout, thread-safe, and zero runtime dependencies.

Quick Start:
    >>> from formtree import parse, find_defns, reconstruct
    >>> ast = parse('(defn add "Adds two numbers" [x y] (+ x y))')
    >>> [d.docstring for d in find_defns(ast)]
    ['Adds two numbers']
    >>> reconstruct(ast)
    '(defn add "Adds two numbers" [x y] (+ x y))'

Lossless round trip:
    >>> from formtree import ConvertOptions
    >>> source = "(ns my.app)\\n\\n;; entry point\\n(defn -main [& args])\\n"
    >>> reconstruct(parse(source, options=ConvertOptions.lossless())) == source
    True

Diffing two revisions:
    >>> from formtree import compare_defns
    >>> changes = compare_defns("(defn foo [] 1)", "(defn foo [] 2)")
    >>> [c.path for c in changes]
    ['defn[foo]']

Installation:
    pip install formtree             # Core (zero deps)
    pip install formtree[test]       # + pytest and hypothesis
    pip install formtree[benchmark]  # + pytest-benchmark
"""

from os import PathLike
from pathlib import Path

from formtree.batch import BatchResult, IndexSummary, parse_sources
from formtree.config import (
    ConvertOptions,
    convert_options_context,
    get_convert_options,
    reset_convert_options,
    set_convert_options,
)
from formtree.converter import convert, parse_string
from formtree.differ import ChangeRecord, ChangeType, compare_defns, compare_forms, diff
from formtree.errors import (
    CodecError,
    ConversionError,
    FormtreeError,
    ParseError,
    ReaderError,
    is_error,
)
from formtree.extract import (
    DefinitionKind,
    NamedDefinition,
    TopLevelForm,
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
from formtree.lexer import Lexer
from formtree.location import SourceLocation
from formtree.nodes import (
    Collection,
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
from formtree.parser import Parser, read
from formtree.protocols import RawNode
from formtree.reconstruct import reconstruct, render_value
from formtree.serialization import (
    SizeComparison,
    compare_sizes,
    from_dict,
    from_json,
    syntax_to_dict,
    to_dict,
    to_json,
)
from formtree.syntax import SyntaxNode
from formtree.tokens import TokenType
from formtree.utils.logger import get_logger
from formtree.values import Char, Keyword, Regex, Scalar, Symbol
from formtree.visitor import (
    BaseVisitor,
    compact_repr,
    find_all,
    fold,
    iter_nodes,
    node_count,
    postwalk,
    serialized_size,
    walk,
)

__version__ = "0.1.0"

logger = get_logger(__name__)


def parse(
    source: str,
    *,
    options: ConvertOptions | None = None,
    source_file: str | None = None,
) -> Node | ParseError:
    """Parse Clojure source into a compact typed AST.

    Args:
        source: Clojure source text
        options: Conversion options (uses the context's options if None)
        source_file: Optional source file path for error messages

    Returns:
        A Forms root node, or a ParseError (returned, never raised) when the
        source is malformed.

    Example:
        >>> parse("(+ 1 2)")
        Forms(children=(List(children=(Token(value=Symbol(name='+'), ...

        >>> parse("(defn broken")
        ParseError(message='1:13 EOF while reading, starting at line 1', input='(defn broken')
    """
    return parse_string(source, options, source_file=source_file)


def parse_file(
    path: str | PathLike[str],
    *,
    options: ConvertOptions | None = None,
    encoding: str = "utf-8",
) -> Node | ParseError:
    """Read and parse a source file.

    Unreadable files are not exceptions: they come back as a ParseError
    whose ``input`` is the path.

    """
    try:
        source = Path(path).read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return ParseError(message=f"Could not read {path}: {exc}", input=str(path))
    return parse_string(source, options, source_file=str(path))


__all__ = [  # noqa: RUF022 (grouped by category for maintainability)
    # Version
    "__version__",
    # Core API
    "parse",
    "parse_file",
    "parse_string",
    "convert",
    "read",
    "parse_sources",
    "BatchResult",
    "IndexSummary",
    # Nodes
    "Node",
    "Collection",
    "Token",
    "List",
    "Vector",
    "MapLit",
    "SetLit",
    "Forms",
    "Metadata",
    "ReaderMacro",
    "Whitespace",
    "Comment",
    "Unknown",
    # Values
    "Scalar",
    "Symbol",
    "Keyword",
    "Char",
    "Regex",
    # Traversal
    "BaseVisitor",
    "walk",
    "postwalk",
    "iter_nodes",
    "find_all",
    "fold",
    "node_count",
    "serialized_size",
    "compact_repr",
    # Extraction
    "DefinitionKind",
    "NamedDefinition",
    "TopLevelForm",
    "is_defn_form",
    "is_def_form",
    "is_ns_form",
    "extract_definition",
    "extract_name",
    "extract_docstring",
    "extract_requires",
    "find_definitions",
    "find_defns",
    "find_defs",
    "find_namespace",
    "top_level_forms",
    # Reconstruction
    "reconstruct",
    "render_value",
    # Differ
    "ChangeType",
    "ChangeRecord",
    "diff",
    "compare_forms",
    "compare_defns",
    # Serialization
    "to_dict",
    "from_dict",
    "to_json",
    "from_json",
    "syntax_to_dict",
    "compare_sizes",
    "SizeComparison",
    # Configuration (ContextVar-based)
    "ConvertOptions",
    "get_convert_options",
    "set_convert_options",
    "reset_convert_options",
    "convert_options_context",
    # Errors
    "FormtreeError",
    "ReaderError",
    "ConversionError",
    "CodecError",
    "ParseError",
    "is_error",
    # Reader components
    "Lexer",
    "Parser",
    "RawNode",
    "SyntaxNode",
    "TokenType",
    "SourceLocation",
]

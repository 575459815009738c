"""Parse many independent sources on parallel workers.

Sources share nothing, so they are parsed on a ThreadPoolExecutor with no
locking. Results come back keyed by source name together with a summary of
how many parsed and which failed.

Example:
    result = parse_sources({"core.clj": core_src, "util.clj": util_src})
    for name, message in result.summary.errors.items():
        print(f"{name}: {message}")

"""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from formtree.config import ConvertOptions, get_convert_options
from formtree.converter import parse_string
from formtree.errors import ParseError
from formtree.nodes import Node
from formtree.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class IndexSummary:
    """Outcome counts for a batch.

    Attributes:
        total: Number of sources
        parsed: Sources that produced an AST
        failed: Sources that produced a ParseError
        errors: Source name -> error message, for the failures

    """

    total: int
    parsed: int
    failed: int
    errors: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Per-source results (AST or ParseError) plus their summary."""

    results: Mapping[str, Node | ParseError]
    summary: IndexSummary


def parse_sources(
    sources: Mapping[str, str],
    *,
    options: ConvertOptions | None = None,
    max_workers: int | None = None,
) -> BatchResult:
    """Parse every source concurrently.

    Args:
        sources: Source name (typically a path) -> source text
        options: Conversion options; defaults to the caller's context options
        max_workers: Thread pool size (None for the executor default)

    Returns:
        BatchResult with results in the order of ``sources``.

    """
    # Worker threads start from a fresh context, so resolve options here.
    if options is None:
        options = get_convert_options()
    names = list(sources)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        parsed = list(
            executor.map(
                lambda name: parse_string(sources[name], options, source_file=name),
                names,
            )
        )

    results = dict(zip(names, parsed, strict=True))
    errors = {name: r.message for name, r in results.items() if isinstance(r, ParseError)}
    for name, message in errors.items():
        logger.debug("Failed to parse %s: %s", name, message)

    return BatchResult(
        results=results,
        summary=IndexSummary(
            total=len(names),
            parsed=len(names) - len(errors),
            failed=len(errors),
            errors=errors,
        ),
    )


__all__ = ["BatchResult", "IndexSummary", "parse_sources"]

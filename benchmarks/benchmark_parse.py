"""Benchmark reading, conversion, reconstruction and batch parsing.

Run with:
    pytest benchmarks/benchmark_parse.py -v --benchmark-only

Or for a quick report:
    python benchmarks/benchmark_parse.py
"""

import time

from formtree import (
    ConvertOptions,
    compare_sizes,
    find_defns,
    parse,
    parse_sources,
    read,
    reconstruct,
)


def time_call(fn, iterations: int = 10) -> float:  # type: ignore[no-untyped-def]
    """Average wall time of ``fn`` over ``iterations`` runs, after one warmup."""
    fn()
    start = time.perf_counter()
    for _ in range(iterations):
        fn()
    return (time.perf_counter() - start) / iterations


def main() -> None:
    """Run benchmarks and print results."""
    from conftest import make_namespace

    source = "\n".join(make_namespace(i) for i in range(10))
    lossless = ConvertOptions.lossless()
    ast = parse(source)

    print(f"Source size: {len(source):,} characters")
    print("=" * 60)
    print(f"read (raw tree):        {time_call(lambda: read(source)) * 1000:8.2f} ms")
    print(f"parse:                  {time_call(lambda: parse(source)) * 1000:8.2f} ms")
    print(
        f"parse (lossless):       "
        f"{time_call(lambda: parse(source, options=lossless)) * 1000:8.2f} ms"
    )
    print(f"reconstruct:            {time_call(lambda: reconstruct(ast)) * 1000:8.2f} ms")
    print(f"find_defns:             {time_call(lambda: find_defns(ast)) * 1000:8.2f} ms")

    sizes = compare_sizes(read(source), ast)  # type: ignore[arg-type]
    print("=" * 60)
    print(f"Raw tree JSON:  {sizes.verbose_size:,} bytes")
    print(f"Compact AST:    {sizes.compact_size:,} bytes")
    print(f"Reduction:      {sizes.reduction_percent:.1f}% ({sizes.compression_ratio:.1f}x)")


# pytest-benchmark integration
try:
    import pytest

    @pytest.mark.benchmark(group="read")
    def test_benchmark_read(benchmark, large_document):
        """Benchmark the raw reader alone."""
        benchmark(read, large_document)

    @pytest.mark.benchmark(group="parse")
    def test_benchmark_parse(benchmark, large_document):
        """Benchmark read + conversion with default options."""
        benchmark(parse, large_document)

    @pytest.mark.benchmark(group="parse")
    def test_benchmark_parse_lossless(benchmark, large_document):
        """Benchmark read + conversion keeping every character."""
        options = ConvertOptions.lossless()
        benchmark(lambda: parse(large_document, options=options))

    @pytest.mark.benchmark(group="parse")
    def test_benchmark_parse_deeply_nested(benchmark, deeply_nested):
        """Deep nesting stays linear (no recursion)."""
        benchmark(parse, deeply_nested)

    @pytest.mark.benchmark(group="reconstruct")
    def test_benchmark_reconstruct(benchmark, large_document):
        """Benchmark rendering a lossless AST back to source."""
        ast = parse(large_document, options=ConvertOptions.lossless())
        result = benchmark(reconstruct, ast)
        assert result == large_document

    @pytest.mark.benchmark(group="extract")
    def test_benchmark_find_defns(benchmark, large_document):
        """Benchmark definition extraction over a parsed file."""
        ast = parse(large_document)
        result = benchmark(find_defns, ast)
        assert len(result) == 200

    @pytest.mark.benchmark(group="batch")
    def test_benchmark_parse_sources(benchmark, project_sources):
        """Benchmark parallel parsing of a project."""
        result = benchmark(parse_sources, project_sources)
        assert result.summary.failed == 0

except ImportError:
    pass  # pytest not available


if __name__ == "__main__":
    main()

"""Thread safe: parse 1000 source files in parallel."""

from formtree import parse_sources

sources = {
    f"src/gen/module_{i}.clj": f"(ns gen.module-{i})\n\n(defn f-{i} [x] (* x {i}))\n"
    for i in range(1000)
}
sources["src/gen/broken.clj"] = "(defn broken"

result = parse_sources(sources, max_workers=8)

print(f"Parsed {result.summary.parsed} of {result.summary.total} files")
for name, message in result.summary.errors.items():
    print(f"  {name}: {message}")

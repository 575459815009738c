"""Cache parsed AST to disk: JSON round-trip, and how much smaller it is."""

from formtree import compare_sizes, parse, read
from formtree.serialization import from_json, to_json

source = '(ns cached.core (:require [clojure.string :as str]))\n\n(def answer 42)\n'

ast = parse(source)

json_str = to_json(ast)
restored = from_json(json_str)

print("Original == restored:", ast == restored)
print("JSON length:", len(json_str), "chars")

sizes = compare_sizes(read(source), ast)  # type: ignore[arg-type]
print(f"Raw tree: {sizes.verbose_size} bytes, compact AST: {sizes.compact_size} bytes")
print(f"Reduction: {sizes.reduction_percent:.1f}%")

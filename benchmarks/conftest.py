"""Benchmark fixtures and configuration."""

from __future__ import annotations

import pytest


def make_namespace(index: int, defns: int = 20) -> str:
    """Generate one namespace of ordinary application code."""
    parts = [
        f"(ns bench.module-{index}\n"
        f'  "Generated module {index}."\n'
        "  (:require [clojure.string :as str]\n"
        "            [clojure.set :refer [union difference]]))\n"
    ]
    for i in range(defns):
        parts.append(f"""
;; Function {i} of module {index}
(defn handler-{i}
  "Handles request {i}."
  [{{:keys [id params] :as request}}]
  (let [limit ^long (get params :limit {i})
        items (->> (range limit)
                   (map #(* % {i}))
                   (filter odd?))]
    {{:id id
     :items (vec items)
     :total (reduce + 0 items)
     :tags #{{:generated :bench}}
     :label (str/join "-" ["handler" {i} \\x])}}))
""")
    parts.append(f"\n(def registry-{index} (atom {{}}))\n")
    return "".join(parts)


@pytest.fixture
def large_document() -> str:
    """Generate a large source file (~100KB)."""
    return "\n".join(make_namespace(i) for i in range(10))


@pytest.fixture
def project_sources() -> dict[str, str]:
    """A project of independent source files for batch parsing."""
    return {f"src/bench/module_{i}.clj": make_namespace(i, defns=10) for i in range(32)}


@pytest.fixture
def deeply_nested() -> str:
    """A single form nested 10,000 levels deep."""
    return "(" * 10_000 + "x" + ")" * 10_000

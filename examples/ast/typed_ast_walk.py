"""Typed AST: collect every keyword and rename a function everywhere."""

from formtree import Keyword, Symbol, Token, parse, reconstruct, walk
from formtree.nodes import Node
from formtree.visitor import BaseVisitor


class KeywordCollector(BaseVisitor[None]):
    """Collect keywords, including those inside quoted forms and metadata."""

    def __init__(self) -> None:
        self.keywords: list[str] = []

    def visit_token(self, node: Token) -> None:
        if isinstance(node.value, Keyword):
            self.keywords.append(node.value.name)


def rename(node: Node) -> Node:
    if node == Token(Symbol("old-name")):
        return Token(Symbol("new-name"))
    return node


source = """(ns demo.core
  (:require [clojure.string :as str]))

(def ^:dynamic *level* :info)

(defn old-name [{:keys [id]}]
  {:id id :status :ok})

(defn caller [] (old-name {:id 1}))
"""

ast = parse(source)

collector = KeywordCollector()
collector.visit(ast)
print("Keywords:", ", ".join(collector.keywords))

print("\nRenamed:")
print(reconstruct(walk(rename, ast)))

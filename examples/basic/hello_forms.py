"""Parse Clojure and list its functions in 3 lines. No config, no deps."""

from formtree import find_defns, parse

ast = parse('(defn add "Adds two numbers" [x y] (+ x y))')
for definition in find_defns(ast):
    print(definition.name, "-", definition.docstring)

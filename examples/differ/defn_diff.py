"""Structural diff: know exactly which functions changed between two revisions."""

from formtree import compare_defns

old_source = """(ns my.app)

(defn greet [name] (str "Hello, " name))

(defn farewell [name] (str "Bye, " name))
"""

new_source = """(ns my.app)

(defn greet [name]
  (str "Hello, " name "!"))

(defn shout [s] (clojure.string/upper-case s))
"""

changes = compare_defns(old_source, new_source)

print("Changes:")
for change in sorted(changes, key=lambda c: c.path):
    print(f"  {change.change_type.value} at {change.path}")
    if change.old_source is not None:
        print(f"    old: {change.old_source}")
    if change.new_source is not None:
        print(f"    new: {change.new_source}")

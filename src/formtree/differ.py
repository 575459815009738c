"""Structural diff of named definitions across two revisions.

Definitions are matched by name. For each name present on either side:

    both sides, source differs   ->  UPDATE
    both sides, source identical ->  no record
    new side only                ->  ADDITION
    old side only                ->  REMOVAL

Names match the way tokens compare: ``1``, ``1.0`` and ``true`` are three
different names.

Output order is unspecified; compare results as sets.

Duplicate names:
When one side defines the same name twice, the later definition wins and
the earlier one is ignored. A warning is logged so the duplicate does not
go unnoticed.

Thread Safety:
All functions are pure. Safe to call from any thread.

"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from formtree.config import ConvertOptions
from formtree.converter import parse_string
from formtree.errors import ParseError
from formtree.extract import DefinitionKind, NamedDefinition, find_definitions
from formtree.literals import render_value
from formtree.nodes import Node
from formtree.utils.logger import get_logger
from formtree.values import Scalar

logger = get_logger(__name__)


class ChangeType(Enum):
    """Outcome of comparing one name across two revisions."""

    ADDITION = "addition"
    REMOVAL = "removal"
    UPDATE = "update"


@dataclass(frozen=True, slots=True)
class ChangeRecord:
    """One change between two revisions.

    Attributes:
        change_type: Addition, removal or update
        name: Name of the changed definition
        kind: Definition kind of the changed form
        old_source: Source of the old definition (removals and updates)
        new_source: Source of the new definition (additions and updates)

    """

    change_type: ChangeType
    name: Scalar
    kind: DefinitionKind
    old_source: str | None = None
    new_source: str | None = None

    @property
    def path(self) -> str:
        """Stable node path such as ``defn[foo]``."""
        return f"{self.kind.value}[{_spell(self.name)}]"


def _spell(name: Scalar) -> str:
    return name if isinstance(name, str) else render_value(name)


def _name_key(name: Scalar) -> tuple[type, object]:
    """Key names the way Token compares values: by type, NaN equal to itself."""
    if isinstance(name, float) and math.isnan(name):
        return (float, "nan")
    return (type(name), name)


def _by_name(
    definitions: Iterable[NamedDefinition], side: str
) -> dict[tuple[type, object], NamedDefinition]:
    index: dict[tuple[type, object], NamedDefinition] = {}
    for definition in definitions:
        key = _name_key(definition.name)
        if key in index:
            logger.warning(
                "Duplicate definition %s in %s revision; keeping the later one",
                _spell(definition.name),
                side,
            )
        index[key] = definition
    return index


def diff(
    old_defs: Iterable[NamedDefinition], new_defs: Iterable[NamedDefinition]
) -> list[ChangeRecord]:
    """Compare two collections of definitions by name.

    Returns:
        One ChangeRecord per added, removed or changed name.

    Example:
        >>> old = find_defns(parse("(defn foo [] 1)"))
        >>> new = find_defns(parse("(defn foo [] 2)"))
        >>> [c.change_type for c in diff(old, new)]
        [<ChangeType.UPDATE: 'update'>]

    """
    old_index = _by_name(old_defs, "old")
    new_index = _by_name(new_defs, "new")

    changes: list[ChangeRecord] = []
    for key in old_index.keys() | new_index.keys():
        old = old_index.get(key)
        new = new_index.get(key)
        if old is not None and new is not None:
            if old.source_text != new.source_text:
                changes.append(
                    ChangeRecord(
                        change_type=ChangeType.UPDATE,
                        name=new.name,
                        kind=new.kind,
                        old_source=old.source_text,
                        new_source=new.source_text,
                    )
                )
        elif new is not None:
            changes.append(
                ChangeRecord(
                    change_type=ChangeType.ADDITION,
                    name=new.name,
                    kind=new.kind,
                    new_source=new.source_text,
                )
            )
        elif old is not None:
            changes.append(
                ChangeRecord(
                    change_type=ChangeType.REMOVAL,
                    name=old.name,
                    kind=old.kind,
                    old_source=old.source_text,
                )
            )
    return changes


def _definitions(
    revision: Node | ParseError | str, kind: DefinitionKind, options: ConvertOptions | None
) -> list[NamedDefinition]:
    if isinstance(revision, str):
        revision = parse_string(revision, options)
    return find_definitions(revision, kind)


def compare_forms(
    old: Node | ParseError | str,
    new: Node | ParseError | str,
    kind: DefinitionKind = DefinitionKind.FUNCTION,
    *,
    options: ConvertOptions | None = None,
) -> list[ChangeRecord]:
    """Diff the definitions of one kind between two revisions.

    Each revision may be an AST, a ParseError (treated as having no
    definitions) or source text, which is parsed with ``options``.

    """
    return diff(
        _definitions(old, kind, options),
        _definitions(new, kind, options),
    )


def compare_defns(
    old: Node | ParseError | str,
    new: Node | ParseError | str,
    *,
    options: ConvertOptions | None = None,
) -> list[ChangeRecord]:
    """Diff the ``defn`` forms between two revisions."""
    return compare_forms(old, new, DefinitionKind.FUNCTION, options=options)


__all__ = [
    "ChangeRecord",
    "ChangeType",
    "compare_defns",
    "compare_forms",
    "diff",
]

"""Import-statement merging.

Import entries that target the same module are folded into one statement per
(module, type-only) pair.  The result is fully determined by the order in
which entries are supplied: modules keep their first-appearance order and
items keep theirs.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field


class MergedImport(BaseModel):
    """One rendered import statement."""

    model_config = ConfigDict(frozen=True)

    module: str
    items: list[str] = Field(default_factory=list)
    type_only: bool = False

    def render(self) -> str:
        keyword = "import type" if self.type_only else "import"
        return f'{keyword} {{ {", ".join(self.items)} }} from "{self.module}"'


def merge_imports(entries: Iterable[tuple[str, Iterable[str], bool]]) -> list[MergedImport]:
    """Merge ``(module, items, type_only)`` entries.

    * duplicate items are dropped;
    * a symbol imported as a value is removed from the type-only import of
      the same module;
    * for each module the value statement precedes the type statement;
    * statements with no items left are omitted.
    """
    modules: list[str] = []
    values: dict[str, list[str]] = {}
    types: dict[str, list[str]] = {}

    for module, items, type_only in entries:
        if module not in modules:
            modules.append(module)
            values[module] = []
            types[module] = []
        target = types[module] if type_only else values[module]
        for item in items:
            if item not in target:
                target.append(item)

    merged: list[MergedImport] = []
    for module in modules:
        value_items = values[module]
        type_items = [item for item in types[module] if item not in value_items]
        if value_items:
            merged.append(MergedImport(module=module, items=value_items))
        if type_items:
            merged.append(MergedImport(module=module, items=type_items, type_only=True))
    return merged


def render_imports(merged: list[MergedImport]) -> str:
    """Render merged statements one per line."""
    return "\n".join(statement.render() for statement in merged)

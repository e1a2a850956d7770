"""Variable interpolation for template strings.

Placeholders use a single-brace ``{variableName}`` form.  Dotted paths such as
``{options.name}`` walk nested mappings.  A brace directly preceded by ``$`` is
never treated as a placeholder: TypeScript template literals (``${value}``)
embedded in templates must reach the generated file untouched.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from libgen.errors import InterpolationError

VARIABLE_PATTERN = re.compile(r"(?<!\$)\{([a-zA-Z_][a-zA-Z0-9_.]*)\}")

_MISSING = object()


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def resolve_variable(variable: str, context: Mapping[str, Any]) -> Any:
    """Return the value for *variable* or the ``_MISSING`` sentinel.

    ``None`` values are reported as missing.
    """
    current: Any = context
    for part in variable.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return _MISSING
    if current is None:
        return _MISSING
    return current


def format_value(value: Any) -> str:
    """Render a context value the way generated TypeScript expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def has_interpolation(text: str) -> bool:
    """Return ``True`` if *text* contains at least one placeholder."""
    return VARIABLE_PATTERN.search(text) is not None


def extract_variables(text: str) -> set[str]:
    """Return every placeholder name referenced in *text*."""
    return set(VARIABLE_PATTERN.findall(text))


def _substitute(text: str, context: Mapping[str, Any], missing: list[str]) -> str:
    def replace(match: re.Match[str]) -> str:
        variable = match.group(1)
        value = resolve_variable(variable, context)
        if value is _MISSING:
            if variable not in missing:
                missing.append(variable)
            return match.group(0)
        return format_value(value)

    return VARIABLE_PATTERN.sub(replace, text)


def interpolate(text: str, context: Mapping[str, Any]) -> str:
    """Substitute every placeholder in *text* from *context*.

    Raises:
        InterpolationError: Listing all unresolved names, in order of first
            appearance.
    """
    missing: list[str] = []
    result = _substitute(text, context, missing)
    if missing:
        raise InterpolationError(missing)
    return result


def interpolate_deep(value: Any, context: Mapping[str, Any]) -> Any:
    """Interpolate every string inside nested mappings and sequences.

    Non-string leaves are returned unchanged.  Unresolved names are collected
    across the whole structure before :class:`InterpolationError` is raised.
    """
    missing: list[str] = []
    result = _walk(value, context, missing)
    if missing:
        raise InterpolationError(missing)
    return result


def _walk(value: Any, context: Mapping[str, Any], missing: list[str]) -> Any:
    if isinstance(value, str):
        return _substitute(value, context, missing)
    if isinstance(value, Mapping):
        return {key: _walk(item, context, missing) for key, item in value.items()}
    if isinstance(value, list):
        return [_walk(item, context, missing) for item in value]
    if isinstance(value, tuple):
        return tuple(_walk(item, context, missing) for item in value)
    return value


# ---------------------------------------------------------------------------
# Validation support
# ---------------------------------------------------------------------------


def is_opaque_field(model: BaseModel, field_name: str) -> bool:
    """Return ``True`` if *field_name* is never interpolated (method bodies, layer dependencies)."""
    info = type(model).model_fields.get(field_name)
    extra = info.json_schema_extra if info is not None else None
    return isinstance(extra, dict) and bool(extra.get("opaque"))


def collect_variables(value: Any) -> list[str]:
    """Collect placeholder names from strings, containers and pydantic models.

    Fields declared opaque are skipped because they are never
    interpolated.  The result is ordered by first appearance.
    """
    found: list[str] = []
    _collect(value, found)
    return found


def _collect(value: Any, found: list[str]) -> None:
    if isinstance(value, str):
        for name in VARIABLE_PATTERN.findall(value):
            if name not in found:
                found.append(name)
    elif isinstance(value, BaseModel):
        for field_name in type(value).model_fields:
            if is_opaque_field(value, field_name):
                continue
            _collect(getattr(value, field_name), found)
    elif isinstance(value, Mapping):
        for item in value.values():
            _collect(item, found)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _collect(item, found)


def find_missing(names: list[str], context: Mapping[str, Any]) -> list[str]:
    """Return the subset of *names* that *context* cannot resolve."""
    return [name for name in names if resolve_variable(name, context) is _MISSING]

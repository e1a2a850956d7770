"""Shared pieces of the built-in catalog."""

from __future__ import annotations

from libgen.templates.models import TemplateDefinition, TemplateMetadata

BASE_CONTEXT: tuple[str, ...] = (
    "className",
    "fileName",
    "propertyName",
    "constantName",
    "scope",
    "packageName",
    "projectName",
    "libraryType",
)

CatalogEntry = tuple[TemplateDefinition, TemplateMetadata]


def catalog_entry(
    definition: TemplateDefinition,
    description: str,
    optional_context: tuple[str, ...] = (),
) -> CatalogEntry:
    """Pair *definition* with metadata derived from its ``<artifact>/<file>`` id."""
    artifact_kind, _, file_kind = definition.id.partition("/")
    metadata = TemplateMetadata(
        artifact_kind=artifact_kind,
        file_kind=file_kind,
        description=description,
        required_context=list(BASE_CONTEXT),
        optional_context=list(optional_context),
    )
    return definition, metadata


def raw(value: str) -> dict:
    """Shorthand for a raw content shape."""
    return {"type": "raw", "value": value}


def fragment(fragment_type: str, config: object, condition: str | None = None) -> dict:
    """Shorthand for a fragment content shape."""
    return {"type": "fragment", "fragment": fragment_type, "config": config, "condition": condition}

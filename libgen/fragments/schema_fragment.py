"""Validated-schema fragment: ``Schema.*`` constants with brand and annotations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from libgen.templates.buffer import CodeBuffer
from libgen.templates.resolver import interpolate

from .models import SchemaAnnotations, SchemaField, SchemaFragmentConfig
from .renderer import get_layout

_PRIMITIVES = {
    "String": "Schema.String",
    "Number": "Schema.Number",
    "Boolean": "Schema.Boolean",
}


def render_schema_fragment(
    buffer: CodeBuffer,
    config: SchemaFragmentConfig,
    context: Mapping[str, Any],
) -> None:
    name = interpolate(config.name, context)
    buffer.add(
        get_layout().render(
            "schema.ts.j2",
            jsdoc=interpolate(config.jsdoc, context) if config.jsdoc else None,
            exported=config.exported,
            name=name,
            class_form=config.schema_type == "Class",
            expression=build_schema_expression(config, name, context),
            type_alias=interpolate(config.type_alias, context) if config.type_alias else None,
        )
    )


def build_schema_expression(
    config: SchemaFragmentConfig,
    name: str,
    context: Mapping[str, Any],
) -> str:
    """Return the right-hand side of the ``const`` declaration, or the base of a ``Class``."""
    if config.schema_type in _PRIMITIVES:
        expr = _PRIMITIVES[config.schema_type]
    elif config.schema_type == "Struct":
        expr = f"Schema.Struct({_struct_body(config.fields, context)})"
    elif config.schema_type == "Class":
        expr = f'Schema.Class<{name}>("{name}")({_struct_body(config.fields, context)})'
    elif config.schema_type == "Array":
        item = interpolate(config.fields[0].schema_expr, context) if config.fields else "Schema.Unknown"
        expr = f"Schema.Array({item})"
    else:
        variants = ", ".join(interpolate(f.schema_expr, context) for f in config.fields)
        expr = f"Schema.Union({variants})"

    if config.brand:
        expr = f'{expr}.pipe(Schema.brand("{interpolate(config.brand, context)}"))'
    if config.annotations:
        expr = f"{expr}.pipe(Schema.annotations({_annotations(config.annotations, context)}))"
    return expr


def _struct_body(fields: list[SchemaField], context: Mapping[str, Any]) -> str:
    if not fields:
        return "{}"
    rendered = []
    for field in fields:
        schema = interpolate(field.schema_expr, context)
        rendered.append(
            {
                "name": interpolate(field.name, context),
                "expression": f"Schema.optional({schema})" if field.optional else schema,
                "jsdoc": interpolate(field.jsdoc, context) if field.jsdoc else None,
            }
        )
    return get_layout().render("struct_fields.ts.j2", fields=rendered)


def _annotations(annotations: SchemaAnnotations, context: Mapping[str, Any]) -> str:
    parts = []
    for key in ("identifier", "title", "description"):
        value = getattr(annotations, key)
        if value:
            parts.append(f'{key}: "{interpolate(value, context)}"')
    return "{ " + ", ".join(parts) + " }"


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------


def branded_id_fragment(
    class_name: str,
    name: Optional[str] = None,
    brand: Optional[str] = None,
) -> SchemaFragmentConfig:
    """``XId = Schema.String.pipe(Schema.brand("XId"))`` plus its type alias."""
    schema_name = name or f"{class_name}Id"
    return SchemaFragmentConfig(
        name=schema_name,
        schema_type="String",
        brand=brand or schema_name,
        annotations=SchemaAnnotations(identifier=schema_name, title=f"{class_name} ID"),
        type_alias=schema_name,
        jsdoc=f"Branded {class_name} ID type",
    )


def entity_schema_fragment(
    class_name: str,
    fields: list[SchemaField],
    name: Optional[str] = None,
    type_alias: Optional[str] = None,
) -> SchemaFragmentConfig:
    return SchemaFragmentConfig(
        name=name or f"{class_name}Schema",
        schema_type="Struct",
        fields=fields,
        type_alias=type_alias or class_name,
        jsdoc=f"{class_name} entity schema",
    )


def create_input_schema_fragment(class_name: str, fields: list[SchemaField]) -> SchemaFragmentConfig:
    return SchemaFragmentConfig(
        name=f"Create{class_name}Input",
        schema_type="Struct",
        fields=fields,
        type_alias=f"Create{class_name}Input",
        jsdoc=f"Input schema for creating a {class_name}",
    )


def update_input_schema_fragment(class_name: str, fields: list[SchemaField]) -> SchemaFragmentConfig:
    """Same fields as the create input, all optional."""
    return SchemaFragmentConfig(
        name=f"Update{class_name}Input",
        schema_type="Struct",
        fields=[f.model_copy(update={"optional": True}) for f in fields],
        type_alias=f"Update{class_name}Input",
        jsdoc=f"Input schema for updating a {class_name}",
    )

"""Capability-module fragment: ``Context.Tag`` classes with an inline interface.

Every structural string, including static-variant implementation expressions,
is interpolated.  Template literals in implementations survive because the
placeholder pattern never matches a brace preceded by ``$``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from libgen.templates.buffer import CodeBuffer
from libgen.templates.resolver import interpolate

from .models import ContextTagFragmentConfig, MethodParam, ServiceMethod
from .renderer import get_layout, render_params


def _optional(text: Optional[str], context: Mapping[str, Any]) -> Optional[str]:
    return interpolate(text, context) if text else None


def render_context_tag_fragment(
    buffer: CodeBuffer,
    config: ContextTagFragmentConfig,
    context: Mapping[str, Any],
) -> None:
    service_name = interpolate(config.service_name, context)
    tag_identifier = (
        interpolate(config.tag_identifier, context) if config.tag_identifier else service_name
    )

    methods = [
        {
            "name": interpolate(method.name, context),
            "params": render_params(
                [
                    (interpolate(p.name, context), interpolate(p.type, context), p.optional)
                    for p in method.params
                ]
            ),
            "return_type": interpolate(method.return_type, context),
            "jsdoc": _optional(method.jsdoc, context),
        }
        for method in config.methods
    ]
    static_layers = [
        {
            "name": interpolate(layer.name, context),
            "implementation": interpolate(layer.implementation, context),
            "jsdoc": _optional(layer.jsdoc, context),
        }
        for layer in config.static_layers
    ]

    buffer.add(
        get_layout().render(
            "context_tag.ts.j2",
            jsdoc=_optional(config.jsdoc, context),
            exported=config.exported,
            service_name=service_name,
            tag_identifier=tag_identifier,
            methods=methods,
            static_layers=static_layers,
        )
    )


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------


def _list_params(class_name: str, pagination: str = "OffsetPaginationParams") -> list[MethodParam]:
    return [
        MethodParam(name="filters", type=f"{class_name}Filters", optional=True),
        MethodParam(name="pagination", type=pagination, optional=True),
        MethodParam(name="sort", type="SortOptions", optional=True),
    ]


def repository_fragment(
    class_name: str,
    *,
    scope: str = "{scope}",
    file_name: str = "{fileName}",
    entity_type: Optional[str] = None,
    id_field: str = "id",
    error_type: Optional[str] = None,
) -> ContextTagFragmentConfig:
    """Repository capability with the standard CRUD operations."""
    entity = entity_type or class_name
    error = error_type or f"{class_name}RepositoryError"
    id_param = MethodParam(name=id_field, type="string")
    return ContextTagFragmentConfig(
        service_name=f"{class_name}Repository",
        tag_identifier=f"{scope}/contract-{file_name}/{class_name}Repository",
        jsdoc=f"{class_name}Repository Context Tag for dependency injection",
        methods=[
            ServiceMethod(
                name="findById",
                params=[id_param],
                return_type=f"Effect.Effect<Option.Option<{entity}>, {error}>",
                jsdoc=f"Find {class_name} by ID",
            ),
            ServiceMethod(
                name="findAll",
                params=_list_params(class_name),
                return_type=f"Effect.Effect<PaginatedResult<{entity}>, {error}>",
                jsdoc=f"Find all {class_name} records matching filters",
            ),
            ServiceMethod(
                name="count",
                params=[MethodParam(name="filters", type=f"{class_name}Filters", optional=True)],
                return_type=f"Effect.Effect<number, {error}>",
                jsdoc=f"Count {class_name} records matching filters",
            ),
            ServiceMethod(
                name="create",
                params=[MethodParam(name="input", type=f"Partial<{entity}>")],
                return_type=f"Effect.Effect<{entity}, {error}>",
                jsdoc=f"Create a new {class_name}",
            ),
            ServiceMethod(
                name="update",
                params=[id_param, MethodParam(name="input", type=f"Partial<{entity}>")],
                return_type=f"Effect.Effect<{entity}, {error}>",
                jsdoc=f"Update an existing {class_name}",
            ),
            ServiceMethod(
                name="delete",
                params=[id_param],
                return_type=f"Effect.Effect<void, {error}>",
                jsdoc=f"Delete a {class_name} permanently",
            ),
            ServiceMethod(
                name="exists",
                params=[id_param],
                return_type=f"Effect.Effect<boolean, {error}>",
                jsdoc=f"Check if a {class_name} exists by ID",
            ),
        ],
    )


def service_fragment(
    class_name: str,
    *,
    scope: str = "{scope}",
    file_name: str = "{fileName}",
    entity_type: Optional[str] = None,
    error_type: Optional[str] = None,
) -> ContextTagFragmentConfig:
    """Business-service capability: get, list, create, update, delete."""
    entity = entity_type or class_name
    error = error_type or f"{class_name}RepositoryError"
    return ContextTagFragmentConfig(
        service_name=f"{class_name}Service",
        tag_identifier=f"{scope}/contract-{file_name}/{class_name}Service",
        jsdoc=f"{class_name}Service Context Tag for dependency injection",
        methods=[
            ServiceMethod(
                name="get",
                params=[MethodParam(name="id", type="string")],
                return_type=f"Effect.Effect<{entity}, {error}>",
                jsdoc=f"Get {class_name} by ID",
            ),
            ServiceMethod(
                name="list",
                params=_list_params(class_name),
                return_type=f"Effect.Effect<PaginatedResult<{entity}>, {error}>",
                jsdoc=f"List {class_name} records with filters and pagination",
            ),
            ServiceMethod(
                name="create",
                params=[MethodParam(name="input", type=f"Partial<{entity}>")],
                return_type=f"Effect.Effect<{entity}, {error}>",
                jsdoc=f"Create a new {class_name}",
            ),
            ServiceMethod(
                name="update",
                params=[
                    MethodParam(name="id", type="string"),
                    MethodParam(name="input", type=f"Partial<{entity}>"),
                ],
                return_type=f"Effect.Effect<{entity}, {error}>",
                jsdoc=f"Update an existing {class_name}",
            ),
            ServiceMethod(
                name="delete",
                params=[MethodParam(name="id", type="string")],
                return_type=f"Effect.Effect<void, {error}>",
                jsdoc=f"Delete a {class_name}",
            ),
        ],
    )


def projection_repository_fragment(
    class_name: str,
    *,
    scope: str = "{scope}",
    file_name: str = "{fileName}",
    error_type: Optional[str] = None,
) -> ContextTagFragmentConfig:
    """Read-model repository used when CQRS is enabled."""
    error = error_type or f"{class_name}RepositoryError"
    return ContextTagFragmentConfig(
        service_name=f"{class_name}ProjectionRepository",
        tag_identifier=f"{scope}/contract-{file_name}/{class_name}ProjectionRepository",
        jsdoc=f"{class_name}ProjectionRepository Context Tag for CQRS read models",
        methods=[
            ServiceMethod(
                name="findProjection",
                params=[MethodParam(name="id", type="string")],
                return_type=f"Effect.Effect<Option.Option<unknown>, {error}>",
                jsdoc="Find projection by ID",
            ),
            ServiceMethod(
                name="listProjections",
                params=[
                    MethodParam(name="filters", type="Record<string, unknown>", optional=True),
                    MethodParam(name="pagination", type="OffsetPaginationParams", optional=True),
                ],
                return_type=f"Effect.Effect<PaginatedResult<unknown>, {error}>",
                jsdoc="List projections with filters",
            ),
            ServiceMethod(
                name="updateProjection",
                params=[
                    MethodParam(name="id", type="string"),
                    MethodParam(name="data", type="unknown"),
                ],
                return_type=f"Effect.Effect<void, {error}>",
                jsdoc="Update projection (called by event handlers)",
            ),
            ServiceMethod(
                name="rebuildProjection",
                params=[MethodParam(name="id", type="string")],
                return_type=f"Effect.Effect<void, {error}>",
                jsdoc="Rebuild projection from event stream",
            ),
        ],
    )

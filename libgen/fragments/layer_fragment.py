"""Environment-layer fragment: named ``Layer`` constants with composition."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from libgen.templates.buffer import CodeBuffer
from libgen.templates.resolver import interpolate

from .models import LayerComposition, LayerFragmentConfig
from .renderer import get_layout


def render_layer_fragment(
    buffer: CodeBuffer,
    config: LayerFragmentConfig,
    context: Mapping[str, Any],
) -> None:
    service_tag = interpolate(config.service_tag, context)
    implementation = interpolate(config.implementation, context)

    expression = build_layer_expression(config.layer_type, service_tag, implementation)
    if config.composition:
        expression = apply_composition(expression, config.composition, context)

    buffer.add(
        get_layout().render(
            "layer.ts.j2",
            jsdoc=interpolate(config.jsdoc, context) if config.jsdoc else None,
            exported=config.exported,
            name=interpolate(config.name, context),
            expression=expression,
        )
    )


def build_layer_expression(layer_type: str, service_tag: str, implementation: str) -> str:
    """Wrap *implementation* in the ``Layer`` constructor for *layer_type*.

    With no service tag the implementation is already a layer expression
    (for example a ``Layer.mergeAll`` of other layers) and is used as is.
    """
    if not service_tag:
        return implementation
    if layer_type == "effect":
        return f"Layer.effect({service_tag}, {implementation})"
    if layer_type == "sync":
        return f"Layer.sync({service_tag}, () => {implementation})"
    if layer_type == "scoped":
        return f"Layer.scoped({service_tag}, {implementation})"
    if layer_type == "suspend":
        return f"Layer.suspend(() => Layer.succeed({service_tag}, {implementation}))"
    return f"Layer.succeed({service_tag}, {implementation})"


def apply_composition(
    expression: str,
    composition: LayerComposition,
    context: Mapping[str, Any],
) -> str:
    """Apply merge, then provide, then provideMerge."""
    if composition.merge:
        layers = ", ".join(interpolate(layer, context) for layer in composition.merge)
        expression = f"Layer.merge({expression}, {layers})"
    if composition.provide:
        layers = ", ".join(interpolate(layer, context) for layer in composition.provide)
        expression = f"{expression}.pipe(Layer.provide({layers}))"
    if composition.provide_merge:
        layers = ", ".join(interpolate(layer, context) for layer in composition.provide_merge)
        expression = f"{expression}.pipe(Layer.provideMerge({layers}))"
    return expression


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

_IN_MEMORY_REPOSITORY = """{{
    findById: (id) => Effect.succeed(Option.none()),
    findAll: () => Effect.succeed({{ items: [], total: 0, limit: 10, offset: 0, hasMore: false }}),
    count: () => Effect.succeed(0),
    create: (input) => Effect.succeed(input as {entity}),
    update: (id, input) => Effect.succeed(input as {entity}),
    delete: (id) => Effect.void,
    exists: (id) => Effect.succeed(false)
  }}"""


def live_repository_layer_fragment(
    class_name: str,
    implementation: Optional[str] = None,
    dependencies: Optional[list[str]] = None,
) -> LayerFragmentConfig:
    """``XRepositoryLive``; the default implementation is a stub record."""
    service = f"{class_name}Repository"
    return LayerFragmentConfig(
        name=f"{service}Live",
        layer_type="succeed",
        service_tag=service,
        implementation=implementation or _IN_MEMORY_REPOSITORY.format(entity=class_name),
        dependencies=dependencies or [],
        jsdoc=f"Live implementation of {service}",
    )


def test_repository_layer_fragment(class_name: str) -> LayerFragmentConfig:
    service = f"{class_name}Repository"
    return LayerFragmentConfig(
        name=f"{service}Test",
        layer_type="sync",
        service_tag=service,
        implementation=f"make{service}InMemory()",
        jsdoc=f"Test implementation of {service} using in-memory store",
    )


def composed_layer_fragment(
    name: str,
    service_layers: list[str],
    infrastructure_layer: Optional[str] = None,
    jsdoc: Optional[str] = None,
) -> LayerFragmentConfig:
    """Merge several service layers and optionally provide infrastructure."""
    if len(service_layers) > 1:
        implementation = f"Layer.mergeAll({', '.join(service_layers)})"
    elif service_layers:
        implementation = service_layers[0]
    else:
        implementation = "Layer.empty"
    return LayerFragmentConfig(
        name=name,
        implementation=implementation,
        composition=LayerComposition(provide=[infrastructure_layer]) if infrastructure_layer else None,
        jsdoc=jsdoc or f"Composed {name} layer",
    )

"""Structural fragment renderers and the registry that dispatches to them.

Quick usage::

    from libgen.fragments import FragmentDefinition, get_fragment_registry
    from libgen.fragments.error_fragment import not_found_error_fragment
    from libgen.templates.buffer import CodeBuffer

    buffer = CodeBuffer()
    get_fragment_registry().render(
        buffer,
        FragmentDefinition(type="tagged_error", config=not_found_error_fragment("User")),
        {},
    )
"""

from libgen.fragments.models import (
    ContextTagFragmentConfig,
    ErrorField,
    ErrorStaticMethod,
    FragmentDefinition,
    LayerComposition,
    LayerFragmentConfig,
    MethodParam,
    SchemaAnnotations,
    SchemaField,
    SchemaFragmentConfig,
    ServiceMethod,
    StaticLayer,
    TaggedErrorFragmentConfig,
)
from libgen.fragments.registry import (
    FragmentEntry,
    FragmentRegistry,
    create_fragment_registry,
    get_fragment_registry,
)

__all__ = [
    "ContextTagFragmentConfig",
    "ErrorField",
    "ErrorStaticMethod",
    "FragmentDefinition",
    "FragmentEntry",
    "FragmentRegistry",
    "LayerComposition",
    "LayerFragmentConfig",
    "MethodParam",
    "SchemaAnnotations",
    "SchemaField",
    "SchemaFragmentConfig",
    "ServiceMethod",
    "StaticLayer",
    "TaggedErrorFragmentConfig",
    "create_fragment_registry",
    "get_fragment_registry",
]

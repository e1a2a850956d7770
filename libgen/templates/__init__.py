"""Template definitions, interpolation and output assembly.

The compiler and loader live in :mod:`libgen.templates.compiler` and
:mod:`libgen.templates.loader`; they are not re-exported here because they
depend on :mod:`libgen.fragments`, which itself builds on this package.
"""

from libgen.templates.buffer import CodeBuffer
from libgen.templates.models import (
    ConditionalContent,
    ContextTagContent,
    FragmentContent,
    ImportDefinition,
    InterfaceConfig,
    InterfaceContent,
    InterfaceProperty,
    RawContent,
    SchemaContent,
    SectionDefinition,
    TemplateDefinition,
    TemplateMeta,
    TemplateMetadata,
)
from libgen.templates.resolver import (
    extract_variables,
    has_interpolation,
    interpolate,
    interpolate_deep,
)

__all__ = [
    "CodeBuffer",
    "ConditionalContent",
    "ContextTagContent",
    "FragmentContent",
    "ImportDefinition",
    "InterfaceConfig",
    "InterfaceContent",
    "InterfaceProperty",
    "RawContent",
    "SchemaContent",
    "SectionDefinition",
    "TemplateDefinition",
    "TemplateMeta",
    "TemplateMetadata",
    "extract_variables",
    "has_interpolation",
    "interpolate",
    "interpolate_deep",
]

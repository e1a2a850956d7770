"""libgen: a declarative code-template compiler for Effect-based TypeScript libraries.

Quick usage::

    from libgen.registry import TemplateGenerator

    generator = TemplateGenerator()
    for result in generator.generate_domain("customer", "@shop"):
        for file in result.files:
            print(file.path)
"""

__version__ = "0.1.0"

from libgen.errors import (
    CompilationError,
    ContextValidationError,
    DefinitionLoadError,
    FragmentNotFoundError,
    GenerationError,
    InterpolationError,
    LibgenError,
    TemplateNotFoundError,
)
from libgen.naming import NamingVariants, create_naming_variants

__all__ = [
    "CompilationError",
    "ContextValidationError",
    "DefinitionLoadError",
    "FragmentNotFoundError",
    "GenerationError",
    "InterpolationError",
    "LibgenError",
    "NamingVariants",
    "TemplateNotFoundError",
    "__version__",
    "create_naming_variants",
]

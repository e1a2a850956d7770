"""Template registry, generator and telemetry."""

from libgen.registry import generate
from libgen.registry.generator import (
    GeneratedFile,
    GenerationResult,
    GeneratorOptions,
    TemplateGenerator,
    get_output_path,
)
from libgen.registry.registry import (
    ContextValidation,
    RegisteredTemplate,
    TemplateRegistry,
    create_template_registry,
    get_template_registry,
    validate_context,
)
from libgen.registry.telemetry import InMemoryTelemetry, NullTelemetry, TelemetrySink

__all__ = [
    "ContextValidation",
    "GeneratedFile",
    "GenerationResult",
    "GeneratorOptions",
    "InMemoryTelemetry",
    "NullTelemetry",
    "RegisteredTemplate",
    "TelemetrySink",
    "TemplateGenerator",
    "TemplateRegistry",
    "create_template_registry",
    "generate",
    "get_output_path",
    "get_template_registry",
    "validate_context",
]

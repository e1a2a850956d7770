"""Template generator: context building, path mapping and batch generation.

Generation never touches the filesystem.  Every call returns
:class:`GeneratedFile` records (path relative to the library root plus the
rendered content); persisting them is the job of a writer from
:mod:`libgen.writer`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from libgen.config import GeneratorConfig
from libgen.errors import (
    CompilationError,
    ContextValidationError,
    GenerationError,
    TemplateNotFoundError,
)
from libgen.naming import create_naming_variants
from libgen.templates.compiler import TemplateCompiler

from .registry import TemplateRegistry, get_template_registry, validate_context
from .telemetry import (
    FILES_GENERATED,
    GENERATION_DURATION,
    InMemoryTelemetry,
    NullTelemetry,
    TelemetrySink,
)

logger = logging.getLogger(__name__)

Context = Mapping[str, Any]

# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------


class GeneratedFile(BaseModel):
    """One rendered file, relative to its library root."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str
    template_id: str


class GenerationResult(BaseModel):
    """Files produced for one artifact kind."""

    model_config = ConfigDict(frozen=True)

    library_type: str
    files: list[GeneratedFile] = Field(default_factory=list)
    duration_ms: float = Field(default=0.0, ge=0)
    warnings: Optional[list[str]] = None


class GeneratorOptions(BaseModel):
    """Request for :meth:`TemplateGenerator.generate_library`."""

    name: str = Field(..., min_length=1)
    scope: str = Field(..., min_length=1)
    library_type: str
    file_types: Optional[list[str]] = Field(
        default=None, description="Subset of file kinds; all registered kinds when omitted"
    )
    context: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Output paths
# ---------------------------------------------------------------------------

OUTPUT_PATHS: dict[str, str] = {
    "errors": "src/{fileName}/errors.ts",
    "events": "src/{fileName}/events.ts",
    "ports": "src/{fileName}/ports.ts",
    "layers": "src/server/layers.ts",
    "service": "src/server/service.ts",
    "types": "src/{fileName}/types.ts",
    "index": "src/index.ts",
    "config": "src/{fileName}/config.ts",
}


def get_output_path(file_type: str, file_name: str) -> str:
    """Map a file kind to its path inside the library; unknown kinds go to ``src/<kind>.ts``."""
    pattern = OUTPUT_PATHS.get(file_type)
    if pattern is None:
        return f"src/{file_type}.ts"
    return pattern.replace("{fileName}", file_name)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class TemplateGenerator:
    """Generates files from the template registry.

    Args:
        registry: Template catalog. Defaults to the shared frozen registry.
        compiler: Compiler instance. Defaults to one bound to the shared
            fragment registry.
        telemetry: Metrics sink. Defaults to :class:`InMemoryTelemetry`, or
            :class:`NullTelemetry` when ``config.telemetry_enabled`` is false.
        config: Generator settings.
    """

    def __init__(
        self,
        registry: Optional[TemplateRegistry] = None,
        compiler: Optional[TemplateCompiler] = None,
        telemetry: Optional[TelemetrySink] = None,
        config: Optional[GeneratorConfig] = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self.registry = registry if registry is not None else get_template_registry()
        self.compiler = compiler or TemplateCompiler()
        if telemetry is None:
            telemetry = InMemoryTelemetry() if self.config.telemetry_enabled else NullTelemetry()
        self.telemetry = telemetry

    # -- Context -----------------------------------------------------------

    def build_context(
        self,
        name: str,
        scope: str,
        library_type: str,
        overrides: Optional[Context] = None,
    ) -> Context:
        """Assemble the read-only context for one library.

        Overrides replace derived values key by key.  Replacing one naming
        variant does not re-derive the others.
        """
        naming = create_naming_variants(name)
        file_name = naming.file_name
        overrides = dict(overrides or {})

        context: dict[str, Any] = {
            **naming.as_context(),
            "scope": scope,
            "packageName": f"{scope}/{library_type}-{file_name}",
            "projectName": f"{library_type}-{file_name}",
            "libraryType": library_type,
            "entityTypeSource": self.config.entity_type_source,
        }
        for key in overrides:
            if key in context and overrides[key] != context[key]:
                logger.debug("Context override %s: %r -> %r", key, context[key], overrides[key])
        context.update(overrides)
        return MappingProxyType(context)

    # -- Single file -------------------------------------------------------

    def generate_file(self, library_type: str, file_type: str, context: Context) -> GeneratedFile:
        """Render one template.

        Raises:
            TemplateNotFoundError: No template for ``library_type/file_type``.
            ContextValidationError: Declared required variables are missing.
            GenerationError: Compilation failed.
        """
        key = f"{library_type}/{file_type}"
        template = self.registry.get(key)
        if template is None:
            raise TemplateNotFoundError(library_type, file_type)

        validation = validate_context(key, context, self.registry)
        if not validation.valid:
            raise ContextValidationError(key, validation.missing)

        try:
            content = self.compiler.compile(template.definition, context)
        except CompilationError as exc:
            raise GenerationError(key, exc) from exc

        self.telemetry.increment(
            FILES_GENERATED, {"library_type": library_type, "file_type": file_type}
        )
        path = get_output_path(file_type, str(context.get("fileName", "")))
        logger.debug("Generated %s -> %s", key, path)
        return GeneratedFile(path=path, content=content, template_id=template.definition.id)

    # -- Batches -----------------------------------------------------------

    def generate_library(self, options: GeneratorOptions) -> GenerationResult:
        """Generate every requested file kind for one artifact kind.

        A file kind without a template becomes a warning and the batch goes
        on; every other failure propagates.
        """
        start = time.monotonic()
        context = self.build_context(
            options.name, options.scope, options.library_type, options.context
        )
        file_types = (
            options.file_types
            if options.file_types is not None
            else self.registry.file_kinds(options.library_type)
        )

        files: list[GeneratedFile] = []
        warnings: list[str] = []
        for file_type in file_types:
            key = f"{options.library_type}/{file_type}"
            if not self.registry.has(key):
                logger.warning("Template not found: %s", key)
                warnings.append(f"Template not found: {key}")
                continue
            files.append(self.generate_file(options.library_type, file_type, context))

        duration_ms = (time.monotonic() - start) * 1000
        self.telemetry.observe(
            GENERATION_DURATION, duration_ms, {"library_type": options.library_type}
        )
        logger.info(
            "Generated %d file(s) for %s %s in %.1fms",
            len(files),
            options.library_type,
            options.name,
            duration_ms,
        )
        return GenerationResult(
            library_type=options.library_type,
            files=files,
            duration_ms=duration_ms,
            warnings=warnings or None,
        )

    def generate_domain(
        self,
        name: str,
        scope: str,
        library_types: Optional[Sequence[str]] = None,
        context: Optional[Context] = None,
    ) -> list[GenerationResult]:
        """Run :meth:`generate_library` once per artifact kind, in order."""
        kinds = list(library_types) if library_types is not None else list(self.config.domain_kinds)
        return [
            self.generate_library(
                GeneratorOptions(name=name, scope=scope, library_type=kind, context=dict(context or {}))
            )
            for kind in kinds
        ]

    async def generate_domain_async(
        self,
        name: str,
        scope: str,
        library_types: Optional[Sequence[str]] = None,
        context: Optional[Context] = None,
    ) -> list[GenerationResult]:
        """Like :meth:`generate_domain`, each kind compiled in a worker thread.

        Results keep the requested order.
        """
        kinds = list(library_types) if library_types is not None else list(self.config.domain_kinds)
        options = [
            GeneratorOptions(name=name, scope=scope, library_type=kind, context=dict(context or {}))
            for kind in kinds
        ]
        results = await asyncio.gather(
            *(asyncio.to_thread(self.generate_library, opts) for opts in options)
        )
        return list(results)

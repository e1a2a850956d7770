"""Tests for the template generator (libgen.registry.generator) and the
``generate`` shortcuts.

Covers:
- Context assembly and override policy
- Single-file generation and its failure kinds
- Partial batches with warnings
- Telemetry counters and histograms
- Sequential and concurrent domain generation
"""

from __future__ import annotations

import logging

import pytest

from libgen.config import GeneratorConfig
from libgen.errors import (
    CompilationError,
    ContextValidationError,
    GenerationError,
    TemplateNotFoundError,
)
from libgen.registry import generate
from libgen.registry.generator import (
    GeneratorOptions,
    TemplateGenerator,
    get_output_path,
)
from libgen.registry.registry import TemplateRegistry
from libgen.registry.telemetry import (
    FILES_GENERATED,
    GENERATION_DURATION,
    InMemoryTelemetry,
    NullTelemetry,
)
from libgen.templates.models import TemplateDefinition, TemplateMetadata

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Output paths
# ---------------------------------------------------------------------------


class TestOutputPaths:
    @pytest.mark.parametrize(
        "file_type, expected",
        [
            ("errors", "src/user/errors.ts"),
            ("ports", "src/user/ports.ts"),
            ("layers", "src/server/layers.ts"),
            ("service", "src/server/service.ts"),
            ("index", "src/index.ts"),
            ("handlers", "src/handlers.ts"),
        ],
    )
    def test_paths(self, file_type, expected):
        assert get_output_path(file_type, "user") == expected


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


class TestBuildContext:
    def test_derived_values(self, generator: TemplateGenerator):
        ctx = generator.build_context("order-item", "@shop", "data-access")
        assert ctx["className"] == "OrderItem"
        assert ctx["fileName"] == "order-item"
        assert ctx["scope"] == "@shop"
        assert ctx["packageName"] == "@shop/data-access-order-item"
        assert ctx["projectName"] == "data-access-order-item"
        assert ctx["libraryType"] == "data-access"
        assert ctx["entityTypeSource"] == "./types"

    def test_context_is_read_only(self, generator: TemplateGenerator):
        ctx = generator.build_context("user", "@app", "contract")
        with pytest.raises(TypeError):
            ctx["className"] = "Other"

    def test_overrides_replace_without_rederiving(self, generator: TemplateGenerator, caplog):
        with caplog.at_level(logging.DEBUG, logger="libgen.registry.generator"):
            ctx = generator.build_context(
                "user", "@app", "contract", {"className": "Account", "includeCQRS": True}
            )
        assert ctx["className"] == "Account"
        assert ctx["propertyName"] == "user"
        assert ctx["includeCQRS"] is True
        assert "Context override className" in caplog.text
        assert "includeCQRS" not in caplog.text

    def test_entity_type_source_from_config(self, template_registry, compiler):
        generator = TemplateGenerator(
            registry=template_registry,
            compiler=compiler,
            config=GeneratorConfig(entity_type_source="@app/db"),
        )
        assert generator.build_context("user", "@app", "contract")["entityTypeSource"] == "@app/db"

    def test_invalid_name(self, generator: TemplateGenerator):
        with pytest.raises(ValueError):
            generator.build_context("--", "@app", "contract")


# ---------------------------------------------------------------------------
# Single file
# ---------------------------------------------------------------------------


class TestGenerateFile:
    def test_contract_errors(self, generator: TemplateGenerator):
        ctx = generator.build_context("user", "@app", "contract")
        generated = generator.generate_file("contract", "errors", ctx)
        assert generated.path == "src/user/errors.ts"
        assert generated.template_id == "contract/errors"
        assert "export class UserNotFoundError extends Data.TaggedError(" in generated.content
        assert "readonly userId: string" in generated.content
        assert "`User not found: ${userId}`" in generated.content

    def test_unknown_template(self, generator: TemplateGenerator):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            generator.generate_file("contract", "nope", {})
        assert exc_info.value.key == "contract/nope"
        assert str(exc_info.value) == "Template not found: contract/nope"

    def test_missing_required_context(self, generator: TemplateGenerator, user_context):
        context = {k: v for k, v in user_context.items() if k != "scope"}
        with pytest.raises(ContextValidationError) as exc_info:
            generator.generate_file("contract", "errors", context)
        assert exc_info.value.missing == ["scope"]
        assert exc_info.value.template_key == "contract/errors"

    def test_compilation_failure_is_wrapped(
        self, generator: TemplateGenerator, template_registry: TemplateRegistry, user_context
    ):
        definition = TemplateDefinition.model_validate(
            {
                "id": "custom/broken",
                "meta": {"title": "{className}"},
                "sections": [{"content": {"type": "raw", "value": "{undeclaredVar}"}}],
            }
        )
        metadata = TemplateMetadata(
            artifact_kind="custom", file_kind="broken", required_context=["className"]
        )
        template_registry.register(definition, metadata)
        with pytest.raises(GenerationError) as exc_info:
            generator.generate_file("custom", "broken", user_context)
        assert exc_info.value.template_key == "custom/broken"
        assert isinstance(exc_info.value.cause, CompilationError)

    def test_counter_is_tagged(self, generator: TemplateGenerator, telemetry: InMemoryTelemetry):
        ctx = generator.build_context("user", "@app", "contract")
        generator.generate_file("contract", "errors", ctx)
        generator.generate_file("contract", "errors", ctx)
        assert telemetry.counter(
            FILES_GENERATED, {"library_type": "contract", "file_type": "errors"}
        ) == 2

    def test_failed_file_is_not_counted(self, generator: TemplateGenerator, telemetry: InMemoryTelemetry):
        with pytest.raises(TemplateNotFoundError):
            generator.generate_file("contract", "nope", {})
        assert telemetry.counter_total(FILES_GENERATED) == 0


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------


class TestGenerateLibrary:
    def test_all_file_kinds(self, generator: TemplateGenerator, telemetry: InMemoryTelemetry):
        result = generator.generate_library(
            GeneratorOptions(name="user", scope="@app", library_type="contract")
        )
        assert result.library_type == "contract"
        assert [f.path for f in result.files] == [
            "src/user/errors.ts",
            "src/user/events.ts",
            "src/user/ports.ts",
        ]
        assert result.warnings is None
        assert result.duration_ms >= 0
        histogram = telemetry.histogram(GENERATION_DURATION, {"library_type": "contract"})
        assert histogram is not None and histogram.count == 1

    def test_partial_batch_collects_warnings(self, generator: TemplateGenerator, caplog):
        with caplog.at_level(logging.WARNING):
            result = generator.generate_library(
                GeneratorOptions(
                    name="user",
                    scope="@app",
                    library_type="contract",
                    file_types=["errors", "doesNotExist"],
                )
            )
        assert len(result.files) == 1
        assert result.files[0].template_id == "contract/errors"
        assert result.warnings == ["Template not found: contract/doesNotExist"]
        assert "contract/doesNotExist" in caplog.text

    def test_unknown_kind_yields_empty_result(self, generator: TemplateGenerator):
        result = generator.generate_library(
            GeneratorOptions(name="user", scope="@app", library_type="unknown")
        )
        assert result.files == []
        assert result.warnings is None

    def test_context_flags_reach_templates(self, generator: TemplateGenerator):
        result = generator.generate_library(
            GeneratorOptions(
                name="user",
                scope="@app",
                library_type="contract",
                file_types=["ports"],
                context={"includeCQRS": True},
            )
        )
        assert "UserProjectionRepository" in result.files[0].content

    def test_disabled_telemetry_uses_null_sink(self, template_registry, compiler):
        generator = TemplateGenerator(
            registry=template_registry,
            compiler=compiler,
            config=GeneratorConfig(telemetry_enabled=False),
        )
        assert isinstance(generator.telemetry, NullTelemetry)


class TestGenerateDomain:
    def test_default_kinds_in_order(self, generator: TemplateGenerator):
        results = generator.generate_domain("customer", "@shop")
        assert [r.library_type for r in results] == ["contract", "data-access", "feature"]

    def test_explicit_kinds(self, generator: TemplateGenerator):
        results = generator.generate_domain("customer", "@shop", ["provider"])
        assert len(results) == 1
        assert [f.template_id for f in results[0].files] == ["provider/errors", "provider/service"]

    @pytest.mark.asyncio
    async def test_async_matches_sequential(self, generator: TemplateGenerator):
        kinds = ["contract", "data-access", "feature"]
        concurrent = await generator.generate_domain_async("customer", "@shop", kinds)
        sequential = generator.generate_domain("customer", "@shop", kinds)
        assert [r.library_type for r in concurrent] == kinds
        for a, b in zip(concurrent, sequential):
            assert [f.content for f in a.files] == [f.content for f in b.files]


# ---------------------------------------------------------------------------
# Shortcuts
# ---------------------------------------------------------------------------


class TestShortcuts:
    @pytest.mark.parametrize(
        "helper, kind",
        [
            (generate.contract, "contract"),
            (generate.data_access, "data-access"),
            (generate.feature, "feature"),
            (generate.infra, "infra"),
            (generate.provider, "provider"),
        ],
    )
    def test_single_kind(self, generator: TemplateGenerator, helper, kind):
        result = helper("user", "@app", generator=generator)
        assert result.library_type == kind
        assert result.files

    def test_full_domain(self, generator: TemplateGenerator):
        results = generate.full_domain("customer", "@shop", generator=generator)
        assert [r.library_type for r in results] == list(generate.FULL_DOMAIN_KINDS)

    def test_default_generator(self):
        result = generate.contract("user", "@app")
        assert len(result.files) == 3

"""Tests for the template compiler (libgen.templates.compiler).

Covers:
- Header, import and section layout
- Fail-fast validation before any output
- Conditional blocks (isolation and ordering)
- Import de-duplication and fragment-required imports
- Opaque static-method bodies
- Determinism
"""

from __future__ import annotations

from typing import Any

import pytest

from libgen.errors import CompilationError, FragmentNotFoundError, InterpolationError
from libgen.fragments.error_fragment import not_found_error_fragment
from libgen.fragments.models import (
    ErrorStaticMethod,
    MethodParam,
    TaggedErrorFragmentConfig,
)
from libgen.fragments.service_fragment import repository_fragment
from libgen.templates.compiler import BANNER_RULE, TemplateCompiler, is_active
from libgen.templates.models import TemplateDefinition

pytestmark = pytest.mark.unit


def _definition(**overrides: Any) -> TemplateDefinition:
    data: dict[str, Any] = {"id": "test/file", "meta": {"title": "{className} File"}, "sections": []}
    data.update(overrides)
    return TemplateDefinition.model_validate(data)


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class TestLayout:
    def test_full_layout(self, compiler: TemplateCompiler, user_context, cqrs_definition):
        output = compiler.compile(cqrs_definition, user_context)
        assert output == (
            "/**\n"
            " * User Ports\n"
            " *\n"
            " * @module @app/contract-user\n"
            " */\n"
            "\n"
            'import type { Effect } from "effect"\n'
            "\n"
            f"{BANNER_RULE}\n"
            "// Base\n"
            f"{BANNER_RULE}\n"
            "\n"
            "export type UserId = string\n"
        )

    def test_multiline_description(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            meta={"title": "T", "description": "First {className}\n\nThird"}
        )
        output = compiler.compile(definition, user_context)
        assert output.startswith("/**\n * T\n *\n * First User\n *\n * Third\n */\n")

    def test_untitled_section_has_no_banner(self, compiler: TemplateCompiler, user_context):
        definition = _definition(sections=[{"content": {"type": "raw", "value": "const a = 1"}}])
        output = compiler.compile(definition, user_context)
        assert "// =" not in output
        assert output.endswith("\n\nconst a = 1\n")

    def test_list_content_renders_each_block(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            sections=[
                {
                    "content": [
                        {"type": "raw", "value": "const a = 1"},
                        {"type": "raw", "value": "const b = 2"},
                    ]
                }
            ]
        )
        assert "const a = 1\n\nconst b = 2\n" in compiler.compile(definition, user_context)

    def test_interface_shape(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            sections=[
                {
                    "content": {
                        "type": "interface",
                        "config": {
                            "name": "{className}Filters",
                            "jsdoc": "Filters for {propertyName}",
                            "extends": ["Base"],
                            "properties": [
                                {"name": "createdAfter", "type": "Date", "optional": True, "jsdoc": "From"},
                                {"name": "limit", "type": "number", "readonly": False},
                            ],
                        },
                    }
                }
            ]
        )
        output = compiler.compile(definition, user_context)
        assert (
            "/**\n"
            " * Filters for user\n"
            " */\n"
            "export interface UserFilters extends Base {\n"
            "  /** From */\n"
            "  readonly createdAfter?: Date\n"
            "  limit: number\n"
            "}\n"
        ) in output


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_missing_variables_fail_before_output(self, compiler: TemplateCompiler):
        definition = _definition(
            meta={"title": "{className}", "module": "{scope}/x"},
            sections=[{"content": {"type": "raw", "value": "{fileName} {className}"}}],
        )
        with pytest.raises(CompilationError) as exc_info:
            compiler.compile(definition, {})
        cause = exc_info.value.cause
        assert isinstance(cause, InterpolationError)
        assert cause.missing == ["className", "scope", "fileName"]
        assert exc_info.value.template_id == "test/file"

    def test_validate_reports_without_raising(self, compiler: TemplateCompiler):
        definition = _definition(sections=[{"content": {"type": "raw", "value": "{a} {b}"}}])
        assert compiler.validate(definition, {"className": "X", "a": 1}) == ["b"]

    def test_unknown_fragment_type(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            sections=[{"content": {"type": "fragment", "fragment": "nope", "config": {}}}]
        )
        with pytest.raises(CompilationError) as exc_info:
            compiler.compile(definition, user_context)
        assert isinstance(exc_info.value.cause, FragmentNotFoundError)
        assert exc_info.value.cause.fragment_type == "nope"

    def test_invalid_fragment_config_is_structural_failure(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            sections=[
                {"content": {"type": "fragment", "fragment": "tagged_error", "config": {"bogus": 1}}}
            ]
        )
        with pytest.raises(CompilationError):
            compiler.compile(definition, user_context)


# ---------------------------------------------------------------------------
# Conditionals
# ---------------------------------------------------------------------------


class TestConditionals:
    def test_absent_flag_omits_block(self, compiler: TemplateCompiler, user_context, cqrs_definition):
        output = compiler.compile(cqrs_definition, user_context)
        assert "Projection" not in output
        assert "./projections" not in output

    def test_false_flag_omits_block(self, compiler: TemplateCompiler, user_context, cqrs_definition):
        output = compiler.compile(cqrs_definition, {**user_context, "includeCQRS": False})
        assert "UserProjectionPort" not in output

    def test_true_flag_includes_block(self, compiler: TemplateCompiler, user_context, cqrs_definition):
        ctx = {**user_context, "includeCQRS": True, "projectionName": "makeProjection()"}
        output = compiler.compile(cqrs_definition, ctx)
        assert 'import { UserProjection } from "./projections"' in output
        assert "export const UserProjectionPort = makeProjection()" in output
        assert output.index("// Base") < output.index("// Projection")

    def test_variables_of_inactive_block_not_required(self, compiler: TemplateCompiler, user_context, cqrs_definition):
        assert compiler.validate(cqrs_definition, user_context) == []
        missing = compiler.validate(cqrs_definition, {**user_context, "includeCQRS": True})
        assert missing == ["projectionName"]

    def test_blocks_follow_flag_declaration_order(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            sections=[{"content": {"type": "raw", "value": "// base"}}],
            conditionals={
                "second": {"sections": [{"content": {"type": "raw", "value": "// second"}}]},
                "first": {"sections": [{"content": {"type": "raw", "value": "// first"}}]},
            },
        )
        output = compiler.compile(definition, {**user_context, "first": True, "second": True})
        assert output.index("// base") < output.index("// second") < output.index("// first")

    def test_section_condition(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            sections=[
                {"condition": "withExtras", "content": {"type": "raw", "value": "extra {missingVar}"}},
                {"content": {"type": "raw", "value": "always"}},
            ]
        )
        output = compiler.compile(definition, user_context)
        assert "extra" not in output
        assert "always" in output

    def test_gated_fragment_section_drops_banner(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            sections=[
                {"content": {"type": "raw", "value": "// base"}},
                {
                    "title": "CQRS {projectionTitle}",
                    "content": {
                        "type": "fragment",
                        "fragment": "context_tag",
                        "condition": "includeCQRS",
                        "config": repository_fragment("{className}Projection"),
                    },
                },
            ]
        )
        output = compiler.compile(definition, user_context)
        assert "CQRS" not in output
        assert BANNER_RULE not in output
        assert output.endswith("// base\n")

        enabled = compiler.compile(
            definition, {**user_context, "includeCQRS": True, "projectionTitle": "Projection Port"}
        )
        assert "// CQRS Projection Port" in enabled
        assert "UserProjectionRepository" in enabled

    def test_partially_gated_section_keeps_banner(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            sections=[
                {
                    "title": "Errors",
                    "content": [
                        {"type": "raw", "value": "// always"},
                        {
                            "type": "fragment",
                            "fragment": "tagged_error",
                            "condition": "withExtras",
                            "config": not_found_error_fragment("{className}"),
                        },
                    ],
                }
            ]
        )
        output = compiler.compile(definition, user_context)
        assert "// Errors" in output
        assert "// always" in output
        assert "NotFoundError" not in output

    def test_is_active(self):
        assert is_active(None, {})
        assert is_active("flag", {"flag": True})
        assert not is_active("flag", {"flag": False})
        assert not is_active("flag", {})


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


class TestImports:
    def test_duplicate_imports_across_entries(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            imports=[
                {"from": "effect", "items": ["Effect"]},
                {"from": "./errors", "items": ["{className}NotFoundError"]},
                {"from": "effect", "items": ["Effect", "Layer"]},
            ]
        )
        output = compiler.compile(definition, user_context)
        assert output.count("import ") == 2
        assert 'import { Effect, Layer } from "effect"' in output
        assert 'import { UserNotFoundError } from "./errors"' in output

    def test_fragment_required_imports_are_merged(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            imports=[{"from": "effect", "items": ["Effect", "Option"]}],
            sections=[
                {"content": {"type": "context_tag", "config": repository_fragment("{className}")}},
                {
                    "content": {
                        "type": "fragment",
                        "fragment": "tagged_error",
                        "config": not_found_error_fragment("{className}"),
                    }
                },
            ],
        )
        output = compiler.compile(definition, user_context)
        assert 'import { Effect, Option, Context, Data } from "effect"' in output
        assert output.count('from "effect"') == 1

    def test_import_condition(self, compiler: TemplateCompiler, user_context):
        definition = _definition(
            imports=[
                {"from": "effect", "items": ["Effect"]},
                {"from": "./extra", "items": ["Extra"], "condition": "withExtra"},
            ]
        )
        assert "./extra" not in compiler.compile(definition, user_context)
        assert "./extra" in compiler.compile(definition, {**user_context, "withExtra": True})


# ---------------------------------------------------------------------------
# Opaque bodies and determinism
# ---------------------------------------------------------------------------


class TestOpaqueBodies:
    def test_body_emitted_verbatim(self, compiler: TemplateCompiler, user_context):
        body = "return new this({ message: `{notInContext} missing: ${id}` })"
        config = TaggedErrorFragmentConfig(
            class_name="{className}MissingError",
            fields=[],
            static_methods=[
                ErrorStaticMethod(name="create", params=[MethodParam(name="id", type="string")], body=body)
            ],
        )
        definition = _definition(
            sections=[{"content": {"type": "fragment", "fragment": "tagged_error", "config": config}}]
        )
        output = compiler.compile(definition, user_context)
        assert body in output
        assert "class UserMissingError" in output


class TestDeterminism:
    def test_same_input_same_output(self, compiler: TemplateCompiler, user_context, cqrs_definition):
        ctx = {**user_context, "includeCQRS": True, "projectionName": "p"}
        first = compiler.compile(cqrs_definition, ctx)
        second = compiler.compile(cqrs_definition, ctx)
        assert first == second

    def test_fresh_compiler_same_output(self, fragment_registry, user_context, cqrs_definition):
        a = TemplateCompiler(fragments=fragment_registry).compile(cqrs_definition, user_context)
        b = TemplateCompiler().compile(cqrs_definition, user_context)
        assert a == b

"""Shared pytest fixtures for the libgen test suite.

Provides reusable fixtures for:
- Naming contexts for a sample domain
- Isolated fragment and template registries
- A compiler and generator wired to those isolated registries
- Small template definitions exercising every content shape
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from libgen.config import GeneratorConfig
from libgen.fragments.registry import FragmentRegistry, create_fragment_registry
from libgen.registry.generator import TemplateGenerator
from libgen.registry.registry import TemplateRegistry, create_template_registry
from libgen.registry.telemetry import InMemoryTelemetry
from libgen.templates.compiler import TemplateCompiler
from libgen.templates.models import TemplateDefinition


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------


@pytest.fixture
def user_context() -> dict[str, Any]:
    """Complete context for a ``user`` contract library."""
    return {
        "name": "user",
        "className": "User",
        "propertyName": "user",
        "fileName": "user",
        "constantName": "USER",
        "scope": "@app",
        "libraryType": "contract",
        "packageName": "@app/contract-user",
        "projectName": "contract-user",
        "entityTypeSource": "./types",
    }


@pytest.fixture
def order_context(user_context: dict[str, Any]) -> dict[str, Any]:
    return {
        **user_context,
        "name": "order",
        "className": "Order",
        "propertyName": "order",
        "fileName": "order",
        "constantName": "ORDER",
        "packageName": "@app/contract-order",
        "projectName": "contract-order",
    }


# ---------------------------------------------------------------------------
# Registries, compiler, generator
# ---------------------------------------------------------------------------


@pytest.fixture
def fragment_registry() -> FragmentRegistry:
    """Fresh, mutable fragment registry with the built-in types."""
    return create_fragment_registry(builtins=True)


@pytest.fixture
def compiler(fragment_registry: FragmentRegistry) -> TemplateCompiler:
    return TemplateCompiler(fragments=fragment_registry)


@pytest.fixture
def template_registry() -> TemplateRegistry:
    """Fresh, mutable template registry seeded with the built-in catalog."""
    return create_template_registry(builtins=True)


@pytest.fixture
def telemetry() -> InMemoryTelemetry:
    return InMemoryTelemetry()


@pytest.fixture
def generator_config(tmp_path: Path) -> GeneratorConfig:
    return GeneratorConfig(output_dir=tmp_path)


@pytest.fixture
def generator(
    template_registry: TemplateRegistry,
    compiler: TemplateCompiler,
    telemetry: InMemoryTelemetry,
    generator_config: GeneratorConfig,
) -> TemplateGenerator:
    return TemplateGenerator(
        registry=template_registry,
        compiler=compiler,
        telemetry=telemetry,
        config=generator_config,
    )


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------


@pytest.fixture
def cqrs_definition() -> TemplateDefinition:
    """Definition with a base section and an ``includeCQRS`` conditional block."""
    return TemplateDefinition.model_validate(
        {
            "id": "test/cqrs",
            "meta": {"title": "{className} Ports", "module": "{scope}/contract-{fileName}"},
            "imports": [{"from": "effect", "items": ["Effect"], "type_only": True}],
            "sections": [
                {
                    "title": "Base",
                    "content": {"type": "raw", "value": "export type {className}Id = string"},
                }
            ],
            "conditionals": {
                "includeCQRS": {
                    "imports": [{"from": "./projections", "items": ["{className}Projection"]}],
                    "sections": [
                        {
                            "title": "Projection",
                            "content": {
                                "type": "raw",
                                "value": "export const {className}ProjectionPort = {projectionName}",
                            },
                        }
                    ],
                }
            },
        }
    )

"""Shortcuts for the common generation requests.

    from libgen.registry import generate

    result = generate.contract("user", "@app")
    results = generate.full_domain("customer", "@shop")
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from .generator import GenerationResult, GeneratorOptions, TemplateGenerator

FULL_DOMAIN_KINDS = ("contract", "data-access", "feature")


def _library(
    library_type: str,
    name: str,
    scope: str,
    context: Optional[Mapping[str, Any]],
    generator: Optional[TemplateGenerator],
) -> GenerationResult:
    generator = generator or TemplateGenerator()
    return generator.generate_library(
        GeneratorOptions(name=name, scope=scope, library_type=library_type, context=dict(context or {}))
    )


def contract(name: str, scope: str, context=None, generator=None) -> GenerationResult:
    return _library("contract", name, scope, context, generator)


def data_access(name: str, scope: str, context=None, generator=None) -> GenerationResult:
    return _library("data-access", name, scope, context, generator)


def feature(name: str, scope: str, context=None, generator=None) -> GenerationResult:
    return _library("feature", name, scope, context, generator)


def infra(name: str, scope: str, context=None, generator=None) -> GenerationResult:
    return _library("infra", name, scope, context, generator)


def provider(name: str, scope: str, context=None, generator=None) -> GenerationResult:
    return _library("provider", name, scope, context, generator)


def full_domain(
    name: str,
    scope: str,
    context: Optional[Mapping[str, Any]] = None,
    generator: Optional[TemplateGenerator] = None,
) -> list[GenerationResult]:
    """Contract, data-access and feature libraries for one domain."""
    generator = generator or TemplateGenerator()
    return generator.generate_domain(name, scope, FULL_DOMAIN_KINDS, context)

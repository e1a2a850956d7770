"""Data-access templates: infrastructure errors and environment layers."""

from __future__ import annotations

from libgen.fragments.layer_fragment import composed_layer_fragment
from libgen.fragments.models import (
    ErrorField,
    ErrorStaticMethod,
    MethodParam,
    TaggedErrorFragmentConfig,
)
from libgen.templates.models import TemplateDefinition

from .common import catalog_entry, fragment, raw

# ---------------------------------------------------------------------------
# data-access/errors
# ---------------------------------------------------------------------------

_MESSAGE = ErrorField(name="message", type="string", jsdoc="Human-readable error message")

connection_error = TaggedErrorFragmentConfig(
    class_name="{className}ConnectionError",
    jsdoc="Database connection failure for {propertyName} data access",
    fields=[_MESSAGE, ErrorField(name="cause", type="string", optional=True, jsdoc="Underlying connection error")],
    static_methods=[
        ErrorStaticMethod(
            name="create",
            params=[MethodParam(name="cause", type="string", optional=True)],
            body=(
                "return new this({\n"
                "      message: cause\n"
                "        ? `Database connection failed: ${cause}`\n"
                '        : "Database connection failed",\n'
                "      ...(cause !== undefined && { cause })\n"
                "    })"
            ),
        )
    ],
)

timeout_error = TaggedErrorFragmentConfig(
    class_name="{className}TimeoutError",
    jsdoc="Operation timeout for {propertyName} data access",
    fields=[
        _MESSAGE,
        ErrorField(name="operation", type="string", jsdoc="Operation that timed out"),
        ErrorField(name="timeoutMs", type="number", optional=True, jsdoc="Timeout duration in milliseconds"),
    ],
    static_methods=[
        ErrorStaticMethod(
            name="create",
            params=[MethodParam(name="params", type="{ operation: string; timeoutMs?: number }")],
            body=(
                "return new this({\n"
                "      message: params.timeoutMs\n"
                "        ? `Operation '${params.operation}' timed out after ${params.timeoutMs}ms`\n"
                "        : `Operation '${params.operation}' timed out`,\n"
                "      operation: params.operation,\n"
                "      ...(params.timeoutMs !== undefined && { timeoutMs: params.timeoutMs })\n"
                "    })"
            ),
        )
    ],
)

transaction_error = TaggedErrorFragmentConfig(
    class_name="{className}TransactionError",
    jsdoc="Transaction failure for {propertyName} data access",
    fields=[
        _MESSAGE,
        ErrorField(name="operation", type="string", jsdoc="Transaction operation that failed"),
        ErrorField(name="cause", type="string", optional=True, jsdoc="Underlying transaction error"),
    ],
    static_methods=[
        ErrorStaticMethod(
            name="create",
            params=[MethodParam(name="params", type="{ operation: string; cause?: string }")],
            body=(
                "return new this({\n"
                "      message: params.cause\n"
                "        ? `Transaction failed during '${params.operation}': ${params.cause}`\n"
                "        : `Transaction failed during '${params.operation}'`,\n"
                "      operation: params.operation,\n"
                "      ...(params.cause !== undefined && { cause: params.cause })\n"
                "    })"
            ),
        )
    ],
)

data_access_errors_template = TemplateDefinition.model_validate(
    {
        "id": "data-access/errors",
        "meta": {
            "title": "{className} Data Access Infrastructure Errors",
            "description": (
                "Infrastructure-specific errors for data-access layer operations.\n"
                "\n"
                "Domain errors are defined in {scope}/contract-{fileName}; import them from there."
            ),
            "module": "{scope}/data-access-{fileName}/errors",
        },
        "imports": [
            {
                "from": "{scope}/contract-{fileName}",
                "items": ["{className}RepositoryError"],
                "type_only": True,
            }
        ],
        "sections": [
            {
                "title": "Infrastructure Errors (Data-Access Specific)",
                "content": [
                    fragment("tagged_error", connection_error),
                    fragment("tagged_error", timeout_error),
                    fragment("tagged_error", transaction_error),
                ],
            },
            {
                "title": "Infrastructure Error Union Type",
                "content": raw(
                    "export type {className}InfrastructureError =\n"
                    "  | {className}ConnectionError\n"
                    "  | {className}TimeoutError\n"
                    "  | {className}TransactionError"
                ),
            },
            {
                "title": "Combined Data Access Error Type",
                "content": raw(
                    "export type {className}DataAccessError = "
                    "{className}RepositoryError | {className}InfrastructureError"
                ),
            },
        ],
    }
)

# ---------------------------------------------------------------------------
# data-access/layers
# ---------------------------------------------------------------------------

_INFRASTRUCTURE = ("DatabaseService", "LoggingService", "MetricsService", "CacheService")


def _infrastructure_layer(variant: str) -> object:
    return composed_layer_fragment(
        f"Infrastructure{variant}",
        [f"{service}.{variant}" for service in _INFRASTRUCTURE],
        jsdoc=f"{variant} infrastructure layer",
    )


def _domain_layer(variant: str) -> object:
    return composed_layer_fragment(
        f"{{className}}DataAccess{variant}",
        ["{className}Repository.Live"],
        infrastructure_layer=f"Infrastructure{variant}",
        jsdoc=f"{{className}} data access with {variant.lower()} infrastructure",
    )


_AUTO = """/**
 * Selects the data access layer from NODE_ENV
 */
export const {className}DataAccessAuto = Layer.suspend(() => {
  switch (env.NODE_ENV) {
    case "test":
      return {className}DataAccessTest
    case "development":
      return {className}DataAccessDev
    default:
      return {className}DataAccessLive
  }
})"""

data_access_layers_template = TemplateDefinition.model_validate(
    {
        "id": "data-access/layers",
        "meta": {
            "title": "{className} Data Access Layers",
            "description": (
                "Effect layer compositions for {propertyName} data access.\n"
                "\n"
                "- Live: production infrastructure\n"
                "- Dev: local infrastructure\n"
                "- Test: in-memory infrastructure\n"
                "- Auto: selected from NODE_ENV"
            ),
            "module": "{scope}/data-access-{fileName}/server",
        },
        "imports": [
            {"from": "{scope}/env", "items": ["env"]},
            {"from": "{scope}/infra-database", "items": ["DatabaseService"]},
            {"from": "{scope}/infra-observability", "items": ["LoggingService", "MetricsService"]},
            {"from": "{scope}/infra-cache", "items": ["CacheService"]},
            {"from": "./{fileName}-repository", "items": ["{className}Repository"]},
        ],
        "sections": [
            {
                "title": "Infrastructure Layers",
                "content": [fragment("layer", _infrastructure_layer(v)) for v in ("Live", "Dev", "Test")],
            },
            {
                "title": "Domain Layers",
                "content": [fragment("layer", _domain_layer(v)) for v in ("Live", "Dev", "Test")],
            },
            {"title": "Environment-Aware Layer", "content": raw(_AUTO)},
        ],
    }
)


CATALOG = [
    catalog_entry(data_access_errors_template, "Infrastructure errors for data access"),
    catalog_entry(data_access_layers_template, "Live, Dev, Test and Auto layers"),
]

"""Provider templates: adapters around an external SDK.

``externalService`` is optional.  Everything that mentions it lives in a
conditional block keyed on that same variable, so it is only emitted (and
only validated) when a value is supplied.
"""

from __future__ import annotations

from libgen.fragments.models import (
    ContextTagFragmentConfig,
    ErrorField,
    ErrorStaticMethod,
    MethodParam,
    ServiceMethod,
    StaticLayer,
    TaggedErrorFragmentConfig,
)
from libgen.templates.models import TemplateDefinition

from .common import catalog_entry, fragment, raw

_MESSAGE = ErrorField(name="message", type="string")


def _error(suffix: str, jsdoc: str, fields: list[ErrorField], params: list[MethodParam], body: str):
    return TaggedErrorFragmentConfig(
        class_name=f"{{className}}{suffix}",
        jsdoc=jsdoc,
        fields=[_MESSAGE, *fields],
        static_methods=[ErrorStaticMethod(name="create", params=params, body=body)],
    )


PROVIDER_ERRORS = [
    _error(
        "Error",
        "Generic {className} provider error",
        [ErrorField(name="cause", type="unknown", optional=True)],
        [MethodParam(name="message", type="string"), MethodParam(name="cause", type="unknown", optional=True)],
        "return new this({ message, ...(cause !== undefined && { cause }) })",
    ),
    _error(
        "NotFoundError",
        "Resource not found in the external service",
        [ErrorField(name="resourceId", type="string")],
        [MethodParam(name="resourceId", type="string")],
        "return new this({ message: `Resource not found: ${resourceId}`, resourceId })",
    ),
    _error(
        "ValidationError",
        "Request rejected by the external service as invalid",
        [ErrorField(name="field", type="string", optional=True)],
        [MethodParam(name="message", type="string"), MethodParam(name="field", type="string", optional=True)],
        "return new this({ message, ...(field !== undefined && { field }) })",
    ),
    _error(
        "RateLimitError",
        "Rate limit exceeded",
        [ErrorField(name="retryAfterMs", type="number", optional=True)],
        [MethodParam(name="retryAfterMs", type="number", optional=True)],
        "return new this({\n"
        "      message: retryAfterMs\n"
        "        ? `Rate limit exceeded, retry after ${retryAfterMs}ms`\n"
        '        : "Rate limit exceeded",\n'
        "      ...(retryAfterMs !== undefined && { retryAfterMs })\n"
        "    })",
    ),
    _error(
        "AuthenticationError",
        "Credentials were rejected",
        [],
        [MethodParam(name="message", type="string", optional=True)],
        'return new this({ message: message ?? "Authentication failed" })',
    ),
    _error(
        "AuthorizationError",
        "Credentials lack permission for the operation",
        [ErrorField(name="operation", type="string")],
        [MethodParam(name="operation", type="string")],
        "return new this({ message: `Not authorized to ${operation}`, operation })",
    ),
    _error(
        "NetworkError",
        "Network failure while calling the external service",
        [ErrorField(name="cause", type="unknown", optional=True)],
        [MethodParam(name="cause", type="unknown", optional=True)],
        'return new this({ message: "Network request failed", ...(cause !== undefined && { cause }) })',
    ),
    _error(
        "TimeoutError",
        "External call timed out",
        [ErrorField(name="timeoutMs", type="number")],
        [MethodParam(name="timeoutMs", type="number")],
        "return new this({ message: `Request timed out after ${timeoutMs}ms`, timeoutMs })",
    ),
    _error(
        "InternalError",
        "Unexpected failure inside the provider",
        [ErrorField(name="cause", type="unknown", optional=True)],
        [MethodParam(name="message", type="string"), MethodParam(name="cause", type="unknown", optional=True)],
        "return new this({ message, ...(cause !== undefined && { cause }) })",
    ),
]

_ERROR_NAMES = [
    "Error",
    "NotFoundError",
    "ValidationError",
    "RateLimitError",
    "AuthenticationError",
    "AuthorizationError",
    "NetworkError",
    "TimeoutError",
    "InternalError",
]

provider_errors_template = TemplateDefinition.model_validate(
    {
        "id": "provider/errors",
        "meta": {
            "title": "{className} Provider Errors",
            "description": "Errors raised by the {className} provider adapter.",
            "module": "{scope}/provider-{fileName}/errors",
        },
        "sections": [
            {
                "title": "Provider Errors",
                "content": [fragment("tagged_error", error) for error in PROVIDER_ERRORS],
            },
            {
                "title": "Error Type Union",
                "content": raw(
                    "export type {className}ServiceError =\n"
                    + "\n".join(f"  | {{className}}{name}" for name in _ERROR_NAMES)
                ),
            },
        ],
        "conditionals": {
            "externalService": {
                "sections": [
                    {
                        "content": raw(
                            "/**\n"
                            " * Maps an error thrown by the {externalService} SDK onto {className}ServiceError\n"
                            " */\n"
                            "export const from{className}SdkError = (error: unknown): {className}ServiceError =>\n"
                            "  new {className}Error({ message: \"{externalService} request failed\", cause: error })"
                        )
                    }
                ]
            }
        },
    }
)

# ---------------------------------------------------------------------------
# provider/service
# ---------------------------------------------------------------------------

_ERROR = "{className}ServiceError"

_LIVE = """Layer.effect(
    this,
    Effect.gen(function*() {
      const store = new Map<string, Resource>()

      return {
        get: (id) =>
          Effect.suspend(() => {
            const item = store.get(id)
            return item ? Effect.succeed(item) : Effect.fail({className}NotFoundError.create(id))
          }),
        list: (params) =>
          Effect.sync(() => {
            const items = Array.from(store.values())
            const offset = params?.offset ?? 0
            const limit = params?.limit ?? 20
            return { items: items.slice(offset, offset + limit), total: items.length, hasMore: offset + limit < items.length }
          }),
        healthCheck: () => Effect.succeed({ status: "healthy" as const })
      }
    })
  )"""

provider_service_config = ContextTagFragmentConfig(
    service_name="{className}",
    tag_identifier="{scope}/provider-{fileName}/{className}",
    jsdoc="{className} provider adapter",
    methods=[
        ServiceMethod(
            name="get",
            params=[MethodParam(name="id", type="string")],
            return_type=f"Effect.Effect<Resource, {_ERROR}>",
            jsdoc="Fetch one resource",
        ),
        ServiceMethod(
            name="list",
            params=[MethodParam(name="params", type="ListParams", optional=True)],
            return_type=f"Effect.Effect<PaginatedResult<Resource>, {_ERROR}>",
            jsdoc="List resources with pagination",
        ),
        ServiceMethod(
            name="healthCheck",
            return_type="Effect.Effect<HealthCheckResult>",
            jsdoc="Health check",
        ),
    ],
    static_layers=[
        StaticLayer(name="Live", implementation=_LIVE, jsdoc="Live layer (in-memory baseline)"),
        StaticLayer(name="Test", implementation="this.Live", jsdoc="Test layer"),
    ],
)

provider_service_template = TemplateDefinition.model_validate(
    {
        "id": "provider/service",
        "meta": {
            "title": "{className} Service Interface",
            "description": "Provider adapter exposing the external SDK through Context.Tag.",
            "module": "{scope}/provider-{fileName}/service",
        },
        "imports": [
            {"from": "effect", "items": ["Effect", "Layer"]},
            {
                "from": "./types",
                "items": ["Resource", "ListParams", "PaginatedResult", "HealthCheckResult"],
                "type_only": True,
            },
            {"from": "./errors", "items": [_ERROR], "type_only": True},
            {"from": "./errors", "items": ["{className}NotFoundError"]},
        ],
        "sections": [
            {
                "title": "Context.Tag",
                "content": {"type": "context_tag", "config": provider_service_config},
            }
        ],
        "conditionals": {
            "externalService": {
                "sections": [
                    {
                        "title": "{externalService} Integration",
                        "content": raw(
                            "/**\n"
                            " * Replace the in-memory baseline in {className}.Live with the\n"
                            " * {externalService} SDK client, then map SDK failures through\n"
                            " * from{className}SdkError.\n"
                            " */\n"
                            'export const {constantName}_EXTERNAL_SERVICE = "{externalService}" as const'
                        ),
                    }
                ]
            }
        },
    }
)


CATALOG = [
    catalog_entry(provider_errors_template, "Provider adapter errors", optional_context=("externalService",)),
    catalog_entry(provider_service_template, "Provider adapter service", optional_context=("externalService",)),
]

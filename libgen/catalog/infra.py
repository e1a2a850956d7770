"""Infrastructure templates: service errors and the service capability."""

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

# (suffix, jsdoc, extra fields, factory params, factory body)
_ERROR_KINDS = [
    (
        "BaseError",
        "Base error for {propertyName} service operations",
        [ErrorField(name="cause", type="unknown", optional=True)],
        [MethodParam(name="message", type="string"), MethodParam(name="cause", type="unknown", optional=True)],
        "return new this({ message, ...(cause !== undefined && { cause }) })",
    ),
    (
        "NotFoundError",
        "Resource not found in {propertyName} service",
        [ErrorField(name="resourceId", type="string"), ErrorField(name="resourceType", type="string")],
        [MethodParam(name="resourceId", type="string"), MethodParam(name="resourceType", type="string")],
        "return new this({\n"
        "      message: `${resourceType} not found: ${resourceId}`,\n"
        "      resourceId,\n"
        "      resourceType\n"
        "    })",
    ),
    (
        "ValidationError",
        "Invalid input passed to {propertyName} service",
        [ErrorField(name="field", type="string", optional=True)],
        [MethodParam(name="message", type="string"), MethodParam(name="field", type="string", optional=True)],
        "return new this({ message, ...(field !== undefined && { field }) })",
    ),
    (
        "ConflictError",
        "Conflicting state in {propertyName} service",
        [ErrorField(name="resourceId", type="string", optional=True)],
        [MethodParam(name="message", type="string"), MethodParam(name="resourceId", type="string", optional=True)],
        "return new this({ message, ...(resourceId !== undefined && { resourceId }) })",
    ),
    (
        "ConfigError",
        "Invalid {propertyName} service configuration",
        [ErrorField(name="property", type="string")],
        [MethodParam(name="property", type="string"), MethodParam(name="reason", type="string")],
        "return new this({ message: `Invalid configuration for ${property}: ${reason}`, property })",
    ),
    (
        "ConnectionError",
        "Connection failure to the {propertyName} backend",
        [ErrorField(name="target", type="string"), ErrorField(name="cause", type="unknown", optional=True)],
        [MethodParam(name="target", type="string"), MethodParam(name="cause", type="unknown", optional=True)],
        "return new this({\n"
        "      message: `Failed to connect to ${target}`,\n"
        "      target,\n"
        "      ...(cause !== undefined && { cause })\n"
        "    })",
    ),
    (
        "TimeoutError",
        "Operation timeout in {propertyName} service",
        [ErrorField(name="operation", type="string"), ErrorField(name="timeoutMs", type="number")],
        [MethodParam(name="operation", type="string"), MethodParam(name="timeoutMs", type="number")],
        "return new this({\n"
        "      message: `Operation '${operation}' timed out after ${timeoutMs}ms`,\n"
        "      operation,\n"
        "      timeoutMs\n"
        "    })",
    ),
    (
        "InternalError",
        "Unexpected internal failure in {propertyName} service",
        [ErrorField(name="cause", type="unknown", optional=True)],
        [MethodParam(name="message", type="string"), MethodParam(name="cause", type="unknown", optional=True)],
        "return new this({ message, ...(cause !== undefined && { cause }) })",
    ),
]


def _error(suffix: str, jsdoc: str, fields, params, body: str) -> TaggedErrorFragmentConfig:
    return TaggedErrorFragmentConfig(
        class_name=f"{{className}}{suffix}",
        jsdoc=jsdoc,
        fields=[_MESSAGE, *fields],
        static_methods=[ErrorStaticMethod(name="create", params=params, body=body)],
    )


INFRA_ERRORS = [_error(*kind) for kind in _ERROR_KINDS]

infra_errors_template = TemplateDefinition.model_validate(
    {
        "id": "infra/errors",
        "meta": {
            "title": "{className} Service Errors",
            "description": (
                "Errors raised by the {propertyName} infrastructure service.\n"
                "For RPC boundaries use Schema.TaggedError instead."
            ),
            "module": "{scope}/infra-{fileName}/errors",
        },
        "sections": [
            {
                "title": "Core Service Errors",
                "content": [fragment("tagged_error", error) for error in INFRA_ERRORS],
            },
            {
                "title": "Error Type Union",
                "content": raw(
                    "export type {className}ServiceError =\n"
                    + "\n".join(f"  | {{className}}{kind[0]}" for kind in _ERROR_KINDS)
                ),
            },
        ],
    }
)

# ---------------------------------------------------------------------------
# infra/service
# ---------------------------------------------------------------------------

_ERROR = "{className}ServiceError"

_LIVE = """Layer.scoped(
    this,
    Effect.gen(function*() {
      const store = new Map<string, unknown>()
      yield* Effect.addFinalizer(() => Effect.sync(() => store.clear()))

      return {
        get: (id) => Effect.sync(() => Option.fromNullable(store.get(id))),
        findByCriteria: (_criteria, skip = 0, limit = 10) =>
          Effect.sync(() => Array.from(store.values()).slice(skip, skip + limit)),
        create: (input) =>
          Effect.sync(() => {
            const item = { id: randomUUID(), ...input }
            store.set(item.id, item)
            return item
          }),
        update: (id, input) =>
          Effect.gen(function*() {
            const existing = store.get(id)
            if (!existing) {
              return yield* Effect.fail({className}NotFoundError.create(id, "Item"))
            }
            const updated = { ...(existing as object), ...input }
            store.set(id, updated)
            return updated
          }),
        delete: (id) => Effect.sync(() => void store.delete(id)),
        healthCheck: () => Effect.succeed(true)
      }
    })
  )"""

infra_service_config = ContextTagFragmentConfig(
    service_name="{className}Service",
    tag_identifier="{scope}/infra-{fileName}/{className}Service",
    jsdoc="{className}Service infrastructure capability",
    methods=[
        ServiceMethod(
            name="get",
            params=[MethodParam(name="id", type="string")],
            return_type=f"Effect.Effect<Option.Option<unknown>, {_ERROR}>",
            jsdoc="Get item by ID",
        ),
        ServiceMethod(
            name="findByCriteria",
            params=[
                MethodParam(name="criteria", type="Record<string, unknown>"),
                MethodParam(name="skip", type="number", optional=True),
                MethodParam(name="limit", type="number", optional=True),
            ],
            return_type=f"Effect.Effect<ReadonlyArray<unknown>, {_ERROR}>",
            jsdoc="Find items by criteria with pagination",
        ),
        ServiceMethod(
            name="create",
            params=[MethodParam(name="input", type="Record<string, unknown>")],
            return_type=f"Effect.Effect<unknown, {_ERROR}>",
            jsdoc="Create new item",
        ),
        ServiceMethod(
            name="update",
            params=[
                MethodParam(name="id", type="string"),
                MethodParam(name="input", type="Record<string, unknown>"),
            ],
            return_type=f"Effect.Effect<unknown, {_ERROR}>",
            jsdoc="Update existing item",
        ),
        ServiceMethod(
            name="delete",
            params=[MethodParam(name="id", type="string")],
            return_type=f"Effect.Effect<void, {_ERROR}>",
            jsdoc="Delete item by ID",
        ),
        ServiceMethod(
            name="healthCheck",
            return_type="Effect.Effect<boolean>",
            jsdoc="Health check for readiness probes",
        ),
    ],
    static_layers=[
        StaticLayer(name="Live", implementation=_LIVE, jsdoc="Live layer with scoped resources"),
        StaticLayer(name="Test", implementation="this.Live", jsdoc="Test layer"),
        StaticLayer(name="Dev", implementation="this.Live", jsdoc="Development layer"),
    ],
)

infra_service_template = TemplateDefinition.model_validate(
    {
        "id": "infra/service",
        "meta": {
            "title": "{className} Service",
            "description": "Infrastructure service using the Context.Tag pattern.",
            "module": "{scope}/infra-{fileName}/service",
        },
        "imports": [
            {"from": "node:crypto", "items": ["randomUUID"]},
            {"from": "effect", "items": ["Effect", "Layer", "Option"]},
            {"from": "./errors", "items": ["{className}NotFoundError"]},
            {"from": "./errors", "items": [_ERROR], "type_only": True},
        ],
        "sections": [
            {
                "title": "Service Definition",
                "content": {"type": "context_tag", "config": infra_service_config},
            }
        ],
    }
)


CATALOG = [
    catalog_entry(infra_errors_template, "Infrastructure service errors"),
    catalog_entry(infra_service_template, "Infrastructure service capability"),
]

"""Contract templates: domain errors, domain events and ports.

The error classes are raw sections because their factories mix structural
placeholders (``{propertyName}Id``) with template literals in the same body.
"""

from __future__ import annotations

from libgen.fragments.schema_fragment import branded_id_fragment
from libgen.fragments.service_fragment import (
    projection_repository_fragment,
    repository_fragment,
    service_fragment,
)
from libgen.templates.models import TemplateDefinition

from .common import catalog_entry, raw

# ---------------------------------------------------------------------------
# contract/errors
# ---------------------------------------------------------------------------

_NOT_FOUND = """/**
 * Error thrown when {propertyName} is not found
 */
export class {className}NotFoundError extends Data.TaggedError(
  "{className}NotFoundError"
)<{
  /** Human-readable error message */
  readonly message: string
  /** Identifier that was not found */
  readonly {propertyName}Id: string
}> {
  static create({propertyName}Id: string) {
    return new {className}NotFoundError({
      message: `{className} not found: ${{propertyName}Id}`,
      {propertyName}Id
    })
  }
}"""

_VALIDATION = """/**
 * Error thrown when {propertyName} validation fails
 */
export class {className}ValidationError extends Data.TaggedError(
  "{className}ValidationError"
)<{
  /** Human-readable error message */
  readonly message: string
  /** Field that failed validation */
  readonly field?: string
  /** Constraint that was violated */
  readonly constraint?: string
  /** Invalid value */
  readonly value?: unknown
}> {
  static create(params: {
    message: string
    field?: string
    constraint?: string
    value?: unknown
  }) {
    return new {className}ValidationError({
      message: params.message,
      ...(params.field !== undefined && { field: params.field }),
      ...(params.constraint !== undefined && { constraint: params.constraint }),
      ...(params.value !== undefined && { value: params.value })
    })
  }

  static fieldRequired(field: string) {
    return new {className}ValidationError({
      message: `${field} is required`,
      field,
      constraint: "required"
    })
  }
}"""

_ALREADY_EXISTS = """/**
 * Error thrown when {propertyName} already exists
 */
export class {className}AlreadyExistsError extends Data.TaggedError(
  "{className}AlreadyExistsError"
)<{
  /** Human-readable error message */
  readonly message: string
  /** Identifier of existing resource */
  readonly identifier?: string
}> {
  static create(identifier?: string) {
    return new {className}AlreadyExistsError({
      message: identifier
        ? `{className} already exists: ${identifier}`
        : "{className} already exists",
      ...(identifier !== undefined && { identifier })
    })
  }
}"""

_PERMISSION = """/**
 * Error thrown when {propertyName} operation is not permitted
 */
export class {className}PermissionError extends Data.TaggedError(
  "{className}PermissionError"
)<{
  /** Human-readable error message */
  readonly message: string
  /** Operation that was denied */
  readonly operation: string
  /** Resource identifier */
  readonly {propertyName}Id: string
}> {
  static create(params: {
    operation: string
    {propertyName}Id: string
  }) {
    return new {className}PermissionError({
      message: `Operation '${params.operation}' not permitted on {propertyName} ${params.{propertyName}Id}`,
      operation: params.operation,
      {propertyName}Id: params.{propertyName}Id
    })
  }
}"""

_REPOSITORY_ERRORS = """/**
 * Repository error for {propertyName} not found
 */
export class {className}NotFoundRepositoryError extends Data.TaggedError(
  "{className}NotFoundRepositoryError"
)<{
  readonly message: string
  readonly {propertyName}Id: string
}> {
  static create({propertyName}Id: string) {
    return new {className}NotFoundRepositoryError({
      message: `{className} not found: ${{propertyName}Id}`,
      {propertyName}Id
    })
  }
}

/**
 * Repository error for {propertyName} conflicts
 */
export class {className}ConflictRepositoryError extends Data.TaggedError(
  "{className}ConflictRepositoryError"
)<{
  readonly message: string
  readonly identifier?: string
}> {
  static create(identifier?: string) {
    return new {className}ConflictRepositoryError({
      message: identifier
        ? `{className} already exists: ${identifier}`
        : "{className} already exists",
      ...(identifier !== undefined && { identifier })
    })
  }
}

/**
 * Repository error for {propertyName} database failures
 */
export class {className}DatabaseRepositoryError extends Data.TaggedError(
  "{className}DatabaseRepositoryError"
)<{
  readonly message: string
  readonly operation: string
  readonly cause?: string
}> {
  static create(params: { message: string; operation: string; cause?: string }) {
    return new {className}DatabaseRepositoryError({
      message: params.message,
      operation: params.operation,
      ...(params.cause !== undefined && { cause: params.cause })
    })
  }
}"""

contract_errors_template = TemplateDefinition.model_validate(
    {
        "id": "contract/errors",
        "meta": {
            "title": "{className} Domain Errors",
            "description": "Defines all error types for {propertyName} domain operations.",
            "module": "{scope}/contract-{fileName}/errors",
        },
        "imports": [{"from": "effect", "items": ["Data"]}],
        "sections": [
            {"title": "Domain Errors (Data.TaggedError)", "content": raw(_NOT_FOUND)},
            {"content": raw(_VALIDATION)},
            {"content": raw(_ALREADY_EXISTS)},
            {"content": raw(_PERMISSION)},
            {
                "content": raw(
                    "/**\n * Union of all domain errors\n */\n"
                    "export type {className}DomainError =\n"
                    "  | {className}NotFoundError\n"
                    "  | {className}ValidationError\n"
                    "  | {className}AlreadyExistsError\n"
                    "  | {className}PermissionError"
                )
            },
            {"title": "Repository Errors (Data.TaggedError)", "content": raw(_REPOSITORY_ERRORS)},
            {
                "content": raw(
                    "/**\n * Union of all repository errors\n */\n"
                    "export type {className}RepositoryError =\n"
                    "  | {className}NotFoundRepositoryError\n"
                    "  | {className}ConflictRepositoryError\n"
                    "  | {className}DatabaseRepositoryError"
                )
            },
            {
                "title": "Error Union Types",
                "content": raw(
                    "/**\n * All possible {propertyName} errors\n */\n"
                    "export type {className}Error = {className}DomainError | {className}RepositoryError"
                ),
            },
        ],
    }
)

# ---------------------------------------------------------------------------
# contract/events
# ---------------------------------------------------------------------------

_EVENT_BASE = """/**
 * Metadata shared by every {propertyName} event
 */
const {className}EventBase = Schema.Struct({
  /** Event timestamp */
  timestamp: Schema.DateTimeUtc,
  /** Correlation ID for tracing */
  correlationId: Schema.UUID,
  /** User who triggered the event (if applicable) */
  userId: Schema.optional(Schema.UUID)
})"""


def _event(action: str, extra_fields: str = "") -> str:
    return (
        f"/**\n * {{className}} {action.lower()} event\n */\n"
        f"export const {{className}}{action} = Schema.Struct({{\n"
        f'  _tag: Schema.Literal("{{className}}.{action}"),\n'
        f"  {{propertyName}}Id: {{className}}Id,\n"
        f"{extra_fields}"
        f"  ...{{className}}EventBase.fields\n"
        f"}}).pipe(Schema.annotations({{\n"
        f'  identifier: "{{className}}.{action}",\n'
        f'  title: "{{className}} {action}",\n'
        f'  description: "Emitted when a {{propertyName}} is {action.lower()}"\n'
        f"}}))"
    )


_EVENT_UNION = """/**
 * Union of all {propertyName} domain events
 */
export type {className}Event =
  | Schema.Schema.Type<typeof {className}Created>
  | Schema.Schema.Type<typeof {className}Updated>
  | Schema.Schema.Type<typeof {className}Deleted>

/**
 * All {propertyName} event schemas for registration
 */
export const {className}Events = {
  {className}Created,
  {className}Updated,
  {className}Deleted
}"""

contract_events_template = TemplateDefinition.model_validate(
    {
        "id": "contract/events",
        "meta": {
            "title": "{className} Domain Events",
            "description": "Domain events published by {propertyName} operations.",
            "module": "{scope}/contract-{fileName}/events",
        },
        "imports": [{"from": "effect", "items": ["Schema"]}],
        "sections": [
            {
                "title": "Identifiers",
                "content": {"type": "schema", "config": branded_id_fragment("{className}")},
            },
            {"title": "Event Base Schema", "content": raw(_EVENT_BASE)},
            {
                "title": "Domain Events",
                "content": [
                    raw(_event("Created")),
                    raw(
                        _event(
                            "Updated",
                            "  changes: Schema.Record({ key: Schema.String, value: Schema.Unknown }),\n",
                        )
                    ),
                    raw(_event("Deleted")),
                ],
            },
            {"title": "Event Union Type", "content": raw(_EVENT_UNION)},
        ],
    }
)

# ---------------------------------------------------------------------------
# contract/ports
# ---------------------------------------------------------------------------

_PAGINATED_RESULT = """/**
 * Paginated result with generic item type
 */
export interface PaginatedResult<T> {
  readonly items: ReadonlyArray<T>
  readonly total: number
  readonly limit: number
  readonly offset: number
  readonly hasMore: boolean
}"""

contract_ports_template = TemplateDefinition.model_validate(
    {
        "id": "contract/ports",
        "meta": {
            "title": "{className} Ports (Interfaces)",
            "description": "Defines repository and service interfaces for {propertyName} domain.",
            "module": "{scope}/contract-{fileName}/ports",
        },
        "imports": [
            {
                "from": "{entityTypeSource}",
                "items": ["{className}Select as {className}"],
                "type_only": True,
            },
            {"from": "effect", "items": ["Effect", "Option"], "type_only": True},
            {"from": "./errors", "items": ["{className}RepositoryError"], "type_only": True},
        ],
        "sections": [
            {
                "title": "Supporting Types",
                "content": {
                    "type": "interface",
                    "config": {
                        "name": "{className}Filters",
                        "jsdoc": "Filter options for querying {propertyName} records",
                        "properties": [
                            {"name": "createdAfter", "type": "Date", "optional": True,
                             "jsdoc": "Filter by creation date range"},
                            {"name": "createdBefore", "type": "Date", "optional": True},
                            {"name": "updatedAfter", "type": "Date", "optional": True,
                             "jsdoc": "Filter by update date range"},
                            {"name": "updatedBefore", "type": "Date", "optional": True},
                        ],
                    },
                },
            },
            {
                "content": {
                    "type": "interface",
                    "config": {
                        "name": "OffsetPaginationParams",
                        "jsdoc": "Offset-based pagination parameters",
                        "properties": [
                            {"name": "limit", "type": "number"},
                            {"name": "offset", "type": "number"},
                        ],
                    },
                }
            },
            {
                "content": {
                    "type": "interface",
                    "config": {
                        "name": "SortOptions",
                        "jsdoc": "Sort options",
                        "properties": [
                            {"name": "field", "type": "string"},
                            {"name": "direction", "type": '"asc" | "desc"'},
                        ],
                    },
                }
            },
            {"content": raw(_PAGINATED_RESULT)},
            {
                "title": "Repository Port",
                "content": {
                    "type": "context_tag",
                    "config": repository_fragment("{className}").model_copy(
                        update={
                            "jsdoc": "{className}Repository Context Tag for dependency injection"
                        }
                    ),
                },
            },
            {
                "title": "Service Port",
                "content": {"type": "context_tag", "config": service_fragment("{className}")},
            },
        ],
        "conditionals": {
            "includeCQRS": {
                "sections": [
                    {
                        "title": "Projection Repository Port (CQRS)",
                        "content": {
                            "type": "context_tag",
                            "config": projection_repository_fragment("{className}"),
                        },
                    }
                ]
            }
        },
    }
)


CATALOG = [
    catalog_entry(contract_errors_template, "Domain and repository error types"),
    catalog_entry(contract_events_template, "Domain events with branded identifiers"),
    catalog_entry(
        contract_ports_template,
        "Repository and service ports",
        optional_context=("includeCQRS", "entityTypeSource"),
    ),
]

"""Feature templates: the business service and its layer compositions."""

from __future__ import annotations

from libgen.fragments.layer_fragment import composed_layer_fragment
from libgen.templates.models import TemplateDefinition

from .common import catalog_entry, fragment, raw

# ---------------------------------------------------------------------------
# feature/service
# ---------------------------------------------------------------------------

_EVENT_SCHEMA = """/**
 * Events published by {className}Service
 */
const {className}EventSchema = Schema.Union(
  Schema.Struct({
    type: Schema.Literal("{className}Created"),
    id: Schema.String,
    timestamp: Schema.DateFromSelf
  }),
  Schema.Struct({
    type: Schema.Literal("{className}Updated"),
    id: Schema.String,
    timestamp: Schema.DateFromSelf
  }),
  Schema.Struct({
    type: Schema.Literal("{className}Deleted"),
    id: Schema.String,
    timestamp: Schema.DateFromSelf
  })
)

type {className}Event = Schema.Schema.Type<typeof {className}EventSchema>"""

_IMPLEMENTATION = """/**
 * Service implementation
 *
 * Every operation logs, records metrics and runs inside a tracing span.
 */
const createServiceImpl = (
  repo: Context.Tag.Service<typeof {className}Repository>,
  logger: Context.Tag.Service<typeof LoggingService>,
  metrics: Context.Tag.Service<typeof MetricsService>,
  eventTopic: TopicHandle<{className}Event, ParseError>
) => ({
  get: (id: string) =>
    Effect.gen(function*() {
      yield* logger.debug("{className}Service.get", { id })
      const result = yield* repo.findById(id)
      if (Option.isNone(result)) {
        return yield* Effect.fail(new {className}NotFoundError({
          message: `{className} not found: ${id}`,
          {propertyName}Id: id
        }))
      }
      return result.value
    }).pipe(Effect.withSpan("{className}Service.get", { attributes: { id } })),

  list: (filters?: {className}Filter, offset = 0, limit = 20) =>
    Effect.gen(function*() {
      yield* logger.debug("{className}Service.list", { filters, offset, limit })
      return yield* repo.findAll(filters, { offset, limit })
    }).pipe(Effect.withSpan("{className}Service.list")),

  create: (input: {className}CreateInput) =>
    Effect.gen(function*() {
      const counter = yield* metrics.counter("{propertyName}_created_total")
      const currentUser = yield* CurrentUser
      yield* logger.info("{className}Service.create", { userId: currentUser.id })
      const result = yield* repo.create(input)
      yield* counter.increment
      yield* eventTopic.publish({ type: "{className}Created" as const, id: result.id, timestamp: new Date() }).pipe(
        Effect.catchAll((error) => Effect.logWarning("Event publishing failed", { error }))
      )
      return result
    }).pipe(Effect.withSpan("{className}Service.create")),

  update: (id: string, input: {className}UpdateInput) =>
    Effect.gen(function*() {
      const currentUser = yield* CurrentUser
      yield* logger.info("{className}Service.update", { id, userId: currentUser.id })
      const result = yield* repo.update(id, input)
      yield* eventTopic.publish({ type: "{className}Updated" as const, id, timestamp: new Date() }).pipe(
        Effect.catchAll((error) => Effect.logWarning("Event publishing failed", { error }))
      )
      return result
    }).pipe(Effect.withSpan("{className}Service.update", { attributes: { id } })),

  delete: (id: string) =>
    Effect.gen(function*() {
      const currentUser = yield* CurrentUser
      yield* logger.info("{className}Service.delete", { id, userId: currentUser.id })
      yield* repo.delete(id)
      yield* eventTopic.publish({ type: "{className}Deleted" as const, id, timestamp: new Date() }).pipe(
        Effect.catchAll((error) => Effect.logWarning("Event publishing failed", { error }))
      )
    }).pipe(Effect.withSpan("{className}Service.delete", { attributes: { id } }))
})

export type {className}ServiceInterface = ReturnType<typeof createServiceImpl>"""

_SERVICE_TAG = """/**
 * {className}Service Context Tag
 *
 * Requires {className}Repository, LoggingService, MetricsService and PubsubService.
 */
export class {className}Service extends Context.Tag("{scope}/feature-{fileName}/{className}Service")<
  {className}Service,
  {className}ServiceInterface
>() {
  static readonly Live = Layer.effect(
    this,
    Effect.gen(function*() {
      const repo = yield* {className}Repository
      const logger = yield* LoggingService
      const metrics = yield* MetricsService
      const pubsub = yield* PubsubService
      const eventTopic = yield* pubsub.topic("{fileName}-events", {className}EventSchema)
      return createServiceImpl(repo, logger, metrics, eventTopic)
    })
  )

  static readonly Test = this.Live

  static readonly Dev = this.Live

  static readonly Auto = Layer.suspend(() => {
    switch (env.NODE_ENV) {
      case "test":
        return {className}Service.Test
      case "development":
        return {className}Service.Dev
      default:
        return {className}Service.Live
    }
  })
}"""

feature_service_template = TemplateDefinition.model_validate(
    {
        "id": "feature/service",
        "meta": {
            "title": "{className} Service",
            "description": (
                "Context.Tag definition for {className}Service.\n"
                "\n"
                "Operations are logged through LoggingService, measured through\n"
                "MetricsService and traced with Effect.withSpan()."
            ),
            "module": "{scope}/feature-{fileName}/server/service",
        },
        "imports": [
            {"from": "effect", "items": ["Effect", "Layer", "Context", "Option", "Schema"]},
            {"from": "effect/ParseResult", "items": ["ParseError"], "type_only": True},
            {"from": "{scope}/env", "items": ["env"]},
            {"from": "{scope}/contract-{fileName}", "items": ["{className}NotFoundError"]},
            {"from": "{scope}/data-access-{fileName}", "items": ["{className}Repository"]},
            {"from": "{scope}/infra-observability", "items": ["LoggingService", "MetricsService"]},
            {"from": "{scope}/infra-pubsub", "items": ["PubsubService"]},
            {"from": "{scope}/infra-pubsub", "items": ["TopicHandle"], "type_only": True},
            {"from": "{scope}/contract-auth", "items": ["CurrentUser"]},
            {
                "from": "{scope}/data-access-{fileName}",
                "items": [
                    "{className}",
                    "{className}CreateInput",
                    "{className}UpdateInput",
                    "{className}Filter",
                ],
                "type_only": True,
            },
        ],
        "sections": [
            {
                "title": "Repository Type Re-exports",
                "content": raw(
                    "export type { {className}, {className}CreateInput, "
                    "{className}UpdateInput, {className}Filter }"
                ),
            },
            {"title": "Event Schema", "content": raw(_EVENT_SCHEMA)},
            {"title": "Service Implementation", "content": raw(_IMPLEMENTATION)},
            {"title": "Context.Tag", "content": raw(_SERVICE_TAG)},
        ],
    }
)

# ---------------------------------------------------------------------------
# feature/layers
# ---------------------------------------------------------------------------

_INFRASTRUCTURE = ("DatabaseService", "LoggingService", "MetricsService", "CacheService", "PubsubService")

_AUTO = """/**
 * Selects the feature layer from NODE_ENV
 */
export const {className}FeatureAuto = Layer.suspend(() => {
  switch (env.NODE_ENV) {
    case "test":
      return {className}FeatureTest
    case "development":
      return {className}FeatureDev
    default:
      return {className}FeatureLive
  }
})"""


def _layers(variant: str) -> list[dict]:
    infrastructure = composed_layer_fragment(
        f"Infrastructure{variant}",
        [f"{service}.{variant}" for service in _INFRASTRUCTURE],
        jsdoc=f"{variant} infrastructure layer",
    )
    feature = composed_layer_fragment(
        f"{{className}}Feature{variant}",
        ["{className}Service.Live", "{className}Repository.Live"],
        infrastructure_layer=f"Infrastructure{variant}",
        jsdoc=f"Full {{propertyName}} feature with {variant.lower()} infrastructure",
    )
    return [fragment("layer", infrastructure), fragment("layer", feature)]


feature_layers_template = TemplateDefinition.model_validate(
    {
        "id": "feature/layers",
        "meta": {
            "title": "{className} Layers",
            "description": "Layer composition for the {propertyName} feature.",
            "module": "{scope}/feature-{fileName}/server",
        },
        "imports": [
            {"from": "{scope}/env", "items": ["env"]},
            {"from": "./service", "items": ["{className}Service"]},
            {"from": "{scope}/data-access-{fileName}", "items": ["{className}Repository"]},
            {"from": "{scope}/infra-database", "items": ["DatabaseService"]},
            {"from": "{scope}/infra-observability", "items": ["LoggingService", "MetricsService"]},
            {"from": "{scope}/infra-cache", "items": ["CacheService"]},
            {"from": "{scope}/infra-pubsub", "items": ["PubsubService"]},
        ],
        "sections": [
            {"title": "Live Layers", "content": _layers("Live")},
            {"title": "Dev Layers", "content": _layers("Dev")},
            {"title": "Test Layers", "content": _layers("Test")},
            {"title": "Environment-Aware Layer", "content": raw(_AUTO)},
        ],
    }
)


CATALOG = [
    catalog_entry(feature_service_template, "Business service with observability"),
    catalog_entry(feature_layers_template, "Feature layer compositions"),
]

"""Tests for the built-in fragment renderers and their presets.

Covers:
- tagged_error: fields, factories, opaque bodies
- context_tag: method signatures and static variants
- schema: Struct, Class, primitives, brand, annotations, type alias
- layer: constructors and composition order
"""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from libgen.fragments import layer_fragment
from libgen.fragments.error_fragment import (
    domain_error_fragments,
    not_found_error_fragment,
    render_tagged_error_fragment,
    repository_error_fragments,
)
from libgen.fragments.layer_fragment import (
    apply_composition,
    build_layer_expression,
    composed_layer_fragment,
    live_repository_layer_fragment,
    render_layer_fragment,
)
from libgen.fragments.models import (
    ContextTagFragmentConfig,
    ErrorField,
    ErrorStaticMethod,
    LayerComposition,
    LayerFragmentConfig,
    MethodParam,
    SchemaField,
    SchemaFragmentConfig,
    ServiceMethod,
    StaticLayer,
    TaggedErrorFragmentConfig,
)
from libgen.fragments.renderer import doc_lines, render_params
from libgen.fragments.schema_fragment import (
    branded_id_fragment,
    build_schema_expression,
    render_schema_fragment,
    update_input_schema_fragment,
)
from libgen.fragments.service_fragment import (
    projection_repository_fragment,
    render_context_tag_fragment,
    repository_fragment,
    service_fragment,
)
from libgen.templates.buffer import CodeBuffer
from libgen.templates.resolver import collect_variables

pytestmark = pytest.mark.unit


def _render(renderer, config, context: dict[str, Any]) -> str:
    buffer = CodeBuffer()
    renderer(buffer, config, context)
    return buffer.render()


# ---------------------------------------------------------------------------
# Layout helpers
# ---------------------------------------------------------------------------


class TestLayoutHelpers:
    def test_render_params(self):
        assert render_params([("id", "string", False), ("limit", "number", True)]) == (
            "id: string, limit?: number"
        )

    def test_doc_lines_prefixes_continuation_lines(self):
        assert doc_lines("first\n\nthird", " * ") == "first\n *\n * third"


# ---------------------------------------------------------------------------
# tagged_error
# ---------------------------------------------------------------------------


class TestTaggedError:
    def test_not_found_preset(self, user_context):
        output = _render(
            render_tagged_error_fragment,
            not_found_error_fragment("User", id_field="userId"),
            user_context,
        )
        assert output == (
            "/**\n"
            " * Error thrown when User is not found\n"
            " */\n"
            "export class UserNotFoundError extends Data.TaggedError(\n"
            '  "UserNotFoundError"\n'
            ")<{\n"
            "  /** Human-readable error message */\n"
            "  readonly message: string\n"
            "  /** Identifier that was not found */\n"
            "  readonly userId: string\n"
            "}> {\n"
            "  static create(userId: string) {\n"
            "    return new this({\n"
            "      message: `User not found: ${userId}`,\n"
            "      userId\n"
            "    })\n"
            "  }\n"
            "}\n"
        )

    def test_placeholder_class_name(self, order_context):
        output = _render(
            render_tagged_error_fragment, not_found_error_fragment("{className}"), order_context
        )
        assert "export class OrderNotFoundError" in output
        assert "`Resource not found: ${id}`" in output

    def test_custom_tag_and_no_methods(self, user_context):
        config = TaggedErrorFragmentConfig(
            class_name="{className}Gone",
            tag_name="{propertyName}/gone",
            fields=[ErrorField(name="at", type="Date", optional=True)],
            exported=False,
        )
        output = _render(render_tagged_error_fragment, config, user_context)
        assert output.startswith('class UserGone extends Data.TaggedError(\n  "user/gone"\n)')
        assert "  readonly at?: Date\n}> {}" in output

    def test_body_keeps_braces_and_template_literals(self, user_context):
        body = "return new this({ message: `${field}: {className}` })"
        config = TaggedErrorFragmentConfig(
            class_name="X",
            static_methods=[
                ErrorStaticMethod(name="of", params=[MethodParam(name="field", type="string")], body=body)
            ],
        )
        output = _render(render_tagged_error_fragment, config, {})
        assert f"    {body}\n" in output

    def test_factory_name_is_interpolated(self, user_context):
        config = TaggedErrorFragmentConfig(
            class_name="{className}LookupError",
            static_methods=[
                ErrorStaticMethod(
                    name="for{className}",
                    params=[MethodParam(name="{propertyName}Id", type="string")],
                    body="return new this({ message: `missing ${id}` })",
                )
            ],
        )
        assert collect_variables(config) == ["className", "propertyName"]
        output = _render(render_tagged_error_fragment, config, user_context)
        assert "  static forUser(userId: string) {\n" in output
        assert "{className}" not in output

    def test_multiline_jsdoc(self):
        config = TaggedErrorFragmentConfig(class_name="X", jsdoc="Line one\nLine two")
        output = _render(render_tagged_error_fragment, config, {})
        assert output.startswith("/**\n * Line one\n * Line two\n */\n")

    def test_domain_error_set(self):
        names = [c.class_name for c in domain_error_fragments("User")]
        assert names == [
            "UserNotFoundError",
            "UserValidationError",
            "UserAlreadyExistsError",
            "UserPermissionError",
        ]

    def test_repository_error_set(self):
        names = [c.class_name for c in repository_error_fragments("User")]
        assert names == [
            "UserNotFoundRepositoryError",
            "UserValidationRepositoryError",
            "UserConflictRepositoryError",
            "UserDatabaseError",
        ]


# ---------------------------------------------------------------------------
# context_tag
# ---------------------------------------------------------------------------


class TestContextTag:
    def test_minimal_module(self):
        config = ContextTagFragmentConfig(
            service_name="OrderRepository",
            tag_identifier="@app/x",
            methods=[
                ServiceMethod(
                    name="findById",
                    params=[MethodParam(name="id", type="string")],
                    return_type="Effect.Effect<Order>",
                    jsdoc="Find",
                )
            ],
        )
        assert _render(render_context_tag_fragment, config, {}) == (
            "export class OrderRepository extends Context.Tag(\n"
            '  "@app/x"\n'
            ")<\n"
            "  OrderRepository,\n"
            "  {\n"
            "    /**\n"
            "     * Find\n"
            "     */\n"
            "    readonly findById: (id: string) => Effect.Effect<Order>\n"
            "  }\n"
            ">() {}\n"
        )

    def test_repository_preset_methods(self, order_context):
        output = _render(render_context_tag_fragment, repository_fragment("{className}"), order_context)
        assert "export class OrderRepository extends Context.Tag(" in output
        assert '"@app/contract-order/OrderRepository"' in output
        for method in ("findById", "findAll", "create", "update", "delete", "exists"):
            assert f"readonly {method}: (" in output
        assert "Effect.Effect<Option.Option<Order>, OrderRepositoryError>" in output

    def test_tag_identifier_defaults_to_service_name(self):
        config = ContextTagFragmentConfig(service_name="Clock")
        assert '"Clock"' in _render(render_context_tag_fragment, config, {})

    def test_static_layers(self, user_context):
        config = ContextTagFragmentConfig(
            service_name="{className}Cache",
            static_layers=[
                StaticLayer(name="Live", implementation="Layer.succeed(this, make{className}Cache())", jsdoc="Live"),
                StaticLayer(name="Test", implementation="this.Live"),
            ],
        )
        output = _render(render_context_tag_fragment, config, user_context)
        assert output.endswith(
            ">() {\n"
            "  /**\n"
            "   * Live\n"
            "   */\n"
            "  static Live = Layer.succeed(this, makeUserCache())\n"
            "\n"
            "  static Test = this.Live\n"
            "}\n"
        )

    def test_service_and_projection_presets(self, user_context):
        service = _render(render_context_tag_fragment, service_fragment("{className}"), user_context)
        assert "export class UserService extends Context.Tag(" in service
        projection = _render(
            render_context_tag_fragment, projection_repository_fragment("{className}"), user_context
        )
        assert "readonly rebuildProjection: (id: string)" in projection


# ---------------------------------------------------------------------------
# schema
# ---------------------------------------------------------------------------


class TestSchema:
    def test_branded_id(self, user_context):
        output = _render(render_schema_fragment, branded_id_fragment("{className}"), user_context)
        assert (
            "export const UserId = Schema.String.pipe(Schema.brand(\"UserId\"))"
            '.pipe(Schema.annotations({ identifier: "UserId", title: "User ID" }))'
        ) in output
        assert output.endswith("export type UserId = Schema.Schema.Type<typeof UserId>\n")

    def test_struct_with_optional_field(self):
        config = SchemaFragmentConfig(
            name="UserSchema",
            fields=[
                SchemaField(name="id", schema="Schema.String"),
                SchemaField(name="email", schema="Schema.String", optional=True, jsdoc="Contact"),
            ],
        )
        assert _render(render_schema_fragment, config, {}) == (
            "export const UserSchema = Schema.Struct({\n"
            "  id: Schema.String,\n"
            "  /** Contact */\n"
            "  email: Schema.optional(Schema.String)\n"
            "})\n"
        )

    def test_class_expression(self):
        config = SchemaFragmentConfig(name="User", schema_type="Class", fields=[])
        assert build_schema_expression(config, "User", {}) == 'Schema.Class<User>("User")({})'

    def test_class_renders_class_declaration(self, user_context):
        config = SchemaFragmentConfig(
            name="{className}",
            schema_type="Class",
            fields=[SchemaField(name="id", schema="Schema.String")],
        )
        assert _render(render_schema_fragment, config, user_context) == (
            'export class User extends Schema.Class<User>("User")({\n'
            "  id: Schema.String\n"
            "}) {}\n"
        )

    @pytest.mark.parametrize(
        "option",
        [{"brand": "UserBrand"}, {"type_alias": "UserType"}, {"annotations": {"title": "User"}}],
    )
    def test_class_rejects_const_only_options(self, option):
        with pytest.raises(ValidationError, match="Class schemas do not support"):
            SchemaFragmentConfig(name="User", schema_type="Class", **option)

    def test_array_and_union(self):
        array = SchemaFragmentConfig(
            name="Tags", schema_type="Array", fields=[SchemaField(name="item", schema="Schema.String")]
        )
        union = SchemaFragmentConfig(
            name="Id",
            schema_type="Union",
            fields=[
                SchemaField(name="a", schema="Schema.String"),
                SchemaField(name="b", schema="Schema.Number"),
            ],
        )
        assert build_schema_expression(array, "Tags", {}) == "Schema.Array(Schema.String)"
        assert build_schema_expression(union, "Id", {}) == "Schema.Union(Schema.String, Schema.Number)"

    def test_update_input_makes_fields_optional(self):
        config = update_input_schema_fragment(
            "User", [SchemaField(name="email", schema="Schema.String")]
        )
        assert config.name == "UpdateUserInput"
        assert all(f.optional for f in config.fields)

    def test_schema_alias_accepted_in_mappings(self):
        field = SchemaField.model_validate({"name": "id", "schema": "Schema.UUID"})
        assert field.schema_expr == "Schema.UUID"


# ---------------------------------------------------------------------------
# layer
# ---------------------------------------------------------------------------


class TestLayer:
    @pytest.mark.parametrize(
        "layer_type, expected",
        [
            ("succeed", "Layer.succeed(Tag, impl)"),
            ("effect", "Layer.effect(Tag, impl)"),
            ("sync", "Layer.sync(Tag, () => impl)"),
            ("scoped", "Layer.scoped(Tag, impl)"),
            ("suspend", "Layer.suspend(() => Layer.succeed(Tag, impl))"),
        ],
    )
    def test_constructors(self, layer_type, expected):
        assert build_layer_expression(layer_type, "Tag", "impl") == expected

    def test_no_service_tag_uses_implementation(self):
        assert build_layer_expression("succeed", "", "Layer.mergeAll(A, B)") == "Layer.mergeAll(A, B)"

    def test_composition_order(self):
        composition = LayerComposition(merge=["M"], provide=["P"], provide_merge=["PM"])
        assert apply_composition("L", composition, {}) == (
            "Layer.merge(L, M).pipe(Layer.provide(P)).pipe(Layer.provideMerge(PM))"
        )

    def test_composed_layer(self, user_context):
        config = composed_layer_fragment(
            "{className}DataAccessLive",
            ["{className}Repository.Live", "Cache.Live"],
            infrastructure_layer="InfrastructureLive",
        )
        output = _render(render_layer_fragment, config, user_context)
        assert output == (
            "/**\n"
            " * Composed UserDataAccessLive layer\n"
            " */\n"
            "export const UserDataAccessLive = Layer.mergeAll(UserRepository.Live, Cache.Live)"
            ".pipe(Layer.provide(InfrastructureLive))\n"
        )

    def test_single_and_empty_composition(self):
        assert composed_layer_fragment("A", ["B.Live"]).implementation == "B.Live"
        assert composed_layer_fragment("A", []).implementation == "Layer.empty"

    def test_repository_layer_presets(self):
        live = live_repository_layer_fragment("Order")
        assert live.name == "OrderRepositoryLive"
        assert "input as Order" in live.implementation
        test = layer_fragment.test_repository_layer_fragment("Order")
        output = _render(render_layer_fragment, test, {})
        assert "export const OrderRepositoryTest = Layer.sync(OrderRepository, () => makeOrderRepositoryInMemory())" in output

    def test_dependencies_are_not_rendered_or_required(self):
        config = LayerFragmentConfig(
            name="{className}ServiceLive",
            layer_type="effect",
            service_tag="{className}Service",
            implementation="make{className}Service",
            dependencies=["{repositoryName}"],
        )
        assert collect_variables(config) == ["className"]
        output = _render(render_layer_fragment, config, {"className": "Order"})
        assert output == "export const OrderServiceLive = Layer.effect(OrderService, makeOrderService)\n"

    def test_unexported_layer(self):
        config = LayerFragmentConfig(name="Local", implementation="Layer.empty", exported=False)
        assert _render(render_layer_fragment, config, {}) == "const Local = Layer.empty\n"

"""Pydantic v2 configuration models for the built-in fragment renderers.

Each model describes one reusable TypeScript shape.  String fields may contain
``{placeholders}``; they are interpolated by the renderer before layout.  Two
fields are opaque and never interpolated: ``ErrorStaticMethod.body``, emitted
verbatim, and ``LayerFragmentConfig.dependencies``, which is not rendered.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FragmentModel(BaseModel):
    """Common base: immutable, unknown keys rejected."""

    model_config = ConfigDict(frozen=True, extra="forbid")


# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------

class MethodParam(FragmentModel):
    """A single parameter of a method signature."""
    name: str
    type: str
    optional: bool = False


class ServiceMethod(FragmentModel):
    """A method exposed through a capability module."""
    name: str
    params: list[MethodParam] = Field(default_factory=list)
    return_type: str = Field(..., description="Full Effect.Effect<...> type")
    jsdoc: Optional[str] = None


class StaticLayer(FragmentModel):
    """A named environment variant bound to an implementation expression."""
    name: str = Field(..., description="Variant name, e.g. 'Live' or 'Test'")
    implementation: str
    jsdoc: Optional[str] = None


# ---------------------------------------------------------------------------
# Tagged errors
# ---------------------------------------------------------------------------

class ErrorField(FragmentModel):
    """A readonly field carried by a tagged error."""
    name: str
    type: str
    optional: bool = False
    jsdoc: Optional[str] = None


class ErrorStaticMethod(FragmentModel):
    """A static factory on an error class.

    ``body`` is target-language code and may use ``${...}`` template
    literals; it is never interpolated.
    """
    name: str
    params: list[MethodParam] = Field(default_factory=list)
    body: str = Field(..., json_schema_extra={"opaque": True})


class TaggedErrorFragmentConfig(FragmentModel):
    """Configuration for a ``Data.TaggedError`` class."""
    class_name: str
    tag_name: Optional[str] = Field(default=None, description="Defaults to class_name")
    fields: list[ErrorField] = Field(default_factory=list)
    static_methods: list[ErrorStaticMethod] = Field(default_factory=list)
    jsdoc: Optional[str] = None
    exported: bool = True


# ---------------------------------------------------------------------------
# Capability modules
# ---------------------------------------------------------------------------

class ContextTagFragmentConfig(FragmentModel):
    """Configuration for a ``Context.Tag`` capability module."""
    service_name: str
    tag_identifier: Optional[str] = Field(default=None, description="Defaults to service_name")
    methods: list[ServiceMethod] = Field(default_factory=list)
    static_layers: list[StaticLayer] = Field(default_factory=list)
    jsdoc: Optional[str] = None
    exported: bool = True


# ---------------------------------------------------------------------------
# Validated schemas
# ---------------------------------------------------------------------------

SchemaType = Literal["Struct", "Class", "String", "Number", "Boolean", "Array", "Union"]


class SchemaField(FragmentModel):
    """A field of a structural schema, or a member of a union."""
    name: str
    schema_expr: str = Field(..., alias="schema")
    optional: bool = False
    jsdoc: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class SchemaAnnotations(FragmentModel):
    """Annotations attached with ``Schema.annotations``."""
    identifier: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


class SchemaFragmentConfig(FragmentModel):
    """Configuration for a validated schema constant, or a schema class for ``Class``."""
    name: str
    schema_type: SchemaType = "Struct"
    fields: list[SchemaField] = Field(default_factory=list)
    brand: Optional[str] = None
    annotations: Optional[SchemaAnnotations] = None
    type_alias: Optional[str] = None
    jsdoc: Optional[str] = None
    exported: bool = True

    @model_validator(mode="after")
    def _check_class_options(self) -> "SchemaFragmentConfig":
        # A Class schema declares its own type.
        if self.schema_type == "Class":
            rejected = [k for k in ("brand", "annotations", "type_alias") if getattr(self, k)]
            if rejected:
                raise ValueError(f"Class schemas do not support: {', '.join(rejected)}")
        return self


# ---------------------------------------------------------------------------
# Environment layers
# ---------------------------------------------------------------------------

LayerType = Literal["effect", "sync", "scoped", "succeed", "suspend"]


class LayerComposition(FragmentModel):
    """Other layers merged into or provided to a layer."""
    merge: list[str] = Field(default_factory=list)
    provide: list[str] = Field(default_factory=list)
    provide_merge: list[str] = Field(default_factory=list)


class LayerFragmentConfig(FragmentModel):
    """Configuration for a named environment layer constant."""
    name: str
    layer_type: LayerType = "succeed"
    service_tag: str = Field(
        default="", description="Empty for layers that only compose other layers"
    )
    implementation: str
    dependencies: list[str] = Field(
        default_factory=list,
        description="Requirements of the layer, recorded for tooling and never rendered",
        json_schema_extra={"opaque": True},
    )
    composition: Optional[LayerComposition] = None
    jsdoc: Optional[str] = None
    exported: bool = True


# ---------------------------------------------------------------------------
# Fragment references
# ---------------------------------------------------------------------------

class FragmentDefinition(BaseModel):
    """A request to render one registered fragment type."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: str
    config: Any = Field(default_factory=dict)
    condition: Optional[str] = Field(
        default=None, description="Context flag that must be truthy to render"
    )

"""Pydantic v2 models describing a template definition.

A definition is pure data: header metadata, import entries, an ordered list of
sections and flag-gated conditional blocks.  Every model is frozen so that a
definition registered in the catalog can be shared between threads.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from libgen.fragments.models import ContextTagFragmentConfig, SchemaFragmentConfig


class DefinitionModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


# ---------------------------------------------------------------------------
# Header and imports
# ---------------------------------------------------------------------------


class TemplateMeta(DefinitionModel):
    """Header doc-comment content."""

    title: str
    description: str = ""
    module: Optional[str] = Field(default=None, description="Value of the @module tag")


class ImportDefinition(DefinitionModel):
    """One import entry.  Entries for the same module are merged at render time."""

    from_: str = Field(..., alias="from")
    items: list[str] = Field(default_factory=list)
    type_only: bool = False
    condition: Optional[str] = None


# ---------------------------------------------------------------------------
# Content shapes
# ---------------------------------------------------------------------------


class InterfaceProperty(DefinitionModel):
    name: str
    type: str
    optional: bool = False
    readonly: bool = True
    jsdoc: Optional[str] = None


class InterfaceConfig(DefinitionModel):
    """A plain TypeScript interface."""

    name: str
    properties: list[InterfaceProperty] = Field(default_factory=list)
    extends: list[str] = Field(default_factory=list)
    jsdoc: Optional[str] = None
    exported: bool = True


class RawContent(DefinitionModel):
    type: Literal["raw"] = "raw"
    value: str


class InterfaceContent(DefinitionModel):
    type: Literal["interface"] = "interface"
    config: InterfaceConfig


class ContextTagContent(DefinitionModel):
    type: Literal["context_tag"] = "context_tag"
    config: ContextTagFragmentConfig


class SchemaContent(DefinitionModel):
    type: Literal["schema"] = "schema"
    config: SchemaFragmentConfig


class FragmentContent(DefinitionModel):
    """Delegates rendering to any registered fragment type.

    ``config`` is either a mapping or an already-built fragment config model;
    it is validated against the fragment's config model at compile time.
    """

    type: Literal["fragment"] = "fragment"
    fragment: str
    config: Any = Field(default_factory=dict)
    condition: Optional[str] = None


Content = Annotated[
    Union[RawContent, InterfaceContent, ContextTagContent, SchemaContent, FragmentContent],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Sections and definitions
# ---------------------------------------------------------------------------


class SectionDefinition(DefinitionModel):
    """A titled or untitled unit of the file body."""

    title: Optional[str] = None
    condition: Optional[str] = None
    content: Union[Content, list[Content]]

    @property
    def contents(self) -> list[Any]:
        if isinstance(self.content, list):
            return list(self.content)
        return [self.content]


class ConditionalContent(DefinitionModel):
    """Imports and sections emitted only when a context flag is truthy."""

    imports: list[ImportDefinition] = Field(default_factory=list)
    sections: list[SectionDefinition] = Field(default_factory=list)


class TemplateDefinition(DefinitionModel):
    """A complete, declarative description of one generated file.

    ``conditionals`` is ordered: blocks are appended in the order their flags
    were declared.
    """

    id: str
    meta: TemplateMeta
    imports: list[ImportDefinition] = Field(default_factory=list)
    sections: list[SectionDefinition] = Field(default_factory=list)
    conditionals: dict[str, ConditionalContent] = Field(default_factory=dict)


class TemplateMetadata(DefinitionModel):
    """Catalog-level metadata attached to a registered definition."""

    artifact_kind: str
    file_kind: str
    description: str = ""
    required_context: list[str] = Field(default_factory=list)
    optional_context: list[str] = Field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.artifact_kind}/{self.file_kind}"

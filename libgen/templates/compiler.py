"""Template compiler: ``(TemplateDefinition, context) -> TypeScript source``.

Compilation runs in a fixed order:

1. validate every variable referenced by the active parts of the definition,
   failing before anything is emitted;
2. render the header doc comment;
3. render the merged import block;
4. render base sections, then active conditional blocks in flag order;
5. join all blocks with one blank line.

The compiler is pure: no I/O, no clock, no randomness.  Output order is
derived only from list order and flag declaration order, so the same
``(definition, context)`` pair always yields byte-identical text.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError

from libgen.errors import CompilationError, InterpolationError, LibgenError
from libgen.fragments.models import FragmentDefinition
from libgen.fragments.registry import FragmentRegistry, get_fragment_registry
from libgen.fragments.renderer import get_layout

from .buffer import CodeBuffer
from .imports import merge_imports, render_imports
from .models import (
    ContextTagContent,
    FragmentContent,
    ImportDefinition,
    InterfaceConfig,
    InterfaceContent,
    RawContent,
    SchemaContent,
    SectionDefinition,
    TemplateDefinition,
)
from .resolver import collect_variables, find_missing, interpolate

logger = logging.getLogger(__name__)

BANNER_RULE = "// " + "=" * 76

EFFECT_MODULE = "effect"


def is_active(flag: Optional[str], context: Mapping[str, Any]) -> bool:
    """A missing flag means always active; otherwise the flag must be truthy."""
    return flag is None or bool(context.get(flag))


class TemplateCompiler:
    """Compiles template definitions against a context.

    Args:
        fragments: Registry used for ``context_tag``, ``schema`` and
            ``fragment`` content.  Defaults to the shared production registry.
    """

    def __init__(self, fragments: Optional[FragmentRegistry] = None) -> None:
        self.fragments = fragments if fragments is not None else get_fragment_registry()

    # -- Public API --------------------------------------------------------

    def compile(self, definition: TemplateDefinition, context: Mapping[str, Any]) -> str:
        """Compile *definition* into source text.

        Raises:
            CompilationError: Wrapping an :class:`InterpolationError`, a
                :class:`FragmentNotFoundError` or a structural failure.
        """
        try:
            missing = self.validate(definition, context)
            if missing:
                raise InterpolationError(missing)
            output = self._render(definition, context)
        except (LibgenError, ValidationError, ValueError) as exc:
            logger.debug("Compilation of %s failed: %s", definition.id, exc)
            raise CompilationError(definition.id, exc) from exc

        logger.debug("Compiled %s (%d bytes)", definition.id, len(output))
        return output

    def validate(self, definition: TemplateDefinition, context: Mapping[str, Any]) -> list[str]:
        """Return every referenced variable that *context* cannot resolve."""
        return find_missing(self.referenced_variables(definition, context), context)

    def referenced_variables(
        self, definition: TemplateDefinition, context: Mapping[str, Any]
    ) -> list[str]:
        """Variables used by meta, active imports and active sections.

        Fragment configs are validated against their fragment's config model
        first so that opaque fields are excluded.
        """
        values: list[Any] = [definition.meta]
        values.extend(self.active_imports(definition, context))
        for section in self.active_sections(definition, context):
            if section.title:
                values.append(section.title)
            for content in self.active_contents(section, context):
                if isinstance(content, FragmentContent):
                    entry = self.fragments.require(content.fragment)
                    values.append(entry.coerce(content.config))
                else:
                    values.append(content)
        return collect_variables(values)

    # -- Selection ---------------------------------------------------------

    def active_imports(
        self, definition: TemplateDefinition, context: Mapping[str, Any]
    ) -> list[ImportDefinition]:
        imports = [i for i in definition.imports if is_active(i.condition, context)]
        for flag, block in definition.conditionals.items():
            if context.get(flag):
                imports.extend(i for i in block.imports if is_active(i.condition, context))
        return imports

    def active_sections(
        self, definition: TemplateDefinition, context: Mapping[str, Any]
    ) -> list[SectionDefinition]:
        """Sections to render.

        A section whose every content item is switched off by its own flag is
        dropped along with its title.
        """
        sections = [s for s in definition.sections if is_active(s.condition, context)]
        for flag, block in definition.conditionals.items():
            if context.get(flag):
                sections.extend(s for s in block.sections if is_active(s.condition, context))
        return [
            s for s in sections if not s.contents or self.active_contents(s, context)
        ]

    @staticmethod
    def active_contents(section: SectionDefinition, context: Mapping[str, Any]) -> list[Any]:
        return [
            c
            for c in section.contents
            if not isinstance(c, FragmentContent) or is_active(c.condition, context)
        ]

    # -- Rendering ---------------------------------------------------------

    def _render(self, definition: TemplateDefinition, context: Mapping[str, Any]) -> str:
        sections = self.active_sections(definition, context)

        buffer = CodeBuffer()
        buffer.add(self.render_header(definition, context))
        buffer.add(self.render_imports(definition, sections, context))
        for section in sections:
            self.render_section(buffer, section, context)
        return buffer.render()

    def render_header(self, definition: TemplateDefinition, context: Mapping[str, Any]) -> str:
        meta = definition.meta
        lines = ["/**", f" * {interpolate(meta.title, context)}"]
        if meta.description:
            lines.append(" *")
            for line in interpolate(meta.description, context).splitlines():
                lines.append(f" * {line}".rstrip())
        if meta.module:
            lines.append(" *")
            lines.append(f" * @module {interpolate(meta.module, context)}")
        lines.append(" */")
        return "\n".join(lines)

    def render_imports(
        self,
        definition: TemplateDefinition,
        sections: list[SectionDefinition],
        context: Mapping[str, Any],
    ) -> str:
        entries = [
            (
                interpolate(entry.from_, context),
                [interpolate(item, context) for item in entry.items],
                entry.type_only,
            )
            for entry in self.active_imports(definition, context)
        ]
        required = self.fragments.get_required_imports(self._fragment_uses(sections, context))
        if required:
            entries.append((EFFECT_MODULE, required, False))
        return render_imports(merge_imports(entries))

    def render_section(
        self, buffer: CodeBuffer, section: SectionDefinition, context: Mapping[str, Any]
    ) -> None:
        if section.title:
            buffer.add(
                "\n".join([BANNER_RULE, f"// {interpolate(section.title, context)}", BANNER_RULE])
            )
        for content in self.active_contents(section, context):
            self.render_content(buffer, content, context)

    def render_content(self, buffer: CodeBuffer, content: Any, context: Mapping[str, Any]) -> None:
        if isinstance(content, RawContent):
            buffer.add(interpolate(content.value, context))
        elif isinstance(content, InterfaceContent):
            buffer.add(render_interface(content.config, context))
        elif isinstance(content, (ContextTagContent, SchemaContent, FragmentContent)):
            fragment = self._as_fragment(content)
            if is_active(fragment.condition, context):
                self.fragments.render(buffer, fragment, context)
        else:
            raise ValueError(f"Unsupported content shape: {type(content).__name__}")

    # -- Internals ---------------------------------------------------------

    @staticmethod
    def _as_fragment(content: Any) -> FragmentDefinition:
        if isinstance(content, FragmentContent):
            return FragmentDefinition(
                type=content.fragment, config=content.config, condition=content.condition
            )
        return FragmentDefinition(type=content.type, config=content.config)

    def _fragment_uses(
        self, sections: list[SectionDefinition], context: Mapping[str, Any]
    ) -> list[FragmentDefinition]:
        uses = []
        for section in sections:
            for content in section.contents:
                if isinstance(content, (ContextTagContent, SchemaContent, FragmentContent)):
                    fragment = self._as_fragment(content)
                    if is_active(fragment.condition, context):
                        uses.append(fragment)
        return uses


def render_interface(config: InterfaceConfig, context: Mapping[str, Any]) -> str:
    """Render a plain ``interface`` declaration."""
    properties = [
        {
            "name": interpolate(prop.name, context),
            "type": interpolate(prop.type, context),
            "optional": prop.optional,
            "modifier": "readonly " if prop.readonly else "",
            "jsdoc": interpolate(prop.jsdoc, context) if prop.jsdoc else None,
        }
        for prop in config.properties
    ]
    return get_layout().render(
        "interface.ts.j2",
        jsdoc=interpolate(config.jsdoc, context) if config.jsdoc else None,
        exported=config.exported,
        name=interpolate(config.name, context),
        extends=[interpolate(base, context) for base in config.extends],
        properties=properties,
    )

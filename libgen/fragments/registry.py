"""Fragment registry: string-keyed dispatch to structural renderers.

Two kinds of instance exist.  :func:`get_fragment_registry` returns the shared
production registry, built once under a lock with the built-in fragment types
and then frozen.  :func:`create_fragment_registry` returns a fresh, mutable
instance so tests can register throwaway renderers without leaking them into
other tests.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel

from libgen.errors import FragmentNotFoundError
from libgen.templates.buffer import CodeBuffer

from .models import FragmentDefinition

logger = logging.getLogger(__name__)

Renderer = Callable[[CodeBuffer, Any, Mapping[str, Any]], None]


@dataclass(frozen=True)
class FragmentEntry:
    """A registered renderer plus what its output needs imported from ``effect``."""

    type: str
    renderer: Renderer
    required_imports: tuple[str, ...] = ()
    config_model: Optional[type[BaseModel]] = None

    def coerce(self, config: Any) -> Any:
        """Validate a raw mapping against :attr:`config_model` when one is set."""
        if self.config_model is None or isinstance(config, self.config_model):
            return config
        if isinstance(config, BaseModel):
            config = config.model_dump(by_alias=True)
        return self.config_model.model_validate(config)


@dataclass
class FragmentRegistry:
    """Keyed catalog of fragment renderers."""

    _entries: dict[str, FragmentEntry] = field(default_factory=dict)
    _frozen: bool = False

    # -- Registration ------------------------------------------------------

    def register(
        self,
        fragment_type: str,
        renderer: Renderer,
        required_imports: Iterable[str] = (),
        config_model: Optional[type[BaseModel]] = None,
    ) -> None:
        """Register *renderer* under *fragment_type*, replacing any previous entry.

        Raises:
            RuntimeError: If the registry has been frozen.
        """
        if self._frozen:
            raise RuntimeError(
                f"Cannot register fragment {fragment_type!r}: registry is frozen"
            )
        if fragment_type in self._entries:
            logger.debug("Replacing fragment renderer %s", fragment_type)
        self._entries[fragment_type] = FragmentEntry(
            type=fragment_type,
            renderer=renderer,
            required_imports=tuple(required_imports),
            config_model=config_model,
        )

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- Lookup ------------------------------------------------------------

    def get(self, fragment_type: str) -> Optional[FragmentEntry]:
        return self._entries.get(fragment_type)

    def has(self, fragment_type: str) -> bool:
        return fragment_type in self._entries

    def types(self) -> list[str]:
        return list(self._entries)

    def require(self, fragment_type: str) -> FragmentEntry:
        entry = self._entries.get(fragment_type)
        if entry is None:
            raise FragmentNotFoundError(fragment_type)
        return entry

    # -- Rendering ---------------------------------------------------------

    def render(
        self,
        buffer: CodeBuffer,
        definition: FragmentDefinition,
        context: Mapping[str, Any],
    ) -> None:
        """Render one fragment into *buffer*.

        Raises:
            FragmentNotFoundError: If ``definition.type`` is not registered.
        """
        entry = self.require(definition.type)
        entry.renderer(buffer, entry.coerce(definition.config), context)

    def render_all(
        self,
        buffer: CodeBuffer,
        definitions: Iterable[FragmentDefinition],
        context: Mapping[str, Any],
    ) -> None:
        """Render each definition in order, skipping those whose condition is falsy.

        Stops at the first unregistered type or renderer failure.
        """
        for definition in definitions:
            if definition.condition and not context.get(definition.condition):
                continue
            self.render(buffer, definition, context)

    def get_required_imports(self, definitions: Iterable[FragmentDefinition]) -> list[str]:
        """Return the ordered union of ``effect`` symbols the definitions need.

        Unregistered types contribute nothing; :meth:`render` reports them.
        """
        symbols: list[str] = []
        for definition in definitions:
            entry = self._entries.get(definition.type)
            if entry is None:
                continue
            for symbol in entry.required_imports:
                if symbol not in symbols:
                    symbols.append(symbol)
        return symbols


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def register_builtin_fragments(registry: FragmentRegistry) -> FragmentRegistry:
    """Register the four built-in fragment types on *registry*."""
    from .error_fragment import render_tagged_error_fragment
    from .layer_fragment import render_layer_fragment
    from .models import (
        ContextTagFragmentConfig,
        LayerFragmentConfig,
        SchemaFragmentConfig,
        TaggedErrorFragmentConfig,
    )
    from .schema_fragment import render_schema_fragment
    from .service_fragment import render_context_tag_fragment

    registry.register(
        "tagged_error", render_tagged_error_fragment, ["Data"], TaggedErrorFragmentConfig
    )
    registry.register(
        "context_tag", render_context_tag_fragment, ["Context"], ContextTagFragmentConfig
    )
    registry.register("schema", render_schema_fragment, ["Schema"], SchemaFragmentConfig)
    registry.register("layer", render_layer_fragment, ["Layer"], LayerFragmentConfig)
    return registry


def create_fragment_registry(builtins: bool = True) -> FragmentRegistry:
    """Create an isolated, mutable registry."""
    registry = FragmentRegistry()
    if builtins:
        register_builtin_fragments(registry)
    return registry


_shared_registry: Optional[FragmentRegistry] = None
_shared_lock = threading.Lock()


def get_fragment_registry() -> FragmentRegistry:
    """Return the shared, frozen production registry."""
    global _shared_registry
    if _shared_registry is None:
        with _shared_lock:
            if _shared_registry is None:
                registry = create_fragment_registry(builtins=True)
                registry.freeze()
                logger.debug("Fragment registry initialised: %s", ", ".join(registry.types()))
                _shared_registry = registry
    return _shared_registry

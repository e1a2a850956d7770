"""Template registry keyed by ``<artifact>/<file>``.

The shared registry is populated from :data:`libgen.catalog.CATALOG` on first
access, under a lock, and frozen afterwards.  Isolated registries built with
:func:`create_template_registry` stay mutable until frozen so that a host can
add project-local definitions (see :func:`libgen.templates.loader.register_directory`).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from libgen.templates.models import TemplateDefinition, TemplateMetadata

logger = logging.getLogger(__name__)

TEMPLATE_NOT_FOUND = "Template not found"


@dataclass(frozen=True)
class RegisteredTemplate:
    definition: TemplateDefinition
    metadata: TemplateMetadata

    @property
    def key(self) -> str:
        return self.metadata.key


@dataclass(frozen=True)
class ContextValidation:
    """Outcome of :func:`validate_context`."""

    valid: bool
    missing: list[str] = field(default_factory=list)


class TemplateRegistry:
    """Catalog of template definitions with their metadata."""

    def __init__(self, entries: Iterable[tuple[TemplateDefinition, TemplateMetadata]] = ()) -> None:
        self._templates: dict[str, RegisteredTemplate] = {}
        self._frozen = False
        for definition, metadata in entries:
            self.register(definition, metadata)

    # -- Registration ------------------------------------------------------

    def register(self, definition: TemplateDefinition, metadata: TemplateMetadata) -> None:
        """Add or replace the template stored under ``metadata.key``.

        Raises:
            RuntimeError: If the registry has been frozen.
        """
        if self._frozen:
            raise RuntimeError(f"Template registry is frozen; cannot register {metadata.key}")
        if metadata.key in self._templates:
            logger.debug("Replacing template %s", metadata.key)
        self._templates[metadata.key] = RegisteredTemplate(definition, metadata)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- Lookup ------------------------------------------------------------

    def get(self, key: str) -> Optional[RegisteredTemplate]:
        return self._templates.get(key)

    def get_by_artifact_kind(self, artifact_kind: str) -> list[RegisteredTemplate]:
        """All templates of one artifact kind, in registration order."""
        return [t for t in self._templates.values() if t.metadata.artifact_kind == artifact_kind]

    def has(self, key: str) -> bool:
        return key in self._templates

    def keys(self) -> list[str]:
        return list(self._templates)

    def size(self) -> int:
        return len(self._templates)

    def artifact_kinds(self) -> list[str]:
        kinds: list[str] = []
        for template in self._templates.values():
            if template.metadata.artifact_kind not in kinds:
                kinds.append(template.metadata.artifact_kind)
        return kinds

    def file_kinds(self, artifact_kind: str) -> list[str]:
        return [t.metadata.file_kind for t in self.get_by_artifact_kind(artifact_kind)]

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, key: object) -> bool:
        return key in self._templates


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def create_template_registry(builtins: bool = True) -> TemplateRegistry:
    """Create an isolated, mutable registry, optionally seeded with the catalog."""
    if not builtins:
        return TemplateRegistry()

    from libgen.catalog import CATALOG

    return TemplateRegistry(CATALOG)


_shared_registry: Optional[TemplateRegistry] = None
_shared_lock = threading.Lock()


def get_template_registry() -> TemplateRegistry:
    """Return the shared, frozen catalog registry."""
    global _shared_registry
    if _shared_registry is None:
        with _shared_lock:
            if _shared_registry is None:
                registry = create_template_registry(builtins=True)
                registry.freeze()
                logger.debug("Template registry initialised with %d templates", registry.size())
                _shared_registry = registry
    return _shared_registry


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_context(
    key: str,
    context: Mapping[str, Any],
    registry: Optional[TemplateRegistry] = None,
) -> ContextValidation:
    """Check the declared required variables of template *key* against *context*.

    Unknown keys fail closed with ``missing == ["Template not found"]``.
    """
    registry = registry if registry is not None else get_template_registry()
    template = registry.get(key)
    if template is None:
        return ContextValidation(valid=False, missing=[TEMPLATE_NOT_FOUND])

    missing = [
        name
        for name in template.metadata.required_context
        if context.get(name) is None
    ]
    return ContextValidation(valid=not missing, missing=missing)

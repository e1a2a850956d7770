"""Load template definitions from YAML or JSON files.

A definition file is a mapping in the shape of :class:`TemplateDefinition`
with an optional ``metadata`` block::

    id: contract/readme
    metadata:
      artifact_kind: contract
      file_kind: readme
      required_context: [className, fileName]
    meta:
      title: "{className} contract"
    sections:
      - content: {type: raw, value: "export {}"}

Without ``metadata`` the artifact and file kinds are taken from an ``id`` of
the form ``<artifact>/<file>``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from libgen.errors import DefinitionLoadError

from .models import TemplateDefinition, TemplateMetadata

if TYPE_CHECKING:
    from libgen.registry.registry import TemplateRegistry

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)


def _read(path: Path) -> Any:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DefinitionLoadError(path, f"cannot read file: {exc}") from exc

    try:
        if path.suffix in JSON_SUFFIXES:
            return json.loads(raw)
        return yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise DefinitionLoadError(path, f"invalid syntax: {exc}") from exc


def load_definition(path: str | Path) -> tuple[TemplateDefinition, TemplateMetadata]:
    """Parse one definition file.

    Raises:
        DefinitionLoadError: If the file is unreadable, malformed, or does not
            describe a valid definition.
    """
    file_path = Path(path)
    data = _read(file_path)
    if not isinstance(data, dict):
        raise DefinitionLoadError(file_path, "expected a mapping at the top level")

    data = dict(data)
    raw_metadata = data.pop("metadata", None)

    try:
        definition = TemplateDefinition.model_validate(data)
    except ValidationError as exc:
        raise DefinitionLoadError(file_path, f"invalid definition: {exc}") from exc

    if raw_metadata is None:
        artifact_kind, sep, file_kind = definition.id.partition("/")
        if not sep or not file_kind:
            raise DefinitionLoadError(
                file_path,
                f"no metadata block and id {definition.id!r} is not '<artifact>/<file>'",
            )
        raw_metadata = {"artifact_kind": artifact_kind, "file_kind": file_kind}

    try:
        metadata = TemplateMetadata.model_validate(raw_metadata)
    except ValidationError as exc:
        raise DefinitionLoadError(file_path, f"invalid metadata: {exc}") from exc

    logger.debug("Loaded definition %s from %s", metadata.key, file_path)
    return definition, metadata


def load_definitions(directory: str | Path) -> list[tuple[TemplateDefinition, TemplateMetadata]]:
    """Load every ``*.yaml``, ``*.yml`` and ``*.json`` file under *directory*.

    Files are visited in sorted path order.  A missing directory yields an
    empty list.
    """
    root = Path(directory)
    if not root.is_dir():
        logger.warning("Definition directory does not exist: %s", root)
        return []

    paths = sorted(
        p for p in root.rglob("*") if p.is_file() and p.suffix in YAML_SUFFIXES + JSON_SUFFIXES
    )
    return [load_definition(p) for p in paths]


def register_directory(registry: TemplateRegistry, directory: str | Path) -> list[str]:
    """Register every definition under *directory*; returns the registered keys."""
    keys = []
    for definition, metadata in load_definitions(directory):
        registry.register(definition, metadata)
        keys.append(metadata.key)
    if keys:
        logger.info("Registered %d definition(s) from %s", len(keys), directory)
    return keys

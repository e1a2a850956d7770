"""libgen configuration.

Typed settings for the generator and the CLI.  Pydantic v2 validates values at
construction time and handles the JSON round trip; :meth:`GeneratorConfig.from_env`
reads ``LIBGEN_*`` environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class GeneratorConfig(BaseModel):
    """Global libgen configuration.

    Created once by the CLI (or by a host embedding the generator) and passed
    to :class:`~libgen.registry.generator.TemplateGenerator`.
    """

    default_scope: str = Field(default="@app", min_length=1)
    entity_type_source: str = Field(
        default="./types", description="Module the contract ports import entity types from"
    )
    output_dir: Path = Field(default=Path("."))
    libs_dir: str = Field(default="libs")
    log_level: LogLevel = Field(default="INFO")
    telemetry_enabled: bool = Field(default=True)
    overwrite: bool = Field(default=False, description="Replace files that already exist")
    domain_kinds: list[str] = Field(default=["contract", "data-access", "feature"])
    template_dirs: list[Path] = Field(
        default_factory=list, description="Extra YAML/JSON definition directories"
    )

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def libs_path(self) -> Path:
        """Root under which generated libraries are written."""
        return self.output_dir / self.libs_dir

    def library_path(self, artifact_kind: str, file_name: str) -> Path:
        """``<libs_path>/<artifact_kind>/<file_name>``."""
        return self.libs_path / artifact_kind / file_name

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<output_dir>/libgen.json``.

        Returns:
            The path the file was written to.
        """
        target = path or (self.output_dir / "libgen.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "GeneratorConfig":
        """Load a previously saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        """Build a ``GeneratorConfig`` from environment variables.

        Recognised variables (all optional):
            LIBGEN_SCOPE, LIBGEN_ENTITY_TYPE_SOURCE, LIBGEN_OUTPUT_DIR,
            LIBGEN_LIBS_DIR, LIBGEN_LOG_LEVEL, LIBGEN_TELEMETRY,
            LIBGEN_OVERWRITE, LIBGEN_DOMAIN_KINDS, LIBGEN_TEMPLATE_DIRS.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("LIBGEN_SCOPE"):
            kwargs["default_scope"] = os.environ["LIBGEN_SCOPE"]
        if os.environ.get("LIBGEN_ENTITY_TYPE_SOURCE"):
            kwargs["entity_type_source"] = os.environ["LIBGEN_ENTITY_TYPE_SOURCE"]
        if os.environ.get("LIBGEN_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["LIBGEN_OUTPUT_DIR"])
        if os.environ.get("LIBGEN_LIBS_DIR"):
            kwargs["libs_dir"] = os.environ["LIBGEN_LIBS_DIR"]
        if os.environ.get("LIBGEN_LOG_LEVEL"):
            kwargs["log_level"] = os.environ["LIBGEN_LOG_LEVEL"].upper()
        if os.environ.get("LIBGEN_TELEMETRY"):
            kwargs["telemetry_enabled"] = _env_flag(os.environ["LIBGEN_TELEMETRY"])
        if os.environ.get("LIBGEN_OVERWRITE"):
            kwargs["overwrite"] = _env_flag(os.environ["LIBGEN_OVERWRITE"])
        if os.environ.get("LIBGEN_DOMAIN_KINDS"):
            kwargs["domain_kinds"] = _split(os.environ["LIBGEN_DOMAIN_KINDS"])
        if os.environ.get("LIBGEN_TEMPLATE_DIRS"):
            kwargs["template_dirs"] = [
                Path(p) for p in os.environ["LIBGEN_TEMPLATE_DIRS"].split(os.pathsep) if p
            ]
        return cls(**kwargs)


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]

"""Command-line entry point.

Examples::

    libgen list
    libgen generate contract user --scope @app --set includeCQRS=true
    libgen generate provider stripe --set externalService=Stripe --dry-run
    libgen domain customer --scope @shop -o ./workspace
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from rich.table import Table

from libgen import __version__
from libgen.config import GeneratorConfig
from libgen.errors import LibgenError
from libgen.naming import create_naming_variants
from libgen.registry.generator import GenerationResult, GeneratorOptions, TemplateGenerator
from libgen.registry.registry import (
    TemplateRegistry,
    create_template_registry,
    get_template_registry,
)
from libgen.templates.loader import register_directory
from libgen.utils import (
    console,
    format_duration,
    print_error,
    print_file_table,
    print_success,
    print_summary_table,
    print_warning,
    setup_logging,
)
from libgen.writer import DiskWriter, FileExistsConflict, MemoryWriter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def parse_assignments(values: Sequence[str] | None) -> dict[str, Any]:
    """Turn ``key=value`` strings into a context dict.

    ``true``/``false`` become booleans; everything else stays a string.

    Raises:
        ValueError: On an item without ``=`` or with an empty key.
    """
    context: dict[str, Any] = {}
    for item in values or ():
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {item!r}")
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            context[key] = lowered == "true"
        else:
            context[key] = value
    return context


def parse_list(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="libgen",
        description="Generate Effect-based TypeScript libraries from declarative templates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  libgen list\n"
            "  libgen generate contract user --scope @app\n"
            "  libgen domain customer --scope @shop --dry-run\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: LIBGEN_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--template-dir",
        action="append",
        default=[],
        help="Extra directory of YAML/JSON template definitions (repeatable)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List available templates")

    gen = sub.add_parser("generate", help="Generate one library")
    gen.add_argument("kind", help="Artifact kind, e.g. contract, data-access, feature")
    gen.add_argument("name", help="Domain name, e.g. user or order-item")
    gen.add_argument(
        "--files",
        default=None,
        help="Comma-separated file kinds (default: every template of the kind)",
    )
    _add_output_options(gen)

    domain = sub.add_parser("domain", help="Generate several libraries for one domain")
    domain.add_argument("name", help="Domain name")
    domain.add_argument(
        "--kinds",
        default=None,
        help="Comma-separated artifact kinds (default: LIBGEN_DOMAIN_KINDS or contract,data-access,feature)",
    )
    _add_output_options(domain)

    return parser


def _add_output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--scope", default=None, help="Package scope (default: @app)")
    parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Extra context variable (repeatable)",
    )
    parser.add_argument("--output", "-o", default=None, help="Workspace root (default: .)")
    parser.add_argument("--dry-run", action="store_true", help="Render without writing files")
    parser.add_argument("--force", action="store_true", help="Overwrite existing files")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def load_registry(template_dirs: Sequence[Path]) -> TemplateRegistry:
    """Shared registry, or a private one extended with *template_dirs*."""
    if not template_dirs:
        return get_template_registry()
    registry = create_template_registry(builtins=True)
    for directory in template_dirs:
        register_directory(registry, directory)
    registry.freeze()
    return registry


def cmd_list(registry: TemplateRegistry) -> int:
    table = Table(title="Templates", show_header=True, header_style="bold cyan")
    table.add_column("Key", no_wrap=True)
    table.add_column("Description")
    table.add_column("Optional context", style="dim")
    for key in registry.keys():
        template = registry.get(key)
        table.add_row(
            key,
            template.metadata.description,
            ", ".join(template.metadata.optional_context) or "-",
        )
    console.print(table)
    return 0


async def write_results(
    results: Sequence[GenerationResult],
    name: str,
    config: GeneratorConfig,
    dry_run: bool,
    force: bool,
) -> int:
    """Persist every result below ``libs/<kind>/<fileName>/``.

    Existing files are detected across all libraries before anything is
    written.
    """
    file_name = create_naming_variants(name).file_name
    overwrite = force or config.overwrite
    planned: list[tuple[GenerationResult, Path, DiskWriter | MemoryWriter]] = []
    for result in results:
        root = config.library_path(result.library_type, file_name)
        writer: DiskWriter | MemoryWriter = (
            MemoryWriter() if dry_run else DiskWriter(root, overwrite=overwrite)
        )
        planned.append((result, root, writer))

    if not dry_run and not overwrite:
        existing = [
            path
            for result, _, writer in planned
            for path in await writer.conflicts(result.files)
        ]
        if existing:
            raise FileExistsConflict(
                "Refusing to overwrite existing file(s): " + ", ".join(map(str, existing))
            )

    rows: list[tuple[str, str, str]] = []
    status = "dry-run" if dry_run else "written"
    for result, root, writer in planned:
        await writer.write_all(result.files)
        rows.extend((f.template_id, str(root / f.path), status) for f in result.files)
        for warning in result.warnings or ():
            print_warning(warning)

    print_file_table(rows)
    return len(rows)


def run_generation(args: argparse.Namespace, config: GeneratorConfig, registry: TemplateRegistry) -> int:
    generator = TemplateGenerator(registry=registry, config=config)
    context = parse_assignments(args.assignments)
    scope = args.scope or config.default_scope

    if args.command == "generate":
        results = [
            generator.generate_library(
                GeneratorOptions(
                    name=args.name,
                    scope=scope,
                    library_type=args.kind,
                    file_types=parse_list(args.files),
                    context=context,
                )
            )
        ]
    else:
        results = generator.generate_domain(args.name, scope, parse_list(args.kinds), context)

    written = asyncio.run(write_results(results, args.name, config, args.dry_run, args.force))
    total_ms = sum(r.duration_ms for r in results)
    print_summary_table(
        {
            "Name": args.name,
            "Scope": scope,
            "Libraries": ", ".join(r.library_type for r in results),
            "Files": str(written),
            "Duration": format_duration(total_ms / 1000),
        },
        title="Generation",
    )
    if written == 0:
        print_warning("No files generated")
        return 1
    print_success("Done" if not args.dry_run else "Dry run complete, nothing written")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point for ``libgen`` and ``python -m libgen``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = GeneratorConfig.from_env()
    updates: dict[str, Any] = {}
    if args.log_level:
        updates["log_level"] = args.log_level
    if getattr(args, "output", None):
        updates["output_dir"] = Path(args.output)
    if args.template_dir:
        updates["template_dirs"] = [*config.template_dirs, *map(Path, args.template_dir)]
    if updates:
        config = config.model_copy(update=updates)

    setup_logging(config.log_level)

    try:
        registry = load_registry(config.template_dirs)
        if args.command == "list":
            return cmd_list(registry)
        return run_generation(args, config, registry)
    except FileExistsConflict as exc:
        print_error(f"Error: {exc} (use --force to overwrite)")
        return 1
    except (LibgenError, ValueError) as exc:
        logger.debug("Generation failed", exc_info=True)
        print_error(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

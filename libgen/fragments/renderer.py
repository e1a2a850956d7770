"""Jinja2 layout templates for fragment renderers.

The fragment renderers interpolate their structural fields first and then hand
the finished strings to a ``.j2`` layout as plain variables.  Jinja never
evaluates the content of a variable, so neither ``{placeholder}`` nor ``${x}``
text inside a value is touched by this step.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


def doc_lines(text: str, prefix: str) -> str:
    """Continue a multi-line doc comment, prefixing every line after the first."""
    return "\n".join(
        line if i == 0 else f"{prefix}{line}".rstrip()
        for i, line in enumerate(str(text).splitlines())
    )


class FragmentLayout:
    """Renders the ``.j2`` layouts shipped in ``libgen/fragments/templates/``."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["doc"] = doc_lines

    def render(self, template_name: str, **values: Any) -> str:
        """Render *template_name* and strip trailing whitespace."""
        template = self.env.get_template(template_name)
        return template.render(**values).rstrip()

    def list_templates(self) -> list[str]:
        return sorted(self.env.list_templates(extensions=["j2"]))


@lru_cache(maxsize=1)
def get_layout() -> FragmentLayout:
    """Return the shared layout renderer (templates are read-only)."""
    return FragmentLayout()


def render_params(params: list[tuple[str, str, bool]]) -> str:
    """Join ``(name, type, optional)`` triples into a TypeScript parameter list."""
    return ", ".join(
        f"{name}{'?' if optional else ''}: {type_}" for name, type_, optional in params
    )

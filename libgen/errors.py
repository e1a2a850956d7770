"""Exception hierarchy for the libgen template pipeline.

Every failure the compiler or generator can produce has its own class so that
callers can react to the exact failure kind instead of parsing messages.  All
of them derive from :class:`LibgenError`.
"""

from __future__ import annotations

from pathlib import Path


class LibgenError(Exception):
    """Base class for all libgen errors."""


class InterpolationError(LibgenError):
    """Raised when one or more ``{placeholders}`` cannot be resolved."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Unknown variable(s): {', '.join(self.missing)}")


class ContextValidationError(LibgenError):
    """Raised when a template's required context variables are absent."""

    def __init__(self, template_key: str, missing: list[str]) -> None:
        self.template_key = template_key
        self.missing = list(missing)
        super().__init__(
            f"Missing required context variables for {template_key}: "
            f"{', '.join(self.missing)}"
        )


class TemplateNotFoundError(LibgenError):
    """Raised when no catalog entry exists for an (artifact, file) pair."""

    def __init__(self, library_type: str, file_type: str) -> None:
        self.library_type = library_type
        self.file_type = file_type
        self.key = f"{library_type}/{file_type}"
        super().__init__(f"Template not found: {self.key}")


class FragmentNotFoundError(LibgenError):
    """Raised when a section references an unregistered fragment type."""

    def __init__(self, fragment_type: str) -> None:
        self.fragment_type = fragment_type
        super().__init__(f"Fragment type not found: {fragment_type}")


class CompilationError(LibgenError):
    """Raised when a template definition cannot be compiled."""

    def __init__(self, template_id: str, cause: Exception) -> None:
        self.template_id = template_id
        self.cause = cause
        super().__init__(f"Failed to compile {template_id}: {cause}")


class GenerationError(LibgenError):
    """Raised when generating a file fails after its template was resolved."""

    def __init__(self, template_key: str, cause: Exception) -> None:
        self.template_key = template_key
        self.cause = cause
        super().__init__(f"Failed to generate {template_key}: {cause}")


class DefinitionLoadError(LibgenError):
    """Raised when a template definition file cannot be parsed."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")

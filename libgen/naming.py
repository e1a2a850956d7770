"""Naming-variant helpers.

Converts a short user-supplied name (``user-profile``, ``userProfile``,
``User Profile``...) into the casing variants that seed a template context.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

_WORD_SPLIT = re.compile(r"[-_\s]+")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


class NamingVariants(BaseModel):
    """The four casing forms derived from a single name."""

    model_config = ConfigDict(frozen=True)

    name: str
    class_name: str
    property_name: str
    file_name: str
    constant_name: str

    def as_context(self) -> dict[str, str]:
        """Return the variants keyed by their template variable names."""
        return {
            "name": self.name,
            "className": self.class_name,
            "propertyName": self.property_name,
            "fileName": self.file_name,
            "constantName": self.constant_name,
        }


def _words(value: str) -> list[str]:
    """Split *value* on separators and lower/upper case boundaries."""
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", value.strip())
    return [w for w in _WORD_SPLIT.split(spaced) if w]


def to_pascal_case(value: str) -> str:
    """Convert ``some-thing`` or ``someThing`` to ``SomeThing``."""
    return "".join(word[0].upper() + word[1:].lower() for word in _words(value))


def to_camel_case(value: str) -> str:
    """Convert ``some-thing`` or ``SomeThing`` to ``someThing``."""
    pascal = to_pascal_case(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""


def to_kebab_case(value: str) -> str:
    """Convert ``SomeThing`` or ``some_thing`` to ``some-thing``."""
    return "-".join(word.lower() for word in _words(value))


def to_constant_case(value: str) -> str:
    """Convert ``someThing`` or ``some-thing`` to ``SOME_THING``."""
    return "_".join(word.upper() for word in _words(value))


def create_naming_variants(name: str) -> NamingVariants:
    """Derive every naming variant from *name*.

    Raises:
        ValueError: If *name* contains no usable word characters.
    """
    if not _words(name):
        raise ValueError(f"Cannot derive naming variants from {name!r}")

    camel = to_camel_case(name)
    return NamingVariants(
        name=camel,
        class_name=to_pascal_case(name),
        property_name=camel,
        file_name=to_kebab_case(name),
        constant_name=to_constant_case(name),
    )

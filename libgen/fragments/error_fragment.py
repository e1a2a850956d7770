"""Tagged-error fragment: ``Data.TaggedError`` classes with static factories.

Names, field types and parameter lists are interpolated.  Static-method bodies
are emitted exactly as written because they carry TypeScript template
literals (``${value}``).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from libgen.templates.buffer import CodeBuffer
from libgen.templates.resolver import has_interpolation, interpolate

from .models import (
    ErrorField,
    ErrorStaticMethod,
    MethodParam,
    TaggedErrorFragmentConfig,
)
from .renderer import get_layout, render_params

# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


def _optional(text: Optional[str], context: Mapping[str, Any]) -> Optional[str]:
    return interpolate(text, context) if text else None


def render_tagged_error_fragment(
    buffer: CodeBuffer,
    config: TaggedErrorFragmentConfig,
    context: Mapping[str, Any],
) -> None:
    class_name = interpolate(config.class_name, context)
    tag_name = interpolate(config.tag_name, context) if config.tag_name else class_name

    fields = [
        {
            "name": interpolate(f.name, context),
            "type": interpolate(f.type, context),
            "optional": f.optional,
            "jsdoc": _optional(f.jsdoc, context),
        }
        for f in config.fields
    ]
    static_methods = [
        {
            "name": interpolate(method.name, context),
            "params": render_params(
                [
                    (interpolate(p.name, context), interpolate(p.type, context), p.optional)
                    for p in method.params
                ]
            ),
            "body": method.body,
        }
        for method in config.static_methods
    ]

    buffer.add(
        get_layout().render(
            "tagged_error.ts.j2",
            jsdoc=_optional(config.jsdoc, context),
            exported=config.exported,
            class_name=class_name,
            tag_name=tag_name,
            fields=fields,
            static_methods=static_methods,
        )
    )


# ---------------------------------------------------------------------------
# Presets
#
# Factories construct through ``new this(...)`` so that the body never needs
# the class name and stays valid when *class_name* is itself a placeholder.
# ---------------------------------------------------------------------------


def _label(class_name: str) -> str:
    """Human-readable entity name for messages inside opaque bodies."""
    return "Resource" if has_interpolation(class_name) else class_name


def _message_field() -> ErrorField:
    return ErrorField(name="message", type="string", jsdoc="Human-readable error message")


def not_found_error_fragment(class_name: str, id_field: str = "id") -> TaggedErrorFragmentConfig:
    label = _label(class_name)
    return TaggedErrorFragmentConfig(
        class_name=f"{class_name}NotFoundError",
        fields=[
            _message_field(),
            ErrorField(name=id_field, type="string", jsdoc="Identifier that was not found"),
        ],
        static_methods=[
            ErrorStaticMethod(
                name="create",
                params=[MethodParam(name=id_field, type="string")],
                body=(
                    "return new this({\n"
                    f"      message: `{label} not found: ${{{id_field}}}`,\n"
                    f"      {id_field}\n"
                    "    })"
                ),
            )
        ],
        jsdoc=f"Error thrown when {class_name} is not found",
    )


def validation_error_fragment(class_name: str) -> TaggedErrorFragmentConfig:
    return TaggedErrorFragmentConfig(
        class_name=f"{class_name}ValidationError",
        fields=[
            _message_field(),
            ErrorField(name="field", type="string", optional=True, jsdoc="Field that failed validation"),
            ErrorField(name="constraint", type="string", optional=True, jsdoc="Constraint that was violated"),
            ErrorField(name="value", type="unknown", optional=True, jsdoc="Invalid value"),
        ],
        static_methods=[
            ErrorStaticMethod(
                name="create",
                params=[
                    MethodParam(
                        name="params",
                        type="{ message: string; field?: string; constraint?: string; value?: unknown }",
                    )
                ],
                body=(
                    "return new this({\n"
                    "      message: params.message,\n"
                    "      ...(params.field !== undefined && { field: params.field }),\n"
                    "      ...(params.constraint !== undefined && { constraint: params.constraint }),\n"
                    "      ...(params.value !== undefined && { value: params.value })\n"
                    "    })"
                ),
            ),
            ErrorStaticMethod(
                name="fieldRequired",
                params=[MethodParam(name="field", type="string")],
                body=(
                    "return new this({\n"
                    "      message: `${field} is required`,\n"
                    "      field,\n"
                    '      constraint: "required"\n'
                    "    })"
                ),
            ),
            ErrorStaticMethod(
                name="fieldInvalid",
                params=[
                    MethodParam(name="field", type="string"),
                    MethodParam(name="constraint", type="string"),
                    MethodParam(name="value", type="unknown", optional=True),
                ],
                body=(
                    "return new this({\n"
                    "      message: `${field} is invalid: ${constraint}`,\n"
                    "      field,\n"
                    "      constraint,\n"
                    "      ...(value !== undefined && { value })\n"
                    "    })"
                ),
            ),
        ],
        jsdoc=f"Error thrown when {class_name} validation fails",
    )


def already_exists_error_fragment(class_name: str) -> TaggedErrorFragmentConfig:
    label = _label(class_name)
    return TaggedErrorFragmentConfig(
        class_name=f"{class_name}AlreadyExistsError",
        fields=[
            _message_field(),
            ErrorField(name="identifier", type="string", optional=True, jsdoc="Identifier of existing resource"),
        ],
        static_methods=[
            ErrorStaticMethod(
                name="create",
                params=[MethodParam(name="identifier", type="string", optional=True)],
                body=(
                    "return new this({\n"
                    "      message: identifier\n"
                    f"        ? `{label} already exists: ${{identifier}}`\n"
                    f'        : "{label} already exists",\n'
                    "      ...(identifier !== undefined && { identifier })\n"
                    "    })"
                ),
            )
        ],
        jsdoc=f"Error thrown when {class_name} already exists",
    )


def permission_error_fragment(class_name: str, id_field: str = "id") -> TaggedErrorFragmentConfig:
    label = _label(class_name)
    return TaggedErrorFragmentConfig(
        class_name=f"{class_name}PermissionError",
        fields=[
            _message_field(),
            ErrorField(name="operation", type="string", jsdoc="Operation that was denied"),
            ErrorField(name=id_field, type="string", jsdoc="Resource identifier"),
        ],
        static_methods=[
            ErrorStaticMethod(
                name="create",
                params=[
                    MethodParam(name="params", type=f"{{ operation: string; {id_field}: string }}")
                ],
                body=(
                    "return new this({\n"
                    f"      message: `Operation '${{params.operation}}' not permitted on {label} "
                    f"${{params.{id_field}}}`,\n"
                    "      operation: params.operation,\n"
                    f"      {id_field}: params.{id_field}\n"
                    "    })"
                ),
            )
        ],
        jsdoc=f"Error thrown when a {class_name} operation is not permitted",
    )


def database_error_fragment(class_name: str) -> TaggedErrorFragmentConfig:
    return TaggedErrorFragmentConfig(
        class_name=f"{class_name}DatabaseError",
        fields=[
            _message_field(),
            ErrorField(name="operation", type="string", jsdoc="Database operation that failed"),
            ErrorField(name="cause", type="string", optional=True, jsdoc="Underlying error cause"),
        ],
        static_methods=[
            ErrorStaticMethod(
                name="create",
                params=[
                    MethodParam(name="params", type="{ message: string; operation: string; cause?: string }")
                ],
                body=(
                    "return new this({\n"
                    "      message: params.message,\n"
                    "      operation: params.operation,\n"
                    "      ...(params.cause !== undefined && { cause: params.cause })\n"
                    "    })"
                ),
            )
        ],
        jsdoc=f"Error thrown when a {class_name} database operation fails",
    )


def domain_error_fragments(class_name: str, id_field: str = "id") -> list[TaggedErrorFragmentConfig]:
    """Not-found, validation, already-exists and permission errors for one entity."""
    return [
        not_found_error_fragment(class_name, id_field),
        validation_error_fragment(class_name),
        already_exists_error_fragment(class_name),
        permission_error_fragment(class_name, id_field),
    ]


def repository_error_fragments(class_name: str, id_field: str = "id") -> list[TaggedErrorFragmentConfig]:
    """Repository-layer error set for one entity."""
    label = _label(class_name)
    conflict = TaggedErrorFragmentConfig(
        class_name=f"{class_name}ConflictRepositoryError",
        fields=[
            _message_field(),
            ErrorField(name="identifier", type="string", optional=True, jsdoc="Identifier of conflicting resource"),
        ],
        static_methods=[
            ErrorStaticMethod(
                name="create",
                params=[MethodParam(name="identifier", type="string", optional=True)],
                body=(
                    "return new this({\n"
                    "      message: identifier\n"
                    f"        ? `{label} conflict: ${{identifier}}`\n"
                    f'        : "{label} conflict",\n'
                    "      ...(identifier !== undefined && { identifier })\n"
                    "    })"
                ),
            )
        ],
        jsdoc=f"Repository error for {class_name} conflicts",
    )
    return [
        not_found_error_fragment(class_name, id_field).model_copy(
            update={
                "class_name": f"{class_name}NotFoundRepositoryError",
                "jsdoc": f"Repository error for {class_name} not found",
            }
        ),
        validation_error_fragment(class_name).model_copy(
            update={
                "class_name": f"{class_name}ValidationRepositoryError",
                "jsdoc": f"Repository error for {class_name} validation failures",
            }
        ),
        conflict,
        database_error_fragment(class_name),
    ]

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Derive the JSON Schema objects advertised by ``tools/list``.

Parameter declarations (:class:`~conduitmcp.param.Param`) are rendered into
the object-shaped ``inputSchema`` MCP requires.  Hand-written schemas supplied
by callers go through :func:`ensure_object_schema` so the same rule holds for
them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, MutableMapping
import copy
from typing import Any

from ..param import Param, ParamType


__all__ = [
    "EMPTY_OBJECT_SCHEMA",
    "JsonSchema",
    "SchemaError",
    "build_input_schema",
    "compress_schema",
    "ensure_object_schema",
    "param_schema",
    "prompt_arguments",
]


JsonSchema = dict[str, Any]

EMPTY_OBJECT_SCHEMA: Mapping[str, Any] = {"type": "object", "properties": {}}


class SchemaError(ValueError):
    """Raised when a schema cannot be generated or does not describe an object."""


def build_input_schema(params: Iterable[Param] | None) -> JsonSchema:
    """Render a parameter list as an object schema.

    Args:
        params: Declared parameters, or ``None`` for a definition that accepts
            anything.

    Returns:
        JsonSchema: ``{"type": "object", "properties": ..., "required": [...]}``;
        ``required`` is omitted when empty.

    """
    if params is None:
        return copy.deepcopy(dict(EMPTY_OBJECT_SCHEMA))

    properties: dict[str, Any] = {}
    required: list[str] = []
    for entry in params:
        properties[entry.name] = param_schema(entry)
        if entry.required:
            required.append(entry.name)

    schema: JsonSchema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def param_schema(entry: Param) -> JsonSchema:
    """Render a single parameter, including its constraints.

    Args:
        entry: Parameter declaration.

    Returns:
        JsonSchema: Property schema for ``entry``.

    """
    schema = _type_schema(entry.type)
    if entry.base_type == "array" and entry.items is not None and "items" not in schema:
        schema["items"] = _type_schema(entry.items)
    if entry.base_type == "object" and entry.fields:
        nested = build_input_schema(entry.fields)
        schema["properties"] = nested["properties"]
        if "required" in nested:
            schema["required"] = nested["required"]

    if entry.description:
        schema["description"] = entry.description
    if entry.enum is not None:
        schema["enum"] = list(entry.enum)
    if entry.has_default:
        schema["default"] = copy.deepcopy(entry.default)
    if entry.min is not None:
        schema["minimum"] = entry.min
    if entry.max is not None:
        schema["maximum"] = entry.max
    if entry.min_length is not None:
        schema["minLength"] = entry.min_length
    if entry.max_length is not None:
        schema["maxLength"] = entry.max_length
    return schema


def prompt_arguments(params: Iterable[Param] | None) -> list[dict[str, Any]]:
    """Render parameters in the ``prompts/list`` argument shape."""
    if params is None:
        return []
    arguments: list[dict[str, Any]] = []
    for entry in params:
        item: dict[str, Any] = {"name": entry.name, "required": entry.required}
        if entry.description:
            item["description"] = entry.description
        arguments.append(item)
    return arguments


def ensure_object_schema(schema: Mapping[str, Any]) -> JsonSchema:
    """Validate a caller-supplied ``inputSchema`` and return a private copy.

    Args:
        schema: JSON Schema to inspect.

    Returns:
        JsonSchema: Deep copy of ``schema`` with cosmetic titles removed.

    Raises:
        SchemaError: If ``schema`` is not a mapping or does not describe an
            object.

    """
    if not isinstance(schema, Mapping):
        raise SchemaError("Input schema must be a JSON object")
    if not _describes_object(schema):
        raise SchemaError("Input schema must describe an object (type: object)")
    return compress_schema(dict(schema))


def compress_schema(schema: JsonSchema, *, drop_titles: bool = True) -> JsonSchema:
    """Return a copy of ``schema`` with ``title`` keys and empty ``required`` lists removed."""
    clone = copy.deepcopy(schema)
    if drop_titles:
        _strip_field(clone, "title")
    _prune_empty_required(clone)
    return clone


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _type_schema(declared: ParamType) -> JsonSchema:
    if isinstance(declared, tuple):
        return {"type": "array", "items": {"type": declared[1]}}
    return {"type": declared}


def _describes_object(schema: Mapping[str, Any]) -> bool:
    if schema.get("type") == "object":
        return True
    return "type" not in schema and "properties" in schema


def _strip_field(node: Any, field_name: str) -> None:
    if isinstance(node, MutableMapping):
        if isinstance(node.get(field_name), str):
            node.pop(field_name)
        for key, value in node.items():
            # Keys under "properties" are parameter names, not keywords.
            if key == "properties" and isinstance(value, MutableMapping):
                for sub in value.values():
                    _strip_field(sub, field_name)
            else:
                _strip_field(value, field_name)
    elif isinstance(node, list):
        for value in node:
            _strip_field(value, field_name)


def _prune_empty_required(node: Any) -> None:
    if isinstance(node, MutableMapping):
        required = node.get("required")
        if isinstance(required, list) and not required:
            node.pop("required")
        for value in node.values():
            _prune_empty_required(value)
    elif isinstance(node, list):
        for value in node:
            _prune_empty_required(value)

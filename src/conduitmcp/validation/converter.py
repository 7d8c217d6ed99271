# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Compile parameter declarations into validation schemas.

A :class:`ValidationSchema` is derived once per tool or prompt when the
definition is created and never changes afterwards.  Each field carries its
constraints plus a strict-mode :class:`pydantic.TypeAdapter` used for the
final type check.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pydantic import TypeAdapter

from ..param import MISSING, Param, ParamType, Validator


_PYTHON_TYPES: Mapping[str, Any] = MappingProxyType(
    {
        "string": str,
        "integer": int,
        "number": float,
        "boolean": bool,
        "object": dict[str, Any],
        "array": list[Any],
        "null": None,
    }
)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Validation rules for one parameter."""

    name: str
    type: ParamType
    required: bool
    default: Any
    enum: tuple[Any, ...] | None
    min: int | float | None
    max: int | float | None
    min_length: int | None
    max_length: int | None
    validator: Validator | None
    adapter: TypeAdapter[Any]

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def base_type(self) -> str:
        return self.type[0] if isinstance(self.type, tuple) else self.type

    @property
    def item_type(self) -> str | None:
        return self.type[1] if isinstance(self.type, tuple) else None

    @property
    def is_numeric(self) -> bool:
        return self.base_type in ("integer", "number")

    @property
    def type_name(self) -> str:
        """Type name used in ``must be of type ...`` messages."""
        if isinstance(self.type, tuple):
            return f"array of {self.type[1]}"
        return self.type


class ValidationSchema(Mapping[str, FieldSpec]):
    """Read-only, ordered mapping from parameter name to :class:`FieldSpec`."""

    __slots__ = ("_fields",)

    def __init__(self, fields: Iterable[FieldSpec] = ()) -> None:
        self._fields: Mapping[str, FieldSpec] = MappingProxyType({spec.name: spec for spec in fields})

    def __getitem__(self, name: str) -> FieldSpec:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"ValidationSchema({list(self._fields)!r})"

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(name for name, spec in self._fields.items() if spec.required)


def python_type_for(declared: ParamType) -> Any:
    """Return the Python annotation checked for a declared parameter type."""
    if isinstance(declared, tuple):
        return list[_PYTHON_TYPES[declared[1]]]
    return _PYTHON_TYPES[declared]


def compile_field(entry: Param) -> FieldSpec:
    declared: ParamType = entry.type
    # ``items=`` on a plain array is shorthand for ``("array", item)``.
    if declared == "array" and isinstance(entry.items, str):
        declared = ("array", entry.items)
    return FieldSpec(
        name=entry.name,
        type=declared,
        required=entry.required,
        default=entry.default,
        enum=entry.enum,
        min=entry.min,
        max=entry.max,
        min_length=entry.min_length,
        max_length=entry.max_length,
        validator=entry.validator,
        adapter=TypeAdapter(python_type_for(declared)),
    )


def compile_validation_schema(params: Iterable[Param]) -> ValidationSchema:
    """Build the :class:`ValidationSchema` for a parameter list."""
    return ValidationSchema(compile_field(entry) for entry in params)


__all__ = [
    "FieldSpec",
    "ValidationSchema",
    "compile_field",
    "compile_validation_schema",
    "python_type_for",
]

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Parameter declarations shared by tools and prompts.

A :class:`Param` describes one named argument: its wire type, whether it is
required, an optional default, and the constraints the validation pipeline
enforces.  Declarations are checked when they are created so mistakes surface
at import time rather than on the first request.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Final, TypeAlias


class _Missing:
    """Marker for "no default declared"; distinct from an explicit ``None``."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final[_Missing] = _Missing()

SCALAR_TYPES: Final[frozenset[str]] = frozenset({"string", "integer", "number", "boolean", "object", "array", "null"})

ParamType: TypeAlias = str | tuple[str, str]
"""``"string"``, ``"integer"`` ... or ``("array", item_type)``."""

Validator: TypeAlias = Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class Param:
    """One declared argument of a tool or prompt."""

    name: str
    type: ParamType = "string"
    description: str | None = None
    required: bool = False
    default: Any = MISSING
    enum: tuple[Any, ...] | None = None
    min: int | float | None = None
    max: int | float | None = None
    min_length: int | None = None
    max_length: int | None = None
    validator: Validator | None = None
    fields: tuple[Param, ...] = ()
    items: ParamType | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Parameter name must be a non-empty string")
        _check_type(self.name, self.type)
        if self.items is not None:
            _check_type(self.name, self.items)
        if self.enum is not None and not isinstance(self.enum, tuple):
            object.__setattr__(self, "enum", tuple(self.enum))
        if not isinstance(self.fields, tuple):
            object.__setattr__(self, "fields", tuple(self.fields))
        if self.validator is not None and not callable(self.validator):
            raise ValueError(f"Parameter '{self.name}': validator must be callable")
        for bound in ("min_length", "max_length"):
            value = getattr(self, bound)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise ValueError(f"Parameter '{self.name}': {bound} must be a non-negative integer")

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def base_type(self) -> str:
        """Type name with any array item type stripped."""
        return self.type[0] if isinstance(self.type, tuple) else self.type

    @property
    def item_type(self) -> str | None:
        if isinstance(self.type, tuple):
            return self.type[1]
        if self.items is not None:
            return self.items if isinstance(self.items, str) else self.items[0]
        return None


def _check_type(name: str, declared: Any) -> None:
    if isinstance(declared, str):
        if declared in SCALAR_TYPES:
            return
    elif (
        isinstance(declared, tuple)
        and len(declared) == 2
        and declared[0] == "array"
        and declared[1] in SCALAR_TYPES
    ):
        return
    raise ValueError(f"Parameter '{name}': unsupported type {declared!r}")


def param(
    name: str,
    type: ParamType = "string",
    *,
    description: str | None = None,
    required: bool = False,
    default: Any = MISSING,
    enum: Iterable[Any] | None = None,
    min: int | float | None = None,
    max: int | float | None = None,
    min_length: int | None = None,
    max_length: int | None = None,
    validator: Validator | None = None,
    fields: Sequence[Param] = (),
    items: ParamType | None = None,
) -> Param:
    """Declare a parameter.

    ``param("count", "integer", required=True, min=1)`` is equivalent to
    constructing :class:`Param` directly; the function form reads better in
    decorator argument lists.
    """
    return Param(
        name=name,
        type=type,
        description=description,
        required=required,
        default=default,
        enum=tuple(enum) if enum is not None else None,
        min=min,
        max=max,
        min_length=min_length,
        max_length=max_length,
        validator=validator,
        fields=tuple(fields),
        items=items,
    )


field = param
arg = param


def normalize_params(params: Iterable[Param] | None) -> tuple[Param, ...] | None:
    """Freeze a parameter list, rejecting duplicate names.

    ``None`` is preserved: it marks a definition that opts out of validation.
    """
    if params is None:
        return None
    frozen = tuple(params)
    seen: set[str] = set()
    for entry in frozen:
        if not isinstance(entry, Param):
            raise ValueError(f"Expected Param, got {type(entry).__name__}")
        if entry.name in seen:
            raise ValueError(f"Duplicate parameter '{entry.name}'")
        seen.add(entry.name)
    return frozen


__all__ = [
    "MISSING",
    "Param",
    "ParamType",
    "Validator",
    "arg",
    "field",
    "normalize_params",
    "param",
]

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Argument validation pipeline.

:func:`validate` runs a fixed sequence of stages over the caller's arguments:

0. defaults are filled in for absent fields that declare one;
1. presence of required fields;
2. enum membership;
3. numeric bounds;
4. string length bounds;
5. custom validator callables;
6. type coercion followed by a strict type check.

Each stage reports every failure of its kind, and the pipeline stops after the
first stage that fails.  A caller who omits two required fields therefore
sees both, but never a type error for a field that was not sent at all.
"""

from __future__ import annotations

from collections.abc import Mapping
import copy
from dataclasses import dataclass
import json
import os
import re
from typing import TYPE_CHECKING, Any, Final

from pydantic import ValidationError

from ..utils import component_logger
from .converter import FieldSpec, ValidationSchema


if TYPE_CHECKING:
    from ..registry import Registry


_INTEGER_RE: Final = re.compile(r"[+-]?\d+")
_NUMBER_RE: Final = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_BOOLEAN_STRINGS: Final[Mapping[str, bool]] = {"true": True, "false": False, "1": True, "0": False}

_logger = component_logger("validation")


# ---------------------------------------------------------------------------
# Configuration and error types
# ---------------------------------------------------------------------------


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class ValidationConfig:
    """Switches for the validation pipeline.

    ``strict_mode=False`` downgrades failures to a warning log and lets the raw
    arguments through.
    """

    runtime_validation: bool = True
    type_coercion: bool = True
    strict_mode: bool = True
    log_validation_errors: bool = False

    @classmethod
    def from_env(cls) -> ValidationConfig:
        return cls(
            runtime_validation=_env_flag("CONDUITMCP_RUNTIME_VALIDATION", True),
            type_coercion=_env_flag("CONDUITMCP_TYPE_COERCION", True),
            strict_mode=_env_flag("CONDUITMCP_STRICT_VALIDATION", True),
            log_validation_errors=_env_flag("CONDUITMCP_LOG_VALIDATION_ERRORS", False),
        )


DEFAULT_CONFIG: Final = ValidationConfig()


@dataclass(frozen=True, slots=True)
class FieldError:
    """One validation failure.

    ``parameter`` is ``None`` for failures that concern the argument object as
    a whole, such as an unknown tool.
    """

    parameter: str | None
    value: Any
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"parameter": self.parameter, "value": self.value, "message": self.message}


class ParameterValidationError(ValueError):
    """Raised by :func:`validate` with every :class:`FieldError` of the failing stage."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        summary = "; ".join(
            f"{error.parameter}: {error.message}" if error.parameter else error.message for error in self.errors
        )
        super().__init__(summary or "invalid arguments")

    def to_data(self) -> list[dict[str, Any]]:
        """Return the errors in the shape sent as JSON-RPC error ``data``."""
        return [error.to_dict() for error in self.errors]


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def validate(
    schema: ValidationSchema,
    arguments: Any,
    config: ValidationConfig | None = None,
    *,
    context: str | None = None,
) -> dict[str, Any]:
    """Validate and coerce ``arguments`` against ``schema``.

    Args:
        schema: Compiled schema of the tool or prompt.
        arguments: Caller-supplied argument object.
        config: Pipeline switches; defaults to :class:`ValidationConfig`.
        context: Label used in log records, e.g. ``"tool:add"``.

    Returns:
        A new dict holding the coerced arguments.  Keys not declared in the
        schema are passed through unchanged.

    Raises:
        ParameterValidationError: If any stage fails.
    """
    config = config or DEFAULT_CONFIG
    if not isinstance(arguments, Mapping):
        raise ParameterValidationError([FieldError(None, arguments, "Arguments must be an object")])
    if not config.runtime_validation:
        return dict(arguments)

    values = _with_defaults(schema, arguments)
    stages = (_check_presence, _check_enum, _check_bounds, _check_length, _check_custom)
    for stage in stages:
        errors = stage(schema, values, config)
        if errors:
            return _fail(errors, arguments, config, context)

    coerced = _coerce(schema, values) if config.type_coercion else values
    errors = _check_types(schema, coerced)
    if errors:
        return _fail(errors, arguments, config, context)
    return coerced


def _fail(
    errors: list[FieldError],
    arguments: Mapping[str, Any],
    config: ValidationConfig,
    context: str | None,
) -> dict[str, Any]:
    if config.log_validation_errors or not config.strict_mode:
        _logger.warning(
            "argument validation failed",
            extra={
                "event": "validation.failed",
                "target": context,
                "errors": [error.to_dict() for error in errors],
                "enforced": config.strict_mode,
            },
        )
    if not config.strict_mode:
        return dict(arguments)
    raise ParameterValidationError(errors)


def _with_defaults(schema: ValidationSchema, arguments: Mapping[str, Any]) -> dict[str, Any]:
    values = dict(arguments)
    for name, spec in schema.items():
        if name not in values and spec.has_default:
            values[name] = copy.deepcopy(spec.default)
    return values


def _check_presence(schema: ValidationSchema, values: dict[str, Any], config: ValidationConfig) -> list[FieldError]:
    return [FieldError(name, None, "is required") for name, spec in schema.items() if spec.required and name not in values]


def _check_enum(schema: ValidationSchema, values: dict[str, Any], config: ValidationConfig) -> list[FieldError]:
    errors: list[FieldError] = []
    for name, spec in schema.items():
        if spec.enum is None or values.get(name) is None:
            continue
        value = values[name]
        if not _enum_contains(spec.enum, value):
            allowed = json.dumps(list(spec.enum), ensure_ascii=False, default=str)
            errors.append(FieldError(name, value, f"must be one of {allowed}"))
    return errors


def _enum_contains(choices: tuple[Any, ...], value: Any) -> bool:
    # True == 1 in Python; a boolean must not satisfy a numeric enum or vice versa.
    return any(value == choice and isinstance(value, bool) == isinstance(choice, bool) for choice in choices)


def _check_bounds(schema: ValidationSchema, values: dict[str, Any], config: ValidationConfig) -> list[FieldError]:
    errors: list[FieldError] = []
    for name, spec in schema.items():
        if not spec.is_numeric or (spec.min is None and spec.max is None) or name not in values:
            continue
        value = values[name]
        number = _numeric_view(spec, value, config)
        if number is None:
            continue
        if spec.min is not None and number < spec.min:
            errors.append(FieldError(name, value, f"must be greater than or equal to {spec.min}"))
        elif spec.max is not None and number > spec.max:
            errors.append(FieldError(name, value, f"must be less than or equal to {spec.max}"))
    return errors


def _numeric_view(spec: FieldSpec, value: Any, config: ValidationConfig) -> int | float | None:
    """Return ``value`` as the number the coercion stage will produce, or ``None``.

    Numeric strings are bound-checked as numbers when coercion is enabled, so
    a value accepted once is still accepted after it has been coerced.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if config.type_coercion and isinstance(value, str):
        coerced = _coerce_scalar(spec.base_type, value)
        if coerced is not value and not isinstance(coerced, bool):
            return coerced
    return None


def _check_length(schema: ValidationSchema, values: dict[str, Any], config: ValidationConfig) -> list[FieldError]:
    errors: list[FieldError] = []
    for name, spec in schema.items():
        if spec.base_type != "string" or (spec.min_length is None and spec.max_length is None):
            continue
        value = values.get(name)
        if not isinstance(value, str):
            continue
        length = len(value)
        if spec.min_length is not None and length < spec.min_length:
            errors.append(FieldError(name, value, f"must be at least {spec.min_length} characters long"))
        elif spec.max_length is not None and length > spec.max_length:
            errors.append(FieldError(name, value, f"must be no more than {spec.max_length} characters long"))
    return errors


def _check_custom(schema: ValidationSchema, values: dict[str, Any], config: ValidationConfig) -> list[FieldError]:
    errors: list[FieldError] = []
    for name, spec in schema.items():
        if spec.validator is None or values.get(name) is None:
            continue
        value = values[name]
        try:
            accepted = spec.validator(value)
        except Exception:
            _logger.debug(
                "custom validator raised",
                exc_info=True,
                extra={"event": "validation.validator_error", "parameter": name},
            )
            errors.append(FieldError(name, value, "validation function error"))
            continue
        if not accepted:
            errors.append(FieldError(name, value, "failed custom validation"))
    return errors


def _coerce(schema: ValidationSchema, values: dict[str, Any]) -> dict[str, Any]:
    coerced = dict(values)
    for name, spec in schema.items():
        if name not in coerced:
            continue
        value = coerced[name]
        if spec.item_type is not None and isinstance(value, list):
            coerced[name] = [_coerce_scalar(spec.item_type, item) for item in value]
        else:
            coerced[name] = _coerce_scalar(spec.base_type, value)
    return coerced


def _coerce_scalar(declared: str, value: Any) -> Any:
    """Convert a string to ``declared`` when the conversion is unambiguous."""
    if not isinstance(value, str):
        return value
    text = value.strip()
    try:
        if declared == "integer" and _INTEGER_RE.fullmatch(text):
            return int(text)
        if declared == "number" and _NUMBER_RE.fullmatch(text):
            return float(text)
    except ValueError:
        # Digit strings past the interpreter's conversion limit stay as given.
        return value
    if declared == "boolean":
        return _BOOLEAN_STRINGS.get(text.lower(), value)
    return value


def _check_types(schema: ValidationSchema, values: dict[str, Any]) -> list[FieldError]:
    errors: list[FieldError] = []
    for name, spec in schema.items():
        if name not in values:
            continue
        value = values[name]
        # An explicit null stands in for an omitted optional argument.
        if value is None and not spec.required:
            continue
        try:
            spec.adapter.validate_python(value, strict=True)
        except ValidationError:
            errors.append(FieldError(name, value, f"must be of type {spec.type_name}"))
    return errors


# ---------------------------------------------------------------------------
# Registry lookups
# ---------------------------------------------------------------------------


def validate_tool_arguments(
    registry: Registry,
    name: str,
    arguments: Any,
    config: ValidationConfig | None = None,
) -> dict[str, Any]:
    """Validate ``arguments`` for the tool registered as ``name``.

    Tools registered without a schema skip validation entirely.
    """
    definition = registry.get_tool(name)
    if definition is None:
        raise ParameterValidationError([FieldError(None, None, f"Tool '{name}' not found")])
    return _validate_definition(definition.validation_schema, arguments, config, f"tool:{name}")


def validate_prompt_arguments(
    registry: Registry,
    name: str,
    arguments: Any,
    config: ValidationConfig | None = None,
) -> dict[str, Any]:
    """Validate ``arguments`` for the prompt registered as ``name``."""
    definition = registry.get_prompt(name)
    if definition is None:
        raise ParameterValidationError([FieldError(None, None, f"Prompt '{name}' not found")])
    return _validate_definition(definition.validation_schema, arguments, config, f"prompt:{name}")


def _validate_definition(
    schema: ValidationSchema | None,
    arguments: Any,
    config: ValidationConfig | None,
    context: str,
) -> dict[str, Any]:
    if not isinstance(arguments, Mapping):
        raise ParameterValidationError([FieldError(None, arguments, "Arguments must be an object")])
    if schema is None:
        return dict(arguments)
    return validate(schema, arguments, config, context=context)


__all__ = [
    "DEFAULT_CONFIG",
    "FieldError",
    "ParameterValidationError",
    "ValidationConfig",
    "validate",
    "validate_prompt_arguments",
    "validate_tool_arguments",
]

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Tests for the argument validation pipeline."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from conduitmcp import RegistryBuilder, param, prompt, tool
from conduitmcp.validation import (
    ParameterValidationError,
    ValidationConfig,
    compile_validation_schema,
    validate,
    validate_prompt_arguments,
    validate_tool_arguments,
)


def _errors(schema, arguments: Any, config: ValidationConfig | None = None) -> list[dict[str, Any]]:
    with pytest.raises(ParameterValidationError) as excinfo:
        validate(schema, arguments, config)
    return excinfo.value.to_data()


def test_missing_required_field_reports_exactly_one_error() -> None:
    schema = compile_validation_schema([param("name", required=True)])

    errors = _errors(schema, {})

    assert errors == [{"parameter": "name", "value": None, "message": "is required"}]


def test_all_missing_fields_are_reported_and_type_checks_are_skipped() -> None:
    schema = compile_validation_schema(
        [
            param("a", "integer", required=True),
            param("b", "integer", required=True),
            param("c", "integer"),
        ]
    )

    errors = _errors(schema, {"c": "not-a-number"})

    assert [error["parameter"] for error in errors] == ["a", "b"]
    assert {error["message"] for error in errors} == {"is required"}


def test_enum_message_lists_allowed_values() -> None:
    schema = compile_validation_schema([param("action", required=True, enum=["start", "stop", "restart"])])

    errors = _errors(schema, {"action": "pause"})

    assert errors == [
        {"parameter": "action", "value": "pause", "message": 'must be one of ["start", "stop", "restart"]'}
    ]
    assert validate(schema, {"action": "stop"}) == {"action": "stop"}


def test_enum_distinguishes_booleans_from_numbers() -> None:
    schema = compile_validation_schema([param("level", "integer", enum=[0, 1, 2])])

    errors = _errors(schema, {"level": True})

    assert errors[0]["message"] == "must be one of [0, 1, 2]"


def test_numeric_bounds() -> None:
    schema = compile_validation_schema([param("n", "integer", min=1, max=10)])

    assert _errors(schema, {"n": 0})[0]["message"] == "must be greater than or equal to 1"
    assert _errors(schema, {"n": 11})[0]["message"] == "must be less than or equal to 10"
    assert validate(schema, {"n": 10}) == {"n": 10}


def test_numeric_bounds_apply_to_numeric_strings() -> None:
    schema = compile_validation_schema([param("n", "integer", min=1, max=10)])

    errors = _errors(schema, {"n": "11"})

    assert errors == [{"parameter": "n", "value": "11", "message": "must be less than or equal to 10"}]
    assert validate(schema, {"n": "7"}) == {"n": 7}


def test_booleans_are_not_bounded_numbers() -> None:
    schema = compile_validation_schema([param("n", "integer", min=5)])

    errors = _errors(schema, {"n": True})

    assert errors == [{"parameter": "n", "value": True, "message": "must be of type integer"}]


def test_string_length_counts_characters() -> None:
    schema = compile_validation_schema([param("code", min_length=2, max_length=4)])

    assert _errors(schema, {"code": "a"})[0]["message"] == "must be at least 2 characters long"
    assert _errors(schema, {"code": "abcde"})[0]["message"] == "must be no more than 4 characters long"
    assert validate(schema, {"code": "éüöä"}) == {"code": "éüöä"}


def test_custom_validator_failure_and_exception() -> None:
    def explode(value: Any) -> bool:
        raise RuntimeError("boom")

    schema = compile_validation_schema(
        [
            param("even", "integer", validator=lambda value: value % 2 == 0),
            param("fragile", validator=explode),
        ]
    )

    errors = _errors(schema, {"even": 3, "fragile": "x"})

    assert errors == [
        {"parameter": "even", "value": 3, "message": "failed custom validation"},
        {"parameter": "fragile", "value": "x", "message": "validation function error"},
    ]


def test_custom_validator_skips_null() -> None:
    calls: list[Any] = []
    schema = compile_validation_schema([param("note", validator=lambda value: calls.append(value) or True)])

    assert validate(schema, {"note": None}) == {"note": None}
    assert calls == []


@pytest.mark.parametrize(
    ("declared", "raw", "expected"),
    [
        ("integer", "5", 5),
        ("integer", " -12 ", -12),
        ("number", "2.5", 2.5),
        ("number", "1e3", 1000.0),
        ("boolean", "TRUE", True),
        ("boolean", "false", False),
        ("boolean", "1", True),
        ("boolean", "0", False),
        ("string", "5", "5"),
    ],
)
def test_coercion(declared: str, raw: str, expected: Any) -> None:
    schema = compile_validation_schema([param("value", declared, required=True)])

    result = validate(schema, {"value": raw})

    assert result == {"value": expected}
    assert type(result["value"]) is type(expected)


@pytest.mark.parametrize(
    ("declared", "raw", "type_name"),
    [
        ("integer", "5.5", "integer"),
        ("integer", 5.0, "integer"),
        ("boolean", "yes", "boolean"),
        ("string", 5, "string"),
        ("object", "{}", "object"),
        ("array", "[]", "array"),
        (("array", "integer"), ["1", "x"], "array of integer"),
    ],
)
def test_type_errors(declared: Any, raw: Any, type_name: str) -> None:
    schema = compile_validation_schema([param("value", declared, required=True)])

    errors = _errors(schema, {"value": raw})

    assert len(errors) == 1
    assert errors[0]["parameter"] == "value"
    assert errors[0]["message"] == f"must be of type {type_name}"


def test_integer_string_past_conversion_limit_is_a_type_error() -> None:
    schema = compile_validation_schema([param("n", "integer", required=True, max=10)])
    digits = "1" * 5000

    assert _errors(schema, {"n": digits}) == [{"parameter": "n", "value": digits, "message": "must be of type integer"}]


def test_array_items_are_coerced() -> None:
    schema = compile_validation_schema([param("ids", ("array", "integer"), required=True)])

    assert validate(schema, {"ids": ["1", 2, " 3"]}) == {"ids": [1, 2, 3]}


def test_items_shorthand_matches_tuple_type() -> None:
    schema = compile_validation_schema([param("flags", "array", items="boolean")])

    assert validate(schema, {"flags": ["true", "0"]}) == {"flags": [True, False]}
    assert schema["flags"].type_name == "array of boolean"


def test_revalidation_is_idempotent() -> None:
    schema = compile_validation_schema(
        [
            param("count", "integer", required=True, min=1),
            param("ratio", "number"),
            param("enabled", "boolean"),
            param("tags", ("array", "integer")),
        ]
    )

    once = validate(schema, {"count": "5", "ratio": "0.5", "enabled": "true", "tags": ["1", "2"], "extra": "x"})
    twice = validate(schema, once)

    assert once == {"count": 5, "ratio": 0.5, "enabled": True, "tags": [1, 2], "extra": "x"}
    assert twice == once


def test_coercion_can_be_disabled() -> None:
    schema = compile_validation_schema([param("count", "integer", required=True)])

    errors = _errors(schema, {"count": "5"}, ValidationConfig(type_coercion=False))

    assert errors == [{"parameter": "count", "value": "5", "message": "must be of type integer"}]


def test_defaults_fill_absent_fields_with_private_copies() -> None:
    schema = compile_validation_schema([param("limit", "integer", default=10), param("tags", "array", default=[])])

    first = validate(schema, {})
    first["tags"].append("mutated")
    second = validate(schema, {})

    assert first["limit"] == 10
    assert second == {"limit": 10, "tags": []}


def test_explicit_null_on_optional_field_is_accepted() -> None:
    schema = compile_validation_schema([param("nickname")])

    assert validate(schema, {"nickname": None}) == {"nickname": None}


def test_unknown_keys_pass_through() -> None:
    schema = compile_validation_schema([param("a", "integer")])

    assert validate(schema, {"a": "1", "other": "2"}) == {"a": 1, "other": "2"}


def test_input_is_not_mutated() -> None:
    schema = compile_validation_schema([param("a", "integer"), param("b", "integer", default=2)])
    arguments = {"a": "1"}

    validate(schema, arguments)

    assert arguments == {"a": "1"}


@pytest.mark.parametrize("arguments", [None, [], "text", 3])
def test_non_object_arguments(arguments: Any) -> None:
    schema = compile_validation_schema([param("a")])

    errors = _errors(schema, arguments)

    assert errors == [{"parameter": None, "value": arguments, "message": "Arguments must be an object"}]


def test_runtime_validation_disabled_passes_arguments_through() -> None:
    schema = compile_validation_schema([param("count", "integer", required=True)])

    assert validate(schema, {"count": "x"}, ValidationConfig(runtime_validation=False)) == {"count": "x"}


def test_lenient_mode_logs_and_returns_raw_arguments(caplog: pytest.LogCaptureFixture) -> None:
    schema = compile_validation_schema([param("count", "integer", required=True)])

    with caplog.at_level(logging.WARNING, logger="conduitmcp.validation"):
        result = validate(schema, {"count": "x"}, ValidationConfig(strict_mode=False), context="tool:count")

    assert result == {"count": "x"}
    record = next(record for record in caplog.records if record.name == "conduitmcp.validation")
    assert record.event == "validation.failed"
    assert record.target == "tool:count"


def test_error_summary() -> None:
    schema = compile_validation_schema([param("name", required=True)])

    with pytest.raises(ParameterValidationError, match="name: is required"):
        validate(schema, {})


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONDUITMCP_TYPE_COERCION", "false")
    monkeypatch.setenv("CONDUITMCP_STRICT_VALIDATION", "0")
    monkeypatch.setenv("CONDUITMCP_LOG_VALIDATION_ERRORS", "yes")
    monkeypatch.delenv("CONDUITMCP_RUNTIME_VALIDATION", raising=False)

    config = ValidationConfig.from_env()

    assert config == ValidationConfig(
        runtime_validation=True,
        type_coercion=False,
        strict_mode=False,
        log_validation_errors=True,
    )


# ---------------------------------------------------------------------------
# Registry lookups
# ---------------------------------------------------------------------------


def _registry():
    builder = RegistryBuilder()

    with builder.binding():

        @tool(params=[param("a", "integer", required=True)])
        def typed(principal, arguments):
            return arguments

        @tool(params=None)
        def untyped(principal, arguments):
            return arguments

        @prompt(params=[param("topic", required=True)])
        def outline(principal, arguments):
            return []

    return builder.build()


def test_tool_arguments_are_validated_against_the_registered_schema() -> None:
    registry = _registry()

    assert validate_tool_arguments(registry, "typed", {"a": "3"}) == {"a": 3}
    with pytest.raises(ParameterValidationError):
        validate_tool_arguments(registry, "typed", {})


def test_tool_without_schema_is_passed_through() -> None:
    registry = _registry()

    assert validate_tool_arguments(registry, "untyped", {"anything": "goes"}) == {"anything": "goes"}
    with pytest.raises(ParameterValidationError) as excinfo:
        validate_tool_arguments(registry, "untyped", ["not", "an", "object"])
    assert excinfo.value.errors[0].message == "Arguments must be an object"


def test_unknown_definitions() -> None:
    registry = _registry()

    with pytest.raises(ParameterValidationError) as excinfo:
        validate_tool_arguments(registry, "missing", {})
    assert excinfo.value.to_data() == [{"parameter": None, "value": None, "message": "Tool 'missing' not found"}]

    with pytest.raises(ParameterValidationError) as excinfo:
        validate_prompt_arguments(registry, "missing", {})
    assert excinfo.value.errors[0].message == "Prompt 'missing' not found"


def test_prompt_arguments() -> None:
    registry = _registry()

    assert validate_prompt_arguments(registry, "outline", {"topic": "mcp"}) == {"topic": "mcp"}
    with pytest.raises(ParameterValidationError) as excinfo:
        validate_prompt_arguments(registry, "outline", {})
    assert excinfo.value.errors[0].parameter == "topic"

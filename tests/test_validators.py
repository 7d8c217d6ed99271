# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import re

import pytest

from conduitmcp import param
from conduitmcp.validation import ParameterValidationError, compile_validation_schema, validate, validators


@pytest.mark.parametrize(
    ("check", "good", "bad"),
    [
        (validators.email, ["a@b.io", "first.last+tag@example.co.uk"], ["nope", "a@b", "@b.io", 42]),
        (validators.url, ["http://example.com", "https://x.io/path?q=1"], ["ftp://x.io", "example.com", None]),
        (validators.positive_number, [1, 0.5], [0, -1, True, "3"]),
        (validators.non_negative_number, [0, 2.5], [-0.1, False, "0"]),
        (validators.non_empty_string, ["x", " a "], ["", "   ", 5]),
        (
            validators.uuid,
            ["123e4567-e89b-12d3-a456-426614174000", "123E4567E89B12D3A456426614174000"],
            ["123e4567-e89b-12d3-a456", "z" * 32, 7],
        ),
        (validators.iso_date, ["2024-02-29", "1999-12-31"], ["2023-02-29", "2024-1-01", "20240101", None]),
        (validators.alphanumeric, ["abc123", "Z"], ["", "with space", "dash-ed"]),
    ],
)
def test_builtin_validators(check, good, bad) -> None:
    assert all(check(value) for value in good)
    assert not any(check(value) for value in bad)


def test_value_range() -> None:
    check = validators.value_range(0, 10)

    assert check(0) and check(10) and check(5.5)
    assert not check(-1) and not check(11) and not check(True) and not check("5")


def test_value_range_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        validators.value_range(10, 0)


def test_regex_searches_anywhere() -> None:
    check = validators.regex(r"\d{3}")

    assert check("abc123def")
    assert not check("12")
    assert validators.regex(re.compile("^x"))("xyz")


def test_combinators() -> None:
    emails = validators.list_of(validators.email)
    assert emails(["a@b.io", "c@d.io"])
    assert emails([])
    assert not emails(["a@b.io", "bad"])
    assert not emails("a@b.io")

    color = validators.one_of(["red", "green"])
    assert color("red") and not color("blue")

    short_word = validators.all_of([validators.alphanumeric, lambda value: len(value) <= 3])
    assert short_word("ab1")
    assert not short_word("abcd")

    id_like = validators.any_of([validators.uuid, validators.alphanumeric])
    assert id_like("abc")
    assert not id_like("a-b")


def test_validators_plug_into_params() -> None:
    schema = compile_validation_schema([param("contact", required=True, validator=validators.email)])

    assert validate(schema, {"contact": "ops@example.com"}) == {"contact": "ops@example.com"}
    with pytest.raises(ParameterValidationError) as excinfo:
        validate(schema, {"contact": "ops"})
    assert excinfo.value.errors[0].message == "failed custom validation"

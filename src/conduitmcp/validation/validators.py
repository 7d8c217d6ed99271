# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Ready-made validators for the ``validator=`` option of :func:`~conduitmcp.param.param`.

Every validator takes the argument value and returns a boolean.  Values of the
wrong Python type are reported as invalid rather than raising.  The factories
(:func:`value_range`, :func:`regex`, :func:`list_of`, :func:`one_of`,
:func:`all_of`, :func:`any_of`) build a validator from their arguments::

    param("score", "integer", validator=value_range(0, 100))
    param("emails", ("array", "string"), validator=list_of(email))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date
import re
from typing import Any, Final


Validator = Callable[[Any], bool]

_EMAIL_RE: Final = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_URL_RE: Final = re.compile(r"https?://[^\s/$.?#].[^\s]*")
_UUID_HYPHENATED_RE: Final = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)
_UUID_COMPACT_RE: Final = re.compile(r"[0-9a-f]{32}", re.IGNORECASE)
_ISO_DATE_RE: Final = re.compile(r"\d{4}-\d{2}-\d{2}")
_ALPHANUMERIC_RE: Final = re.compile(r"[a-zA-Z0-9]+")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def email(value: Any) -> bool:
    return isinstance(value, str) and _EMAIL_RE.fullmatch(value) is not None


def url(value: Any) -> bool:
    """Accept ``http://`` and ``https://`` URLs only."""
    return isinstance(value, str) and _URL_RE.fullmatch(value) is not None


def positive_number(value: Any) -> bool:
    return _is_number(value) and value > 0


def non_negative_number(value: Any) -> bool:
    return _is_number(value) and value >= 0


def non_empty_string(value: Any) -> bool:
    """Reject empty and whitespace-only strings."""
    return isinstance(value, str) and value.strip() != ""


def uuid(value: Any) -> bool:
    """Accept hyphenated (8-4-4-4-12) and compact 32-digit UUIDs."""
    if not isinstance(value, str):
        return False
    return _UUID_HYPHENATED_RE.fullmatch(value) is not None or _UUID_COMPACT_RE.fullmatch(value) is not None


def iso_date(value: Any) -> bool:
    """Accept calendar dates in ``YYYY-MM-DD`` form."""
    if not isinstance(value, str) or _ISO_DATE_RE.fullmatch(value) is None:
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def alphanumeric(value: Any) -> bool:
    return isinstance(value, str) and _ALPHANUMERIC_RE.fullmatch(value) is not None


def value_range(minimum: int | float, maximum: int | float) -> Validator:
    """Return a validator accepting numbers in ``[minimum, maximum]``."""
    if not (_is_number(minimum) and _is_number(maximum)) or minimum > maximum:
        raise ValueError("value_range requires numeric bounds with minimum <= maximum")

    def check(value: Any) -> bool:
        return _is_number(value) and minimum <= value <= maximum

    return check


def regex(pattern: str | re.Pattern[str]) -> Validator:
    """Return a validator accepting strings that match ``pattern`` anywhere."""
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern

    def check(value: Any) -> bool:
        return isinstance(value, str) and compiled.search(value) is not None

    return check


def list_of(item_validator: Validator) -> Validator:
    """Return a validator accepting lists whose every item passes ``item_validator``."""

    def check(value: Any) -> bool:
        return isinstance(value, list) and all(item_validator(item) for item in value)

    return check


def one_of(allowed: Iterable[Any]) -> Validator:
    choices = tuple(allowed)

    def check(value: Any) -> bool:
        return value in choices

    return check


def all_of(validators: Iterable[Validator]) -> Validator:
    """Return a validator that passes when every validator in ``validators`` does."""
    chain = tuple(validators)

    def check(value: Any) -> bool:
        return all(validator(value) for validator in chain)

    return check


def any_of(validators: Iterable[Validator]) -> Validator:
    """Return a validator that passes when at least one validator in ``validators`` does."""
    chain = tuple(validators)

    def check(value: Any) -> bool:
        return any(validator(value) for validator in chain)

    return check


__all__ = [
    "Validator",
    "all_of",
    "alphanumeric",
    "any_of",
    "email",
    "iso_date",
    "list_of",
    "non_empty_string",
    "non_negative_number",
    "one_of",
    "positive_number",
    "regex",
    "url",
    "uuid",
    "value_range",
]

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""URI-template routing for ``resources/read``.

Templates such as ``user://{id}/posts/{post_id}`` are compiled once, at
registration time, into anchored regular expressions.  Every literal character
is matched exactly and each ``{name}`` placeholder captures one or more
characters other than ``/``.

When several templates could match a URI, :func:`route` returns the first one
registered.  There is no most-specific-match inference.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import re
from typing import Final


PLACEHOLDER_PATTERN: Final[str] = "([^/]+?)"

_NAME_RE: Final[re.Pattern[str]] = re.compile(r"[A-Za-z_][A-Za-z0-9_.\-]*")


class TemplateError(ValueError):
    """Raised when a URI template cannot be compiled."""


@dataclass(frozen=True, slots=True)
class UriTemplate:
    """A compiled resource URI template."""

    pattern: str
    names: tuple[str, ...]
    regex: re.Pattern[str]

    @property
    def is_static(self) -> bool:
        """Return whether the template has no placeholders."""
        return not self.names

    def match(self, uri: str) -> dict[str, str] | None:
        return match_template(self, uri)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    template: UriTemplate
    params: dict[str, str]


def compile_template(pattern: str) -> UriTemplate:
    """Compile ``pattern`` into a :class:`UriTemplate`.

    Raises:
        TemplateError: On an empty pattern, unbalanced braces, an invalid or
            empty placeholder name, or a placeholder name used twice.
    """
    if not isinstance(pattern, str) or not pattern:
        raise TemplateError("URI template must be a non-empty string")

    names: list[str] = []
    parts: list[str] = ["^"]
    literal: list[str] = []
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if char == "}":
            raise TemplateError(f"Unbalanced '}}' at position {index} in {pattern!r}")
        if char != "{":
            literal.append(char)
            index += 1
            continue

        close = pattern.find("}", index + 1)
        if close == -1:
            raise TemplateError(f"Unclosed '{{' at position {index} in {pattern!r}")
        name = pattern[index + 1 : close]
        if not _NAME_RE.fullmatch(name):
            raise TemplateError(f"Invalid placeholder name {name!r} in {pattern!r}")
        if name in names:
            raise TemplateError(f"Duplicate placeholder '{name}' in {pattern!r}")

        names.append(name)
        parts.append(re.escape("".join(literal)))
        parts.append(PLACEHOLDER_PATTERN)
        literal.clear()
        index = close + 1

    parts.append(re.escape("".join(literal)))
    parts.append("$")
    return UriTemplate(pattern=pattern, names=tuple(names), regex=re.compile("".join(parts)))


def match_template(template: UriTemplate | str, uri: str) -> dict[str, str] | None:
    """Match ``uri`` against ``template`` as a whole string.

    Returns:
        The placeholder values keyed by name, or ``None`` when the URI does not
        match.  A template without placeholders yields ``{}`` on match.
    """
    compiled = template if isinstance(template, UriTemplate) else compile_template(template)
    if not isinstance(uri, str):
        return None
    found = compiled.regex.fullmatch(uri)
    if found is None:
        return None
    return dict(zip(compiled.names, found.groups(), strict=True))


def route(templates: Iterable[UriTemplate], uri: str) -> RouteMatch | None:
    """Return the first template, in iteration order, that matches ``uri``."""
    for template in templates:
        params = match_template(template, uri)
        if params is not None:
            return RouteMatch(template=template, params=params)
    return None


__all__ = [
    "PLACEHOLDER_PATTERN",
    "RouteMatch",
    "TemplateError",
    "UriTemplate",
    "compile_template",
    "match_template",
    "route",
]

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Prompt definitions and the ``@prompt`` decorator.

Prompts take the same parameter declarations as tools.  Handlers are called as
``handler(principal, arguments)`` and return a list of role-tagged messages,
usually built with :func:`conduitmcp.helpers.user` and friends, or a mapping
with a ``messages`` key.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import copy
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from . import types
from .param import Param, normalize_params
from .utils.schema import prompt_arguments
from .validation.converter import ValidationSchema, compile_validation_schema


if TYPE_CHECKING:  # pragma: no cover
    from .registry import RegistryBuilder

PromptHandler = Callable[[Any, dict[str, Any]], Any]


@dataclass(frozen=True, slots=True, eq=False)
class PromptDefinition:
    """A registered prompt; ``params=None`` opts out of argument validation."""

    name: str
    handler: PromptHandler
    description: str = ""
    params: tuple[Param, ...] | None = ()
    title: str | None = None
    validation_schema: ValidationSchema | None = field(init=False, repr=False)
    _listing: dict[str, Any] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Prompt name must be a non-empty string")
        if not callable(self.handler):
            raise ValueError(f"Prompt '{self.name}': handler must be callable")

        params = normalize_params(self.params)
        object.__setattr__(self, "params", params)
        object.__setattr__(
            self, "validation_schema", compile_validation_schema(params) if params is not None else None
        )

        listing: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "arguments": prompt_arguments(params),
        }
        if self.title is not None:
            listing["title"] = self.title
        types.Prompt.model_validate(listing)
        object.__setattr__(self, "_listing", listing)

    def to_listing(self) -> dict[str, Any]:
        """Return the ``prompts/list`` entry for this prompt."""
        return copy.deepcopy(self._listing)


_PROMPT_ATTR = "__conduitmcp_prompt__"
_ACTIVE_BUILDER: ContextVar[RegistryBuilder | None] = ContextVar("_conduitmcp_prompt_builder", default=None)


def get_active_builder() -> RegistryBuilder | None:
    return _ACTIVE_BUILDER.get()


def set_active_builder(builder: RegistryBuilder) -> object:
    return _ACTIVE_BUILDER.set(builder)


def reset_active_builder(token: object) -> None:
    _ACTIVE_BUILDER.reset(token)


def prompt(
    name: str | None = None,
    *,
    description: str | None = None,
    params: Iterable[Param] | None = (),
    title: str | None = None,
) -> Callable[[PromptHandler], PromptHandler]:
    """Register a prompt-producing callable."""

    def decorator(fn: PromptHandler) -> PromptHandler:
        desc = (description if description is not None else (fn.__doc__ or "")).strip()
        definition = PromptDefinition(
            name=name or fn.__name__,
            handler=fn,
            description=desc,
            params=tuple(params) if params is not None else None,
            title=title,
        )
        setattr(fn, _PROMPT_ATTR, definition)

        builder = get_active_builder()
        if builder is not None:
            builder.register_prompt(definition)
        return fn

    return decorator


def extract_prompt_definition(fn: PromptHandler) -> PromptDefinition | None:
    definition = getattr(fn, _PROMPT_ATTR, None)
    if isinstance(definition, PromptDefinition):
        return definition
    return None


__all__ = [
    "PromptDefinition",
    "PromptHandler",
    "extract_prompt_definition",
    "get_active_builder",
    "prompt",
    "reset_active_builder",
    "set_active_builder",
]

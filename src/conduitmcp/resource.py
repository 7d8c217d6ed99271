# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Resource templates and the ``@resource`` decorator.

A resource is addressed by a URI pattern such as ``user://{id}/profile``.
``resources/read`` routes the requested URI through :mod:`conduitmcp.router`
and calls the first matching template's handler as
``handler(principal, params, options)``, where ``params`` holds the captured
placeholder values and ``options`` the remaining request parameters.

Usage mirrors the :mod:`conduitmcp.tool` ambient registration pattern.
"""

from __future__ import annotations

from collections.abc import Callable
import copy
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .router import UriTemplate, compile_template


if TYPE_CHECKING:  # pragma: no cover
    from .registry import RegistryBuilder

ResourceHandler = Callable[[Any, dict[str, str], dict[str, Any]], Any]


@dataclass(frozen=True, slots=True, eq=False)
class ResourceTemplate:
    """A registered resource URI pattern and its handler."""

    uri_pattern: str
    handler: ResourceHandler
    name: str | None = None
    description: str | None = None
    mime_type: str | None = None
    template: UriTemplate = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not callable(self.handler):
            raise ValueError(f"Resource '{self.uri_pattern}': handler must be callable")
        object.__setattr__(self, "template", compile_template(self.uri_pattern))

    def to_listing(self) -> dict[str, Any]:
        """Return the ``resources/list`` entry for this template."""
        listing: dict[str, Any] = {"uri": self.uri_pattern}
        if self.name is not None:
            listing["name"] = self.name
        if self.description is not None:
            listing["description"] = self.description
        if self.mime_type is not None:
            listing["mimeType"] = self.mime_type
        return copy.deepcopy(listing)


_RESOURCE_ATTR = "__conduitmcp_resource__"
_ACTIVE_BUILDER: ContextVar[RegistryBuilder | None] = ContextVar(
    "_conduitmcp_resource_builder",
    default=None,
)


def get_active_builder() -> RegistryBuilder | None:
    return _ACTIVE_BUILDER.get()


def set_active_builder(builder: RegistryBuilder) -> object:
    return _ACTIVE_BUILDER.set(builder)


def reset_active_builder(token: object) -> None:
    _ACTIVE_BUILDER.reset(token)


def resource(
    uri: str,
    *,
    name: str | None = None,
    description: str | None = None,
    mime_type: str | None = None,
) -> Callable[[ResourceHandler], ResourceHandler]:
    """Register a resource handler for the URI pattern ``uri``.

    The pattern is compiled immediately, so malformed templates fail at import
    time with :class:`~conduitmcp.router.TemplateError`.
    """

    def decorator(fn: ResourceHandler) -> ResourceHandler:
        definition = ResourceTemplate(
            uri_pattern=uri,
            handler=fn,
            name=name,
            description=description if description is not None else ((fn.__doc__ or "").strip() or None),
            mime_type=mime_type,
        )
        setattr(fn, _RESOURCE_ATTR, definition)

        builder = get_active_builder()
        if builder is not None:
            builder.register_resource(definition)
        return fn

    return decorator


def extract_resource_template(fn: ResourceHandler) -> ResourceTemplate | None:
    definition = getattr(fn, _RESOURCE_ATTR, None)
    if isinstance(definition, ResourceTemplate):
        return definition
    return None


__all__ = [
    "ResourceHandler",
    "ResourceTemplate",
    "extract_resource_template",
    "get_active_builder",
    "reset_active_builder",
    "resource",
    "set_active_builder",
]

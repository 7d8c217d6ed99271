# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Tool definitions and the ``@tool`` decorator.

Inside :meth:`RegistryBuilder.binding <conduitmcp.registry.RegistryBuilder.binding>`
(or :meth:`MCPServer.binding <conduitmcp.server.MCPServer.binding>`) decorated
functions are registered as they are defined::

    with server.binding():

        @tool(description="Add two numbers", params=[param("a", "number", required=True),
                                                     param("b", "number", required=True)])
        def add(principal, arguments):
            return text(str(arguments["a"] + arguments["b"]))

Handlers are called as ``handler(principal, arguments)`` and may be sync or
async.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import copy
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from . import types
from .param import Param, normalize_params
from .utils.schema import build_input_schema, ensure_object_schema
from .validation.converter import ValidationSchema, compile_validation_schema


if TYPE_CHECKING:  # pragma: no cover - type-checking helpers only
    from .registry import RegistryBuilder

# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

ToolHandler = Callable[[Any, dict[str, Any]], Any]


@dataclass(frozen=True, slots=True, eq=False)
class ToolDefinition:
    """A registered tool.

    ``params=None`` registers the tool without a validation schema; its
    arguments then reach the handler exactly as the caller sent them.
    ``input_schema`` overrides the schema advertised by ``tools/list``.
    """

    name: str
    handler: ToolHandler
    description: str = ""
    params: tuple[Param, ...] | None = ()
    input_schema: dict[str, Any] | None = None
    title: str | None = None
    annotations: dict[str, Any] | None = None
    validation_schema: ValidationSchema | None = field(init=False, repr=False)
    _listing: dict[str, Any] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Tool name must be a non-empty string")
        if not callable(self.handler):
            raise ValueError(f"Tool '{self.name}': handler must be callable")

        params = normalize_params(self.params)
        if self.input_schema is not None:
            input_schema = ensure_object_schema(self.input_schema)
        else:
            input_schema = build_input_schema(params)
        object.__setattr__(self, "params", params)
        object.__setattr__(self, "input_schema", input_schema)
        object.__setattr__(
            self, "validation_schema", compile_validation_schema(params) if params is not None else None
        )

        listing: dict[str, Any] = {"name": self.name, "description": self.description, "inputSchema": input_schema}
        if self.title is not None:
            listing["title"] = self.title
        if self.annotations is not None:
            listing["annotations"] = dict(self.annotations)
        # Rejects listings an MCP client could not parse.
        types.Tool.model_validate(listing)
        object.__setattr__(self, "_listing", listing)

    def to_listing(self) -> dict[str, Any]:
        """Return the ``tools/list`` entry for this tool."""
        return copy.deepcopy(self._listing)


_TOOL_ATTR = "__conduitmcp_tool__"
_ACTIVE_BUILDER: ContextVar[RegistryBuilder | None] = ContextVar("_conduitmcp_tool_builder", default=None)


def get_active_builder() -> RegistryBuilder | None:
    """Return the builder currently binding tool definitions, if any."""
    return _ACTIVE_BUILDER.get()


def set_active_builder(builder: RegistryBuilder) -> Any:
    """Activate a builder for ambient registration (internal helper)."""
    return _ACTIVE_BUILDER.set(builder)


def reset_active_builder(token: Any) -> None:
    """Reset the active builder context (internal helper)."""
    _ACTIVE_BUILDER.reset(token)


def tool(
    name: str | None = None,
    *,
    description: str | None = None,
    params: Iterable[Param] | None = (),
    input_schema: dict[str, Any] | None = None,
    title: str | None = None,
    annotations: dict[str, Any] | None = None,
) -> Callable[[ToolHandler], ToolHandler]:
    """Decorator that marks a callable as an MCP tool.

    The decorator attaches a :class:`ToolDefinition` to the function and, if
    a builder is actively binding, registers it immediately.  The description
    falls back to the function's docstring.
    """

    def decorator(fn: ToolHandler) -> ToolHandler:
        desc = (description if description is not None else (fn.__doc__ or "")).strip()
        definition = ToolDefinition(
            name=name or fn.__name__,
            handler=fn,
            description=desc,
            params=tuple(params) if params is not None else None,
            input_schema=input_schema,
            title=title,
            annotations=annotations,
        )
        setattr(fn, _TOOL_ATTR, definition)

        builder = get_active_builder()
        if builder is not None:
            builder.register_tool(definition)

        return fn

    return decorator


def extract_tool_definition(fn: ToolHandler) -> ToolDefinition | None:
    """Return the :class:`ToolDefinition` attached to *fn*, if present."""
    definition = getattr(fn, _TOOL_ATTR, None)
    if isinstance(definition, ToolDefinition):
        return definition
    return None


__all__ = [
    "ToolDefinition",
    "ToolHandler",
    "extract_tool_definition",
    "get_active_builder",
    "reset_active_builder",
    "set_active_builder",
    "tool",
]

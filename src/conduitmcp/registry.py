# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""The immutable collection of tools, resources and prompts a server exposes.

Definitions are collected by a :class:`RegistryBuilder` at start-up, either
explicitly (``register_tool``...) or through the ``@tool``/``@resource``/
``@prompt`` decorators inside :meth:`RegistryBuilder.binding`.
:meth:`RegistryBuilder.build` freezes the builder and returns a
:class:`Registry` that never changes afterwards, so it can be shared by every
concurrent request without locking.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from .errors import RegistryError
from .prompt import (
    PromptDefinition,
    extract_prompt_definition,
    reset_active_builder as reset_prompt_builder,
    set_active_builder as set_prompt_builder,
)
from .resource import (
    ResourceTemplate,
    extract_resource_template,
    reset_active_builder as reset_resource_builder,
    set_active_builder as set_resource_builder,
)
from .router import route
from .tool import (
    ToolDefinition,
    extract_tool_definition,
    reset_active_builder as reset_tool_builder,
    set_active_builder as set_tool_builder,
)
from .utils import component_logger


DEFAULT_SERVER_NAME = "conduit-mcp"

_logger = component_logger("registry")


@dataclass(frozen=True, slots=True)
class ServerInfo:
    """Identity reported by ``initialize``."""

    name: str = DEFAULT_SERVER_NAME
    version: str = "0.1.0"
    instructions: str | None = None

    def to_wire(self) -> dict[str, str]:
        return {"name": self.name, "version": self.version}


class Registry:
    """Read-only view over registered definitions, in registration order."""

    __slots__ = ("_by_template", "_info", "_prompts", "_resources", "_tools")

    def __init__(
        self,
        *,
        tools: Mapping[str, ToolDefinition],
        resources: tuple[ResourceTemplate, ...],
        prompts: Mapping[str, PromptDefinition],
        info: ServerInfo | None = None,
    ) -> None:
        self._tools = MappingProxyType(dict(tools))
        self._resources = tuple(resources)
        self._by_template = {entry.template: entry for entry in self._resources}
        self._prompts = MappingProxyType(dict(prompts))
        self._info = info or ServerInfo()

    @property
    def info(self) -> ServerInfo:
        return self._info

    @property
    def tools(self) -> Mapping[str, ToolDefinition]:
        return self._tools

    @property
    def resources(self) -> tuple[ResourceTemplate, ...]:
        return self._resources

    @property
    def prompts(self) -> Mapping[str, PromptDefinition]:
        return self._prompts

    def get_tool(self, name: Any) -> ToolDefinition | None:
        return self._tools.get(name) if isinstance(name, str) else None

    def get_prompt(self, name: Any) -> PromptDefinition | None:
        return self._prompts.get(name) if isinstance(name, str) else None

    def find_resource(self, uri: str) -> tuple[ResourceTemplate, dict[str, str]] | None:
        """Return the first registered template matching ``uri`` with its captured params."""
        found = route((entry.template for entry in self._resources), uri)
        if found is None:
            return None
        return self._by_template[found.template], found.params

    def list_tools(self) -> list[dict[str, Any]]:
        return [definition.to_listing() for definition in self._tools.values()]

    def list_resources(self) -> list[dict[str, Any]]:
        return [definition.to_listing() for definition in self._resources]

    def list_prompts(self) -> list[dict[str, Any]]:
        return [definition.to_listing() for definition in self._prompts.values()]

    def __repr__(self) -> str:
        return (
            f"Registry(tools={list(self._tools)!r}, "
            f"resources={[entry.uri_pattern for entry in self._resources]!r}, "
            f"prompts={list(self._prompts)!r})"
        )


class RegistryBuilder:
    """Collects definitions until :meth:`build` freezes them into a :class:`Registry`."""

    def __init__(self, info: ServerInfo | None = None) -> None:
        self._info = info or ServerInfo()
        self._tools: dict[str, ToolDefinition] = {}
        self._resources: dict[str, ResourceTemplate] = {}
        self._prompts: dict[str, PromptDefinition] = {}
        self._registry: Registry | None = None

    @property
    def frozen(self) -> bool:
        return self._registry is not None

    @property
    def info(self) -> ServerInfo:
        return self._info

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    @property
    def prompt_names(self) -> list[str]:
        return list(self._prompts)

    @property
    def resource_patterns(self) -> list[str]:
        return list(self._resources)

    # //////////////////////////////////////////////////////////////////
    # Registration
    # //////////////////////////////////////////////////////////////////

    def register_tool(self, definition: ToolDefinition | Callable[..., Any]) -> ToolDefinition:
        definition = self._unwrap(definition, ToolDefinition, extract_tool_definition, "tool")
        self._ensure_open(f"tool '{definition.name}'")
        if definition.name in self._tools:
            raise RegistryError(f"Tool '{definition.name}' is already registered")
        self._tools[definition.name] = definition
        _logger.debug("registered tool", extra={"event": "registry.tool", "tool": definition.name})
        return definition

    def register_resource(self, definition: ResourceTemplate | Callable[..., Any]) -> ResourceTemplate:
        definition = self._unwrap(definition, ResourceTemplate, extract_resource_template, "resource")
        self._ensure_open(f"resource '{definition.uri_pattern}'")
        if definition.uri_pattern in self._resources:
            raise RegistryError(f"Resource '{definition.uri_pattern}' is already registered")
        self._resources[definition.uri_pattern] = definition
        _logger.debug("registered resource", extra={"event": "registry.resource", "uri": definition.uri_pattern})
        return definition

    def register_prompt(self, definition: PromptDefinition | Callable[..., Any]) -> PromptDefinition:
        definition = self._unwrap(definition, PromptDefinition, extract_prompt_definition, "prompt")
        self._ensure_open(f"prompt '{definition.name}'")
        if definition.name in self._prompts:
            raise RegistryError(f"Prompt '{definition.name}' is already registered")
        self._prompts[definition.name] = definition
        _logger.debug("registered prompt", extra={"event": "registry.prompt", "prompt": definition.name})
        return definition

    @contextmanager
    def binding(self) -> Iterator[RegistryBuilder]:
        """Register decorated definitions with this builder while the block runs."""
        self._ensure_open("definitions")
        tool_token = set_tool_builder(self)
        resource_token = set_resource_builder(self)
        prompt_token = set_prompt_builder(self)
        try:
            yield self
        finally:
            reset_prompt_builder(prompt_token)
            reset_resource_builder(resource_token)
            reset_tool_builder(tool_token)

    def build(self) -> Registry:
        """Freeze the builder and return its :class:`Registry`.

        Repeated calls return the same registry.
        """
        if self._registry is None:
            self._registry = Registry(
                tools=self._tools,
                resources=tuple(self._resources.values()),
                prompts=self._prompts,
                info=self._info,
            )
            _logger.debug(
                "registry frozen",
                extra={
                    "event": "registry.frozen",
                    "tools": len(self._tools),
                    "resources": len(self._resources),
                    "prompts": len(self._prompts),
                },
            )
        return self._registry

    # //////////////////////////////////////////////////////////////////
    # Internal helpers
    # //////////////////////////////////////////////////////////////////

    def _ensure_open(self, what: str) -> None:
        if self._registry is not None:
            raise RegistryError(f"Cannot register {what}: the registry is frozen")

    @staticmethod
    def _unwrap(candidate: Any, expected: type, extract: Callable[[Any], Any], kind: str) -> Any:
        if isinstance(candidate, expected):
            return candidate
        definition = extract(candidate)
        if definition is None:
            raise RegistryError(f"{candidate!r} is not a {kind} definition; decorate it with @{kind} first")
        return definition


__all__ = ["DEFAULT_SERVER_NAME", "Registry", "RegistryBuilder", "ServerInfo"]

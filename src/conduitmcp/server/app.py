# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Composable MCP server facade.

:class:`MCPServer` bundles a :class:`~conduitmcp.registry.RegistryBuilder`,
the validation and authentication configuration, and the HTTP transport::

    server = MCPServer("weather", authentication=AuthConfig(token="s3cret"))

    with server.binding():

        @tool(params=[param("city", required=True)])
        async def forecast(principal, arguments):
            return text(f"Sunny in {arguments['city']}")

    await server.serve(port=8000)

The registry freezes the first time it is used to answer a request; further
registrations raise :class:`~conduitmcp.errors.RegistryError`.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

import anyio

from ..protocol import INTERNAL_ERROR, Request, Response, build_error, classify
from ..prompt import PromptDefinition
from ..registry import Registry, RegistryBuilder, ServerInfo
from ..resource import ResourceTemplate
from ..tool import ToolDefinition
from ..utils import get_logger
from ..validation import ValidationConfig
from .authentication import AuthConfig, AuthResult, resolve
from .dispatcher import dispatch
from .transports import CorsConfig, StreamableHTTPTransport


TIMEOUT_MESSAGE = "Request timed out"


class MCPServer:
    """Registry, configuration and HTTP transport for one MCP server."""

    def __init__(
        self,
        name: str,
        *,
        version: str = "0.1.0",
        instructions: str | None = None,
        authentication: AuthConfig | None = None,
        validation: ValidationConfig | None = None,
        cors: CorsConfig | None = None,
        request_timeout: float | None = None,
    ) -> None:
        self._info = ServerInfo(name=name, version=version, instructions=instructions)
        self._builder = RegistryBuilder(self._info)
        self._authentication = authentication
        self._validation = validation or ValidationConfig()
        self._logger = get_logger(f"conduitmcp.server.{name}")
        self._transport = StreamableHTTPTransport(self, cors=cors, timeout=request_timeout)

    # //////////////////////////////////////////////////////////////////
    # Configuration
    # //////////////////////////////////////////////////////////////////

    @property
    def name(self) -> str:
        return self._info.name

    @property
    def info(self) -> ServerInfo:
        return self._info

    @property
    def authentication(self) -> AuthConfig | None:
        return self._authentication

    @property
    def validation(self) -> ValidationConfig:
        return self._validation

    @property
    def transport(self) -> StreamableHTTPTransport:
        return self._transport

    # //////////////////////////////////////////////////////////////////
    # Registration
    # //////////////////////////////////////////////////////////////////

    @contextmanager
    def binding(self) -> Iterator[MCPServer]:
        """Register ``@tool``/``@resource``/``@prompt`` definitions made inside the block."""
        with self._builder.binding():
            yield self

    def register_tool(self, definition: ToolDefinition | Any) -> ToolDefinition:
        return self._builder.register_tool(definition)

    def register_resource(self, definition: ResourceTemplate | Any) -> ResourceTemplate:
        return self._builder.register_resource(definition)

    def register_prompt(self, definition: PromptDefinition | Any) -> PromptDefinition:
        return self._builder.register_prompt(definition)

    @property
    def registry(self) -> Registry:
        """Return the frozen registry, freezing it on first access."""
        return self._builder.build()

    @property
    def tool_names(self) -> list[str]:
        return self._builder.tool_names

    @property
    def prompt_names(self) -> list[str]:
        return self._builder.prompt_names

    @property
    def resource_patterns(self) -> list[str]:
        return self._builder.resource_patterns

    # //////////////////////////////////////////////////////////////////
    # Request handling
    # //////////////////////////////////////////////////////////////////

    async def authenticate(self, headers: Mapping[str, str], method: str = "POST") -> AuthResult:
        """Run the configured authentication strategy; disabled when unset."""
        return await resolve(self._authentication or AuthConfig(enabled=False), headers, method=method)

    async def handle_message(
        self,
        raw: Any,
        principal: Any = None,
        *,
        timeout: float | None = None,
    ) -> Response | object:
        """Dispatch one decoded JSON-RPC message.

        With ``timeout`` set, a request still running after that many seconds
        is cancelled and answered with an internal error.
        """
        envelope = classify(raw)
        registry = self.registry
        if timeout is None or not isinstance(envelope, Request):
            return await dispatch(envelope, registry, principal, validation=self._validation)

        with anyio.move_on_after(timeout):
            return await dispatch(envelope, registry, principal, validation=self._validation)
        self._logger.warning(
            "request timed out",
            extra={"event": "server.timeout", "method": envelope.method, "timeout": timeout},
        )
        return build_error(envelope.id, INTERNAL_ERROR, TIMEOUT_MESSAGE)

    # //////////////////////////////////////////////////////////////////
    # Serving
    # //////////////////////////////////////////////////////////////////

    def asgi_app(self, path: str = "/") -> Any:
        """Return a Starlette application serving this server at ``path``."""
        return self._transport.build_app(path)

    async def serve(
        self,
        host: str = "127.0.0.1",
        port: int = 8000,
        path: str = "/",
        log_level: str = "info",
        **uvicorn_options: Any,
    ) -> None:
        self.registry  # noqa: B018 - freeze before accepting traffic
        await self._transport.run(host=host, port=port, path=path, log_level=log_level, **uvicorn_options)


__all__ = ["MCPServer", "TIMEOUT_MESSAGE"]

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Streamable HTTP transport on Starlette and uvicorn.

Routes (``path`` defaults to ``/``):

* ``POST <path>``: one JSON-RPC message per request.  Responses come back as
  ``200`` JSON; notifications get an empty ``204``.  An undecodable body is a
  ``400`` parse error and a body that is not a JSON object a ``400`` invalid
  request.
* ``GET <path>``: transport status.
* ``GET /health``: liveness probe, exempt from authentication.
* ``OPTIONS <path>``: empty ``200``.

CORS headers come from Starlette's ``CORSMiddleware``; authentication from
:class:`~conduitmcp.server.authentication.AuthenticationMiddleware`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import json
from typing import TYPE_CHECKING, Any

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from uvicorn import Config, Server

from ...protocol import ACKNOWLEDGED, INVALID_REQUEST, PARSE_ERROR, PROTOCOL_VERSION, build_error
from ...utils import component_logger
from ..authentication import AuthenticationMiddleware
from .base import BaseTransport


if TYPE_CHECKING:
    from ..app import MCPServer


HEALTH_PATH = "/health"

_logger = component_logger("transport.http")


@dataclass(frozen=True, slots=True)
class CorsConfig:
    """CORS policy applied to every HTTP response."""

    allow_origins: Sequence[str] = ("*",)
    allow_methods: Sequence[str] = ("GET", "POST", "OPTIONS")
    allow_headers: Sequence[str] = ("content-type", "authorization")

    def middleware(self) -> Middleware:
        return Middleware(
            CORSMiddleware,
            allow_origins=list(self.allow_origins),
            allow_methods=list(self.allow_methods),
            allow_headers=list(self.allow_headers),
        )


class StreamableHTTPTransport(BaseTransport):
    """Serve an :class:`~conduitmcp.server.MCPServer` over HTTP."""

    DEFAULT_HOST = "127.0.0.1"
    DEFAULT_PORT = 8000
    DEFAULT_PATH = "/"
    DEFAULT_LOG_LEVEL = "info"

    def __init__(self, server: MCPServer, *, cors: CorsConfig | None = None, timeout: float | None = None) -> None:
        super().__init__(server)
        self._cors = cors or CorsConfig()
        self._timeout = timeout

    @property
    def cors(self) -> CorsConfig:
        return self._cors

    def build_app(self, path: str | None = None) -> Starlette:
        """Return the ASGI application serving the MCP endpoint at ``path``."""
        path = path or self.DEFAULT_PATH
        routes = [
            Route(HEALTH_PATH, self._health, methods=["GET"]),
            Route(path, self._endpoint, methods=["GET", "POST", "OPTIONS"]),
        ]

        middleware = [self._cors.middleware()]
        authentication = self.server.authentication
        if authentication is not None and authentication.active:
            middleware.append(Middleware(AuthenticationMiddleware, config=authentication, exempt_paths=(HEALTH_PATH,)))

        return Starlette(routes=routes, middleware=middleware)

    async def run(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        path: str | None = None,
        log_level: str | None = None,
        **uvicorn_options: Any,
    ) -> None:
        host = host or self.DEFAULT_HOST
        port = port or self.DEFAULT_PORT
        app = self.build_app(path)

        _logger.info(
            "serving streamable HTTP",
            extra={"event": "transport.http.start", "host": host, "port": port, "path": path or self.DEFAULT_PATH},
        )
        config = Config(app=app, host=host, port=port, log_level=log_level or self.DEFAULT_LOG_LEVEL, **uvicorn_options)
        await Server(config).serve()

    # //////////////////////////////////////////////////////////////////
    # Endpoints
    # //////////////////////////////////////////////////////////////////

    async def _endpoint(self, request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200)
        if request.method == "GET":
            return JSONResponse({"transport": "streamable-http", "version": PROTOCOL_VERSION, "status": "ready"})
        return await self._post(request)

    async def _post(self, request: Request) -> Response:
        body = await request.body()
        try:
            raw = json.loads(body)
        except ValueError:
            _logger.debug("undecodable request body", extra={"event": "transport.http.parse_error"})
            return JSONResponse(build_error(None, PARSE_ERROR, "Parse error"), status_code=400)

        if not isinstance(raw, dict):
            return JSONResponse(
                build_error(None, INVALID_REQUEST, "Invalid Request", {"reason": "Request body must be a JSON object"}),
                status_code=400,
            )

        principal = None
        authentication = self.server.authentication
        if authentication is not None:
            principal = getattr(request.state, authentication.assign_key, None)

        response = await self.server.handle_message(raw, principal, timeout=self._timeout)
        if response is ACKNOWLEDGED:
            return Response(status_code=204)
        return JSONResponse(response)

    async def _health(self, request: Request) -> Response:
        return JSONResponse({"status": "ok"})


__all__ = ["CorsConfig", "StreamableHTTPTransport"]

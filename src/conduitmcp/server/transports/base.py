# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Shared transport primitives for :mod:`conduitmcp.server`.

A transport owns the byte-level side of the conversation: it decodes incoming
messages, applies authentication, and passes the decoded JSON value to
:meth:`MCPServer.handle_message <conduitmcp.server.MCPServer.handle_message>`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from ..app import MCPServer


class BaseTransport(ABC):
    """Common base for server transports.

    Subclasses receive the owning :class:`MCPServer`.  :meth:`run` accepts
    keyword arguments specific to the transport, e.g. host and port for HTTP.
    """

    def __init__(self, server: MCPServer) -> None:
        self._server = server

    @property
    def server(self) -> MCPServer:
        """Return the owning :class:`MCPServer`."""
        return self._server

    @abstractmethod
    async def run(self, **kwargs: Any) -> None:
        """Start the transport and serve until shut down."""


__all__ = ["BaseTransport"]

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Public server-side surface for ConduitMCP.

The dispatch core lives in :mod:`conduitmcp.server.dispatcher`; this module
re-exports the pieces host applications are expected to import.
"""

from __future__ import annotations

from .app import MCPServer
from .authentication import (
    AuthConfig,
    AuthenticationError,
    AuthenticationMiddleware,
    AuthFailure,
    AuthSuccess,
    Principal,
    resolve,
)
from .dispatcher import METHOD_TABLE, Operation, Primitive, dispatch, handle_message
from .transports import CorsConfig, StreamableHTTPTransport


__all__ = [
    "METHOD_TABLE",
    "AuthConfig",
    "AuthFailure",
    "AuthSuccess",
    "AuthenticationError",
    "AuthenticationMiddleware",
    "CorsConfig",
    "MCPServer",
    "Operation",
    "Primitive",
    "Principal",
    "StreamableHTTPTransport",
    "dispatch",
    "handle_message",
    "resolve",
]

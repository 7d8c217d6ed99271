# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Transports hosting :class:`~conduitmcp.server.MCPServer`."""

from __future__ import annotations

from .base import BaseTransport
from .streamable_http import CorsConfig, StreamableHTTPTransport


__all__ = ["BaseTransport", "CorsConfig", "StreamableHTTPTransport"]

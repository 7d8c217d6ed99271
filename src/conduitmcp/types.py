# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Re-export of the MCP schema bindings.

The reference SDK ships generated Pydantic models for the MCP wire schema
under ``mcp.types``.  ConduitMCP builds its wire payloads as plain dicts but
checks definition listings against these models and accepts them as handler
results, so they are re-exported here as a single import site.
"""

from __future__ import annotations

from mcp import types as _types


__all__ = tuple(name for name in dir(_types) if not name.startswith("_"))

globals().update({name: getattr(_types, name) for name in __all__})

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Exception types raised across ConduitMCP.

Registration mistakes raise immediately.  Request-time failures are turned
into JSON-RPC errors by the dispatcher and never escape it.
"""

from __future__ import annotations

from typing import Any


class RegistryError(RuntimeError):
    """Raised for duplicate definitions or registration after the registry is frozen."""


class HandlerError(Exception):
    """Raised by a handler to fail a request with an application error.

    Any part left as ``None`` is filled in by the dispatcher: the code defaults
    to ``-32000`` and the message to a per-primitive default such as
    ``"Tool execution failed"``.
    """

    def __init__(self, message: str | None = None, code: int | None = None, data: Any = None) -> None:
        super().__init__(message or "handler error")
        self.message = message
        self.code = code
        self.data = data

    def __repr__(self) -> str:
        return f"HandlerError(message={self.message!r}, code={self.code!r}, data={self.data!r})"


class UnexpectedResultError(TypeError):
    """Raised when a handler returns a value the dispatcher cannot serialize."""


__all__ = ["HandlerError", "RegistryError", "UnexpectedResultError"]

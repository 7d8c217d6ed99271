# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""JSON-RPC 2.0 envelope handling for MCP traffic.

Decoded JSON values enter the core here.  :func:`classify` decides whether a
value is a request, a notification, or something that cannot be processed, and
the ``build_*`` helpers produce the wire dictionaries sent back to clients.

The standard error codes are taken from the reference SDK (``mcp.types``) so
both sides of the wire agree on the constants.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final, TypeAlias

from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
)


JSONRPC_VERSION: Final[str] = "2.0"
PROTOCOL_VERSION: Final[str] = "2025-06-18"

APPLICATION_ERROR: Final[int] = -32000
"""Default code for handler-signalled failures."""

_APPLICATION_ERROR_RANGE: Final[range] = range(-32099, -31999)

RequestId: TypeAlias = str | int | None
Response: TypeAlias = dict[str, Any]


class _Acknowledged:
    """Sentinel returned when a message requires no response body."""

    _instance: _Acknowledged | None = None

    def __new__(cls) -> _Acknowledged:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ACKNOWLEDGED"

    def __bool__(self) -> bool:
        return False


ACKNOWLEDGED: Final[_Acknowledged] = _Acknowledged()


# ---------------------------------------------------------------------------
# Envelope variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Request:
    """A call that expects a response carrying the same ``id``."""

    id: RequestId
    method: str
    params: Any = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Notification:
    """A one-way message; the server never answers it."""

    method: str
    params: Any = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Invalid:
    """Input that is neither a request nor a notification.

    ``id`` holds whatever identifier could be recovered so the error response
    can still be correlated by the client; it is ``None`` otherwise.
    """

    reason: str
    id: RequestId = None


Envelope: TypeAlias = Request | Notification | Invalid


def classify(raw: Any) -> Request | Notification | Invalid:
    """Classify a decoded JSON value.

    A request needs ``jsonrpc == "2.0"``, a string ``method`` and an ``id``
    key.  The key's presence is what counts: ``{"id": null}`` is still a
    request.  The same shape without any ``id`` key is a notification.
    """
    if not isinstance(raw, Mapping):
        return Invalid(reason="Message must be a JSON object")

    recovered_id = _recover_id(raw)

    if raw.get("jsonrpc") != JSONRPC_VERSION:
        return Invalid(reason="Unsupported or missing jsonrpc version", id=recovered_id)

    method = raw.get("method")
    if not isinstance(method, str) or not method:
        return Invalid(reason="Missing or invalid method", id=recovered_id)

    params = raw.get("params", {})
    if params is None:
        params = {}

    if "id" in raw:
        return Request(id=raw["id"], method=method, params=params)
    return Notification(method=method, params=params)


def _recover_id(raw: Mapping[str, Any]) -> RequestId:
    candidate = raw.get("id")
    if isinstance(candidate, bool):
        return None
    if isinstance(candidate, (str, int)):
        return candidate
    return None


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------


def build_success(request_id: RequestId, result: Any) -> Response:
    """Return a success response for ``request_id``."""
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def build_error(request_id: RequestId, code: int, message: str, data: Any = None) -> Response:
    """Return an error response.

    ``data`` is left out of the error object entirely when it is ``None``.
    """
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def build_notification(method: str, params: Any = None) -> dict[str, Any]:
    message: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        message["params"] = params
    return message


def is_error_response(response: Any) -> bool:
    return isinstance(response, Mapping) and "error" in response


def is_application_error(code: int) -> bool:
    """Return whether ``code`` lies in the implementation-defined server range."""
    return code in _APPLICATION_ERROR_RANGE


__all__ = [
    "ACKNOWLEDGED",
    "APPLICATION_ERROR",
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "JSONRPC_VERSION",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "PROTOCOL_VERSION",
    "Envelope",
    "Invalid",
    "Notification",
    "Request",
    "RequestId",
    "Response",
    "build_error",
    "build_notification",
    "build_success",
    "classify",
    "is_application_error",
    "is_error_response",
]

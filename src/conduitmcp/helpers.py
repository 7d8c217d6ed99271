# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Shorthand builders for handler results.

Tool handlers typically end with ``return text(...)`` or ``return json(...)``;
prompt handlers return a list of :func:`system`/:func:`user`/:func:`assistant`
messages.  To fail a call with a chosen code, ``raise error("...", code)``.
"""

from __future__ import annotations

import base64
import json as _json
from typing import Any

from .errors import HandlerError
from .protocol import APPLICATION_ERROR


def text(content: str) -> dict[str, Any]:
    """Return a tool result with a single text block."""
    return {"content": [{"type": "text", "text": content}]}


def texts(*contents: str) -> dict[str, Any]:
    """Return a tool result with one text block per argument."""
    return {"content": [{"type": "text", "text": item} for item in contents]}


def json(data: Any) -> dict[str, Any]:
    """Return a tool result whose text block is ``data`` encoded as JSON."""
    return {"content": [{"type": "text", "text": _json.dumps(data, ensure_ascii=False)}]}


def image(data: str | bytes, mime_type: str = "image/png") -> dict[str, Any]:
    """Return a tool result with a single image block.

    ``bytes`` are base64-encoded; strings are sent as given.
    """
    if isinstance(data, (bytes, bytearray)):
        data = base64.b64encode(bytes(data)).decode("ascii")
    return {"content": [{"type": "image", "data": data, "mimeType": mime_type}]}


def error(message: str, code: int = APPLICATION_ERROR, data: Any = None) -> HandlerError:
    """Build a :class:`HandlerError` for the handler to raise."""
    return HandlerError(message=message, code=code, data=data)


def resource_text(uri: str, content: str, mime_type: str | None = "text/plain") -> dict[str, Any]:
    """Return a ``resources/read`` result with one text entry."""
    entry: dict[str, Any] = {"uri": uri, "text": content}
    if mime_type is not None:
        entry["mimeType"] = mime_type
    return {"contents": [entry]}


def resource_blob(uri: str, content: bytes, mime_type: str | None = "application/octet-stream") -> dict[str, Any]:
    """Return a ``resources/read`` result with one base64 blob entry."""
    entry: dict[str, Any] = {"uri": uri, "blob": base64.b64encode(content).decode("ascii")}
    if mime_type is not None:
        entry["mimeType"] = mime_type
    return {"contents": [entry]}


def _message(role: str, content: str) -> dict[str, Any]:
    return {"role": role, "content": {"type": "text", "text": content}}


def system(content: str) -> dict[str, Any]:
    return _message("system", content)


def user(content: str) -> dict[str, Any]:
    return _message("user", content)


def assistant(content: str) -> dict[str, Any]:
    return _message("assistant", content)


__all__ = [
    "assistant",
    "error",
    "image",
    "json",
    "resource_blob",
    "resource_text",
    "system",
    "text",
    "texts",
    "user",
]

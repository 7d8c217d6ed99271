# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Normalization helpers for handler results.

Handlers may return plain mappings (as built by :mod:`conduitmcp.helpers`) or
the reference SDK's result models.  Everything is turned into the plain wire
dict placed under ``result``; any other shape raises
:class:`~conduitmcp.errors.UnexpectedResultError`, which the dispatcher reports
as an internal error.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from .. import types
from ..errors import UnexpectedResultError


__all__ = ["dump_model", "normalize_prompt_result", "normalize_resource_result", "normalize_tool_result"]


def dump_model(model: BaseModel) -> dict[str, Any]:
    """Dump an SDK model using wire field names and without unset optionals."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def normalize_tool_result(value: Any) -> dict[str, Any]:
    """Return the ``tools/call`` result for a handler's return value."""
    if isinstance(value, types.CallToolResult):
        return dump_model(value)

    if isinstance(value, Mapping) and isinstance(value.get("content"), list):
        return {**value, "content": [_plain(block) for block in value["content"]]}

    raise UnexpectedResultError(f"tool handler returned {type(value).__name__}; expected a mapping with 'content'")


def normalize_resource_result(uri: str, declared_mime: str | None, value: Any) -> dict[str, Any]:
    """Return the ``resources/read`` result for a handler's return value.

    Bare ``str`` and ``bytes`` payloads are wrapped into a single text or blob
    entry for ``uri``, using the template's declared MIME type when present.
    """
    if isinstance(value, types.ReadResourceResult):
        return dump_model(value)

    if isinstance(value, (types.TextResourceContents, types.BlobResourceContents)):
        return {"contents": [dump_model(value)]}

    if isinstance(value, Mapping) and isinstance(value.get("contents"), list):
        return {**value, "contents": [_plain(entry) for entry in value["contents"]]}

    if isinstance(value, str):
        return {"contents": [{"uri": uri, "mimeType": declared_mime or "text/plain", "text": value}]}

    if isinstance(value, (bytes, bytearray)):
        encoded = base64.b64encode(bytes(value)).decode("ascii")
        return {"contents": [{"uri": uri, "mimeType": declared_mime or "application/octet-stream", "blob": encoded}]}

    raise UnexpectedResultError(f"resource handler returned {type(value).__name__}; expected a mapping with 'contents'")


def normalize_prompt_result(value: Any) -> dict[str, Any]:
    """Return the ``prompts/get`` result for a handler's return value.

    A bare sequence of messages is wrapped as ``{"messages": [...]}``.
    """
    if isinstance(value, types.GetPromptResult):
        return dump_model(value)

    if isinstance(value, Mapping):
        messages = value.get("messages")
        if isinstance(messages, list):
            return {**value, "messages": [_message(item) for item in messages]}
        raise UnexpectedResultError("prompt handler returned a mapping without a 'messages' list")

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return {"messages": [_message(item) for item in value]}

    raise UnexpectedResultError(f"prompt handler returned {type(value).__name__}; expected a list of messages")


def _message(item: Any) -> dict[str, Any]:
    if isinstance(item, types.PromptMessage):
        return dump_model(item)
    if isinstance(item, Mapping) and "role" in item and "content" in item:
        return {**item, "content": _plain(item["content"])}
    raise UnexpectedResultError(f"prompt message must be a mapping with 'role' and 'content', got {item!r}")


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return dump_model(value)
    return value

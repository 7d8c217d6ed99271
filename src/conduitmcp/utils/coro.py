# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Helpers for calling user code that may or may not be asynchronous."""

from __future__ import annotations

from collections.abc import Callable
import inspect
from typing import Any


async def maybe_await_with_args(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call *fn* with the given arguments and await the result when needed.

    Handlers and ``verify`` callables registered with ConduitMCP may be plain
    functions or coroutine functions; both are invoked through here.
    """
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result


__all__ = ["maybe_await_with_args"]

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Utility helpers for ConduitMCP."""

from __future__ import annotations

from .coro import maybe_await_with_args
from .logger import component_logger, get_logger, setup_logger


__all__ = [
    "setup_logger",
    "get_logger",
    "component_logger",
    "maybe_await_with_args",
]

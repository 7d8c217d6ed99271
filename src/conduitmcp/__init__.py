# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""ConduitMCP: a JSON-RPC dispatch core for MCP tools, resources and prompts."""

from __future__ import annotations

from . import helpers, types
from .errors import HandlerError, RegistryError, UnexpectedResultError
from .param import MISSING, Param, arg, field, param
from .prompt import PromptDefinition, prompt
from .registry import Registry, RegistryBuilder, ServerInfo
from .resource import ResourceTemplate, resource
from .router import TemplateError, compile_template, match_template, route
from .server import AuthConfig, CorsConfig, MCPServer, Principal
from .tool import ToolDefinition, tool
from .validation import FieldError, ParameterValidationError, ValidationConfig


__version__ = "0.1.0"

__all__ = [
    "MISSING",
    "AuthConfig",
    "CorsConfig",
    "FieldError",
    "HandlerError",
    "MCPServer",
    "Param",
    "ParameterValidationError",
    "Principal",
    "PromptDefinition",
    "Registry",
    "RegistryBuilder",
    "RegistryError",
    "ResourceTemplate",
    "ServerInfo",
    "TemplateError",
    "ToolDefinition",
    "UnexpectedResultError",
    "ValidationConfig",
    "arg",
    "compile_template",
    "field",
    "helpers",
    "match_template",
    "param",
    "prompt",
    "resource",
    "route",
    "tool",
    "types",
]

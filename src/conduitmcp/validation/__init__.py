# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Argument validation for tools and prompts."""

from __future__ import annotations

from . import validators
from .converter import FieldSpec, ValidationSchema, compile_validation_schema
from .core import (
    FieldError,
    ParameterValidationError,
    ValidationConfig,
    validate,
    validate_prompt_arguments,
    validate_tool_arguments,
)


__all__ = [
    "FieldError",
    "FieldSpec",
    "ParameterValidationError",
    "ValidationConfig",
    "ValidationSchema",
    "compile_validation_schema",
    "validate",
    "validate_prompt_arguments",
    "validate_tool_arguments",
    "validators",
]

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Route classified JSON-RPC messages to registered handlers.

:func:`dispatch` is a function of ``(envelope, registry, principal)``: it never
mutates the registry and keeps no state between calls.  Wire method names are
translated into ``(Primitive, Operation)`` pairs through :data:`METHOD_TABLE`
and each pair has exactly one route coroutine in :data:`ROUTES`.
``initialize`` and ``ping`` are answered directly without consulting the
registry.

Every failure becomes a JSON-RPC error response; nothing raised by a handler
escapes this module.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, Final

from mcp.shared.exceptions import McpError

from ..errors import HandlerError, UnexpectedResultError
from ..protocol import (
    ACKNOWLEDGED,
    APPLICATION_ERROR,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PROTOCOL_VERSION,
    Invalid,
    Notification,
    Request,
    Response,
    build_error,
    build_success,
    classify,
)
from ..registry import Registry
from ..utils import component_logger, maybe_await_with_args
from ..validation import (
    FieldError,
    ParameterValidationError,
    ValidationConfig,
    validate_prompt_arguments,
    validate_tool_arguments,
)
from .adapters import normalize_prompt_result, normalize_resource_result, normalize_tool_result


_logger = component_logger("dispatcher")

INTERNAL_ERROR_MESSAGE: Final[str] = "Internal server error"
INVALID_REQUEST_MESSAGE: Final[str] = "Invalid Request"
INVALID_PARAMS_MESSAGE: Final[str] = "Invalid params"
INITIALIZED_NOTIFICATION: Final[str] = "notifications/initialized"


class Primitive(str, Enum):
    TOOLS = "tools"
    RESOURCES = "resources"
    PROMPTS = "prompts"


class Operation(str, Enum):
    LIST = "list"
    CALL = "call"
    READ = "read"
    GET = "get"


METHOD_TABLE: Final[Mapping[str, tuple[Primitive, Operation]]] = MappingProxyType(
    {
        "tools/list": (Primitive.TOOLS, Operation.LIST),
        "tools/call": (Primitive.TOOLS, Operation.CALL),
        "resources/list": (Primitive.RESOURCES, Operation.LIST),
        "resources/read": (Primitive.RESOURCES, Operation.READ),
        "prompts/list": (Primitive.PROMPTS, Operation.LIST),
        "prompts/get": (Primitive.PROMPTS, Operation.GET),
    }
)

DEFAULT_FAILURE_MESSAGES: Final[Mapping[Primitive, str]] = MappingProxyType(
    {
        Primitive.TOOLS: "Tool execution failed",
        Primitive.RESOURCES: "Resource read failed",
        Primitive.PROMPTS: "Prompt get failed",
    }
)

Route = Callable[[Request, Registry, Any, ValidationConfig | None], Awaitable[Response]]


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


async def handle_message(
    raw: Any,
    registry: Registry,
    principal: Any = None,
    *,
    validation: ValidationConfig | None = None,
) -> Response | object:
    """Classify a decoded JSON value and dispatch it.

    Returns a response dict, or :data:`~conduitmcp.protocol.ACKNOWLEDGED` for
    notifications.
    """
    return await dispatch(classify(raw), registry, principal, validation=validation)


async def dispatch(
    envelope: Request | Notification | Invalid,
    registry: Registry,
    principal: Any = None,
    *,
    validation: ValidationConfig | None = None,
) -> Response | object:
    """Produce the response for one classified envelope.

    Args:
        envelope: Output of :func:`~conduitmcp.protocol.classify`.
        registry: Frozen registry to resolve tools, resources and prompts.
        principal: Caller identity from the authentication resolver; passed
            to handlers untouched.
        validation: Validation pipeline switches.

    Returns:
        A response dict for requests and invalid input, or
        :data:`~conduitmcp.protocol.ACKNOWLEDGED` for notifications.
    """
    if isinstance(envelope, Invalid):
        _logger.debug("invalid envelope", extra={"event": "dispatch.invalid", "reason": envelope.reason})
        return build_error(envelope.id, INVALID_REQUEST, INVALID_REQUEST_MESSAGE, {"reason": envelope.reason})

    if isinstance(envelope, Notification):
        _acknowledge(envelope)
        return ACKNOWLEDGED

    try:
        return await _dispatch_request(envelope, registry, principal, validation)
    except Exception:
        _logger.exception(
            "unhandled error while dispatching",
            extra={"event": "dispatch.internal_error", "method": envelope.method},
        )
        return build_error(envelope.id, INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE)


async def _dispatch_request(
    request: Request,
    registry: Registry,
    principal: Any,
    validation: ValidationConfig | None,
) -> Response:
    _logger.debug("handling request", extra={"event": "dispatch.request", "method": request.method})

    if request.method == "initialize":
        return _initialize(request, registry)
    if request.method == "ping":
        return build_success(request.id, {})

    target = METHOD_TABLE.get(request.method)
    if target is None:
        return build_error(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")

    operation = target[1]
    if operation is not Operation.LIST and not isinstance(request.params, Mapping):
        return build_error(request.id, INVALID_PARAMS, INVALID_PARAMS_MESSAGE, {"reason": "params must be an object"})

    return await ROUTES[target](request, registry, principal, validation)


def _acknowledge(notification: Notification) -> None:
    if notification.method == INITIALIZED_NOTIFICATION:
        _logger.info("Client initialized", extra={"event": "dispatch.client_initialized"})
    else:
        _logger.warning(
            "Unknown notification: %s",
            notification.method,
            extra={"event": "dispatch.unknown_notification"},
        )


def _initialize(request: Request, registry: Registry) -> Response:
    params = request.params if isinstance(request.params, Mapping) else {}
    _logger.info(
        "initializing session",
        extra={
            "event": "dispatch.initialize",
            "client_info": params.get("clientInfo"),
            "client_protocol": params.get("protocolVersion"),
        },
    )
    result: dict[str, Any] = {
        "protocolVersion": PROTOCOL_VERSION,
        "serverInfo": registry.info.to_wire(),
        "capabilities": {"tools": {}, "resources": {}, "prompts": {}},
    }
    if registry.info.instructions:
        result["instructions"] = registry.info.instructions
    return build_success(request.id, result)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


async def _list_tools(request: Request, registry: Registry, principal: Any, validation: ValidationConfig | None) -> Response:
    return build_success(request.id, {"tools": registry.list_tools()})


async def _list_resources(
    request: Request, registry: Registry, principal: Any, validation: ValidationConfig | None
) -> Response:
    return build_success(request.id, {"resources": registry.list_resources()})


async def _list_prompts(
    request: Request, registry: Registry, principal: Any, validation: ValidationConfig | None
) -> Response:
    return build_success(request.id, {"prompts": registry.list_prompts()})


async def _call_tool(request: Request, registry: Registry, principal: Any, validation: ValidationConfig | None) -> Response:
    name = request.params.get("name")
    if not isinstance(name, str):
        return _invalid_params(request, FieldError("name", name, "must be of type string"))

    definition = registry.get_tool(name)
    if definition is None:
        return build_error(request.id, METHOD_NOT_FOUND, f"Tool not found: {name}")

    arguments = _arguments(request)
    try:
        arguments = validate_tool_arguments(registry, name, arguments, validation)
    except ParameterValidationError as exc:
        return build_error(request.id, INVALID_PARAMS, INVALID_PARAMS_MESSAGE, exc.to_data())

    return await _invoke(
        request,
        Primitive.TOOLS,
        name,
        lambda: maybe_await_with_args(definition.handler, principal, arguments),
        normalize_tool_result,
    )


async def _read_resource(
    request: Request, registry: Registry, principal: Any, validation: ValidationConfig | None
) -> Response:
    uri = request.params.get("uri")
    if not isinstance(uri, str):
        return _invalid_params(request, FieldError("uri", uri, "must be of type string"))

    found = registry.find_resource(uri)
    if found is None:
        return build_error(request.id, METHOD_NOT_FOUND, f"Resource not found: {uri}")

    template, uri_params = found
    options = {key: value for key, value in request.params.items() if key != "uri"}
    return await _invoke(
        request,
        Primitive.RESOURCES,
        uri,
        lambda: maybe_await_with_args(template.handler, principal, uri_params, options),
        lambda value: normalize_resource_result(uri, template.mime_type, value),
    )


async def _get_prompt(request: Request, registry: Registry, principal: Any, validation: ValidationConfig | None) -> Response:
    name = request.params.get("name")
    if not isinstance(name, str):
        return _invalid_params(request, FieldError("name", name, "must be of type string"))

    definition = registry.get_prompt(name)
    if definition is None:
        return build_error(request.id, METHOD_NOT_FOUND, f"Prompt not found: {name}")

    arguments = _arguments(request)
    try:
        arguments = validate_prompt_arguments(registry, name, arguments, validation)
    except ParameterValidationError as exc:
        return build_error(request.id, INVALID_PARAMS, INVALID_PARAMS_MESSAGE, exc.to_data())

    return await _invoke(
        request,
        Primitive.PROMPTS,
        name,
        lambda: maybe_await_with_args(definition.handler, principal, arguments),
        normalize_prompt_result,
    )


ROUTES: Final[Mapping[tuple[Primitive, Operation], Route]] = MappingProxyType(
    {
        (Primitive.TOOLS, Operation.LIST): _list_tools,
        (Primitive.TOOLS, Operation.CALL): _call_tool,
        (Primitive.RESOURCES, Operation.LIST): _list_resources,
        (Primitive.RESOURCES, Operation.READ): _read_resource,
        (Primitive.PROMPTS, Operation.LIST): _list_prompts,
        (Primitive.PROMPTS, Operation.GET): _get_prompt,
    }
)


# ---------------------------------------------------------------------------
# Invocation and error mapping
# ---------------------------------------------------------------------------


def _arguments(request: Request) -> Any:
    arguments = request.params.get("arguments")
    return {} if arguments is None else arguments


def _invalid_params(request: Request, error: FieldError) -> Response:
    return build_error(request.id, INVALID_PARAMS, INVALID_PARAMS_MESSAGE, [error.to_dict()])


async def _invoke(
    request: Request,
    primitive: Primitive,
    target: str,
    call: Callable[[], Awaitable[Any]],
    normalize: Callable[[Any], dict[str, Any]],
) -> Response:
    log_extra = {"event": f"dispatch.{primitive.value}", "method": request.method, "target": target}
    try:
        value = await call()
        result = normalize(value)
    except McpError as exc:
        error = exc.error
        return build_error(request.id, error.code, error.message, error.data)
    except HandlerError as exc:
        _logger.info("handler reported failure", extra={**log_extra, "code": exc.code, "reason": exc.message})
        return build_error(
            request.id,
            exc.code if exc.code is not None else APPLICATION_ERROR,
            exc.message if exc.message is not None else DEFAULT_FAILURE_MESSAGES[primitive],
            exc.data,
        )
    except UnexpectedResultError:
        _logger.exception("handler returned an unexpected result", extra=log_extra)
        return build_error(request.id, INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE)
    except Exception:
        _logger.exception("handler raised", extra=log_extra)
        return build_error(request.id, INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE)
    return build_success(request.id, result)


__all__ = [
    "DEFAULT_FAILURE_MESSAGES",
    "METHOD_TABLE",
    "ROUTES",
    "Operation",
    "Primitive",
    "dispatch",
    "handle_message",
]

# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Shared registries and request builders for the test suite."""

from __future__ import annotations

from itertools import count
from typing import Any

from conduitmcp import RegistryBuilder, ServerInfo, helpers, param, prompt, resource, tool
from conduitmcp.registry import Registry


_REQUEST_COUNTER = count(1)


def request(method: str, params: Any = None, *, request_id: Any = None) -> dict[str, Any]:
    """Build a JSON-RPC request with a fresh id unless one is given."""
    message: dict[str, Any] = {
        "jsonrpc": "2.0",
        "id": request_id if request_id is not None else next(_REQUEST_COUNTER),
        "method": method,
    }
    if params is not None:
        message["params"] = params
    return message


def notification(method: str, params: Any = None) -> dict[str, Any]:
    message: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        message["params"] = params
    return message


class CallRecorder:
    """Collects ``(principal, payload)`` pairs seen by handlers."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def record(self, *args: Any) -> None:
        self.calls.append(args)


def build_sample_registry(recorder: CallRecorder | None = None, *, instructions: str | None = None) -> Registry:
    """Registry with two tools, two resource templates and one prompt."""
    recorder = recorder or CallRecorder()
    builder = RegistryBuilder(ServerInfo(name="sample", version="1.2.3", instructions=instructions))

    with builder.binding():

        @tool(
            description="Add two integers",
            params=[param("a", "integer", required=True), param("b", "integer", required=True)],
        )
        def add(principal: Any, arguments: dict[str, Any]) -> dict[str, Any]:
            recorder.record(principal, arguments)
            return helpers.text(str(arguments["a"] + arguments["b"]))

        @tool(
            description="Control a service",
            params=[param("action", required=True, enum=["start", "stop", "restart"])],
        )
        async def control(principal: Any, arguments: dict[str, Any]) -> dict[str, Any]:
            recorder.record(principal, arguments)
            return helpers.json({"done": arguments["action"]})

        @resource("user://{id}", name="user", mime_type="application/json")
        def user(principal: Any, params: dict[str, str], options: dict[str, Any]) -> str:
            recorder.record(principal, params, options)
            return f'{{"id": "{params["id"]}"}}'

        @resource("user://{id}/posts/{post_id}", description="A single post")
        async def post(principal: Any, params: dict[str, str], options: dict[str, Any]) -> dict[str, Any]:
            recorder.record(principal, params, options)
            return helpers.resource_text(f"user://{params['id']}/posts/{params['post_id']}", "hello")

        @prompt(description="Greet someone", params=[param("name", required=True, description="Who to greet")])
        def greet(principal: Any, arguments: dict[str, Any]) -> list[dict[str, Any]]:
            recorder.record(principal, arguments)
            return [helpers.system("Be brief."), helpers.user(f"Say hello to {arguments['name']}")]

    return builder.build()

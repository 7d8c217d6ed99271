# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Minimal end-to-end MCP server demo.

Wires a tool, a resource template and a prompt onto an :class:`MCPServer` and
serves them over streamable HTTP.

Usage::

    uv run python examples/hello_trip/server.py --port 8000 --token s3cret

The server exposes:

* Tool ``plan_trip``: summarizes a travel plan
* Resource ``travel://tips/{city}``: travel tips per city
* Prompt ``plan-vacation``: a short planning conversation

Try it alongside ``client.py`` to see the full flow.
"""

from __future__ import annotations

import asyncio
from typing import Any

from conduitmcp import AuthConfig, MCPServer, param, prompt, resource, tool
from conduitmcp.helpers import assistant, error, json, user
from conduitmcp.validation import validators


TIPS = {
    "barcelona": "Visit Sagrada Família, explore the Gothic Quarter, and enjoy tapas on La Rambla.",
    "lisbon": "Ride tram 28, watch the sunset from a miradouro, and try pastéis de nata in Belém.",
}


def build_server(token: str | None = None) -> MCPServer:
    server = MCPServer(
        "hello-trip",
        instructions="Plan trips with plan_trip; read travel://tips/{city} for ideas.",
        authentication=AuthConfig(token=token) if token else None,
        request_timeout=10.0,
    )

    with server.binding():

        @tool(
            description="Summarize a travel plan",
            params=[
                param("destination", required=True, min_length=2),
                param("days", "integer", required=True, min=1, max=60),
                param("budget", "number", default=1000.0, validator=validators.positive_number),
            ],
        )
        async def plan_trip(principal: Any, arguments: dict[str, Any]) -> dict[str, Any]:
            await asyncio.sleep(0)
            summary = f"Plan: {arguments['days']} days in {arguments['destination']} with budget ${arguments['budget']:.2f}."
            return json({"summary": summary, "suggestion": "Remember to book tickets early!"})

        @resource("travel://tips/{city}", name="Travel tips", mime_type="text/plain")
        def travel_tips(principal: Any, params: dict[str, str], options: dict[str, Any]) -> str:
            tips = TIPS.get(params["city"].lower())
            if tips is None:
                raise error(f"No tips for {params['city']}", -32002)
            return tips

        @prompt(
            "plan-vacation",
            description="Guide the model through planning a trip",
            params=[param("destination", required=True)],
        )
        def plan_vacation(principal: Any, arguments: dict[str, Any]) -> list[dict[str, Any]]:
            return [
                assistant("You are a helpful travel planner. Summarize the itinerary and call tools if needed."),
                user(f"Plan a vacation to {arguments['destination']}."),
            ]

    return server


async def main(port: int, token: str | None) -> None:
    await build_server(token).serve(port=port, path="/mcp")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Run the hello-trip MCP server")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    parser.add_argument("--token", default=None, help="Require this bearer token")
    args = parser.parse_args()

    asyncio.run(main(args.port, args.token))

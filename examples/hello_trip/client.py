# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Minimal JSON-RPC client exercising tools, resources and prompts.

Run after starting ``server.py`` in another shell.

    uv run python examples/hello_trip/client.py --token s3cret
"""

from __future__ import annotations

import asyncio
from itertools import count
from typing import Any

import httpx


SERVER_URL = "http://127.0.0.1:8000/mcp"

_ids = count(1)


async def call(client: httpx.AsyncClient, method: str, params: dict[str, Any] | None = None) -> Any:
    message: dict[str, Any] = {"jsonrpc": "2.0", "id": next(_ids), "method": method, "params": params or {}}
    resp = await client.post(SERVER_URL, json=message)
    resp.raise_for_status()
    payload = resp.json()
    if "error" in payload:
        print(f"{method} failed:", payload["error"])
        return None
    return payload["result"]


async def main(token: str | None) -> None:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    async with httpx.AsyncClient(headers=headers) as client:
        init = await call(client, "initialize", {"protocolVersion": "2025-06-18", "clientInfo": {"name": "demo"}})
        print("Connected. Protocol version:", init["protocolVersion"])
        await client.post(SERVER_URL, json={"jsonrpc": "2.0", "method": "notifications/initialized"})

        tools = await call(client, "tools/list")
        print("Tools:", [tool["name"] for tool in tools["tools"]])

        result = await call(client, "tools/call", {"name": "plan_trip", "arguments": {"destination": "Barcelona", "days": "5"}})
        print("plan_trip result:", result)

        invalid = await call(client, "tools/call", {"name": "plan_trip", "arguments": {"destination": "B", "days": 0}})
        print("invalid call result:", invalid)

        resource = await call(client, "resources/read", {"uri": "travel://tips/lisbon"})
        print("Resource contents:", resource["contents"][0]["text"])

        prompt = await call(client, "prompts/get", {"name": "plan-vacation", "arguments": {"destination": "Barcelona"}})
        print("Prompt messages:", prompt["messages"])


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Talk to the hello-trip MCP server")
    parser.add_argument("--token", default=None)
    args = parser.parse_args()

    asyncio.run(main(args.token))

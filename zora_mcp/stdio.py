"""
MCP stdio transport.

stdout carries protocol frames only; all logging goes to stderr. The SDK's
own input-schema validation is disabled so the dispatcher's validator is the
single source of argument errors.
"""

from __future__ import annotations

import logging
from typing import Any, List

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from zora_mcp import __version__
from zora_mcp.config import SERVER_NAME
from zora_mcp.mcp import Dispatcher

logger = logging.getLogger(__name__)


class ToolCallFailed(Exception):
    """Carries a rendered error envelope; the SDK reports it with isError set."""


def tool_listing(dispatcher: Dispatcher) -> List[Tool]:
    return [
        Tool(
            name=entry["name"],
            title=entry["title"],
            description=entry["description"],
            inputSchema=entry["inputSchema"],
        )
        for entry in dispatcher.list_tools()
    ]


async def handle_call_tool(dispatcher: Dispatcher, name: str, arguments: Any) -> List[TextContent]:
    envelope = await dispatcher.invoke(name, arguments)
    contents = [TextContent(type="text", text=item["text"]) for item in envelope["content"]]
    if envelope.get("isError"):
        raise ToolCallFailed(contents[0].text)
    return contents


def build_server(dispatcher: Dispatcher) -> Server:
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        return tool_listing(dispatcher)

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Any) -> List[TextContent]:
        return await handle_call_tool(dispatcher, name, arguments)

    return server


async def run_stdio(dispatcher: Dispatcher) -> None:
    server = build_server(dispatcher)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        aclose = getattr(dispatcher.platform, "aclose", None)
        if aclose is not None:
            await aclose()

"""
MCP Server - stdio binding for the Figma design tools

Exposes every FigmaTools tool through the low-level MCP server. stdout carries
the protocol frames, so the process must run with a LoggingContext that keeps
informational logs on stderr.
"""

import logging
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from figma_tools import TOOL_SPECS, FigmaTools, result_text
from log_context import LoggingContext

logger = logging.getLogger(__name__)

SERVER_NAME = "Figma Design MCP"


class ToolCallFailed(Exception):
    """Raised inside the call_tool handler so the SDK answers with isError=True."""


def tool_definitions() -> List[Tool]:
    return [
        Tool(
            name=name,
            description=description,
            inputSchema=args_model.model_json_schema(by_alias=True),
        )
        for name, (description, args_model, _) in TOOL_SPECS.items()
    ]


async def dispatch(toolset: FigmaTools, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
    """Run tool `name` and translate its result into MCP content."""
    logger.info(f"🔧 Tool call: {name}")
    result = await toolset.call(name, arguments)
    if result.get("isError"):
        raise ToolCallFailed(result_text(result))
    return [TextContent(type="text", text=part["text"]) for part in result["content"]]


def create_server(toolset: FigmaTools) -> Server:
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        return tool_definitions()

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
        return await dispatch(toolset, name, arguments)

    return server


async def serve_stdio(toolset: FigmaTools, log_context: LoggingContext) -> None:
    if not log_context.protocol_on_stdout:
        raise ValueError("stdio transport requires a LoggingContext with protocol_on_stdout=True")
    server = create_server(toolset)
    logger.info(f"🚀 {SERVER_NAME} serving {len(TOOL_SPECS)} tools over stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())

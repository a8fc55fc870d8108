"""MCP server exposing the Linear tools over stdio."""

import logging
import uuid
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from ..linear import LinearClient
from ..observability.logging import clear_log_context, set_log_context
from .tools import LinearTools, ToolError

logger = logging.getLogger(__name__)

SERVER_NAME = "linear-mcp"


class LinearMCPServer:
    """Single-tenant MCP server backed by one Linear API key."""

    def __init__(self, client: LinearClient, api_key: str):
        self.tools = LinearTools(client, api_key)
        self.server = Server(SERVER_NAME)
        self._setup_handlers()

    def _setup_handlers(self):
        """Set up MCP protocol handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            tools = self.tools.get_tools()
            logger.debug("Returning %d tools", len(tools))
            return tools

        @self.server.call_tool()
        async def handle_call_tool(
            name: str, arguments: Optional[Dict[str, Any]] = None
        ) -> List[types.TextContent]:
            return await self.call_tool(name, arguments)

    async def call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> List[types.TextContent]:
        """Run one tool call.

        Failures propagate as :class:`ToolError`; the MCP server turns them
        into a result flagged ``isError`` carrying the error text.
        """
        set_log_context(tool_name=name, request_id=uuid.uuid4().hex[:8])
        logger.info("Tool call: %s", name)
        try:
            result = await self.tools.execute_tool(name, arguments or {})
        except ToolError as e:
            logger.error("Tool execution failed: %s - %s", name, str(e))
            raise
        finally:
            clear_log_context()
        return [types.TextContent(type="text", text=result)]

    async def run_stdio(self):
        """Serve MCP over stdin/stdout until the client disconnects."""
        logger.info("Starting %s on stdio", SERVER_NAME)
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )

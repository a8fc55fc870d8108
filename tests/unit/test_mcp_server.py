"""Tests for LinearMCPServer tool routing."""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from mcp import types

from linear_mcp.mcp.server import SERVER_NAME, LinearMCPServer
from linear_mcp.mcp.tools import ToolError


def _make_response(json_data):
    resp = MagicMock()
    resp.json.return_value = json_data
    resp.status_code = 200
    resp.reason_phrase = "OK"
    return resp


@pytest.fixture
def mcp_server(linear_client):
    return LinearMCPServer(linear_client, "lin_api_test_key")


class TestServerSetup:

    def test_server_name(self, mcp_server):
        assert mcp_server.server.name == SERVER_NAME == "linear-mcp"

    def test_handlers_registered(self, mcp_server):
        assert types.ListToolsRequest in mcp_server.server.request_handlers
        assert types.CallToolRequest in mcp_server.server.request_handlers


@pytest.mark.asyncio
class TestCallTool:

    async def test_success_returns_text_content(self, mcp_server, mock_http_client):
        mock_http_client.post.return_value = _make_response(
            {"data": {"viewer": {"id": "u-1", "name": "Sam", "email": "s@x.io"}}}
        )

        result = await mcp_server.call_tool("get_viewer", None)

        assert len(result) == 1
        assert result[0].type == "text"
        assert json.loads(result[0].text)["id"] == "u-1"

    async def test_failure_propagates_tool_error(self, mcp_server, mock_http_client):
        mock_http_client.post.return_value = _make_response({"errors": [{"message": "Forbidden"}]})

        with pytest.raises(ToolError, match="Forbidden"):
            await mcp_server.call_tool("get_teams", {})

    async def test_log_context_cleared(self, mcp_server):
        with patch("linear_mcp.mcp.server.clear_log_context") as mock_clear, \
                patch("linear_mcp.mcp.server.set_log_context") as mock_set:
            with pytest.raises(ToolError):
                await mcp_server.call_tool("nope", {})

        assert mock_set.call_args.kwargs["tool_name"] == "nope"
        mock_clear.assert_called_once()

    async def test_dispatches_to_tools(self, mcp_server):
        mcp_server.tools.execute_tool = AsyncMock(return_value="[]")

        result = await mcp_server.call_tool("get_teams", {"x": 1})

        mcp_server.tools.execute_tool.assert_awaited_once_with("get_teams", {"x": 1})
        assert result[0].text == "[]"

"""Tests for the MCP tool catalog and dispatcher."""

import json

import pytest
from unittest.mock import MagicMock

from linear_mcp.mcp.tools import LinearTools, ToolArgumentError, ToolError

TEST_API_KEY = "lin_api_test_key"


def _make_response(json_data):
    resp = MagicMock()
    resp.json.return_value = json_data
    resp.status_code = 200
    resp.reason_phrase = "OK"
    return resp


def _respond(mock_http_client, *bodies):
    mock_http_client.post.side_effect = [_make_response(body) for body in bodies]


def _sent_variables(mock_http_client, index=0):
    return mock_http_client.post.call_args_list[index].kwargs["json"].get("variables")


@pytest.fixture
def tools(linear_client):
    return LinearTools(linear_client, TEST_API_KEY)


EXPECTED_TOOLS = {
    "get_issue",
    "get_issue_by_identifier",
    "get_team_issues",
    "create_issue",
    "update_issue",
    "get_issue_children",
    "get_teams",
    "get_team_projects",
    "get_projects",
    "get_project",
    "create_project",
    "update_project",
    "get_project_issues",
    "get_viewer",
    "download_attachment",
}


class TestToolCatalog:

    def test_all_tools_listed(self, tools):
        assert set(tools.tool_names) == EXPECTED_TOOLS

    def test_schemas_are_objects(self, tools):
        for tool in tools.get_tools():
            assert tool.inputSchema["type"] == "object"
            for required in tool.inputSchema.get("required", []):
                assert required in tool.inputSchema["properties"]

    def test_required_arguments(self, tools):
        schemas = {tool.name: tool.inputSchema for tool in tools.get_tools()}

        assert schemas["create_issue"]["required"] == ["team_id", "title"]
        assert schemas["update_project"]["required"] == ["project_id"]
        assert schemas["download_attachment"]["required"] == ["url", "file_path"]
        assert "required" not in schemas["get_teams"]


@pytest.mark.asyncio
class TestToolDispatch:

    async def test_unknown_tool(self, tools):
        with pytest.raises(ToolError, match="Unknown tool: delete_everything"):
            await tools.execute_tool("delete_everything", {})

    async def test_private_helpers_are_not_tools(self, tools):
        with pytest.raises(ToolError, match="Unknown tool"):
            await tools.execute_tool("to_json", {})

    async def test_missing_required_argument(self, tools, mock_http_client):
        with pytest.raises(ToolArgumentError, match="team_id"):
            await tools.execute_tool("get_team_issues", {})

        mock_http_client.post.assert_not_awaited()

    async def test_wrong_typed_argument(self, tools):
        with pytest.raises(ToolArgumentError, match="first"):
            await tools.execute_tool("get_team_issues", {"team_id": "t-1", "first": "ten"})

    async def test_get_teams_returns_json(self, tools, mock_http_client):
        _respond(mock_http_client, {"data": {"teams": {"nodes": [{"id": "t-1", "name": "Eng", "key": "ENG"}]}}})

        result = await tools.execute_tool("get_teams", {})

        assert json.loads(result) == [{"id": "t-1", "name": "Eng", "key": "ENG"}]
        assert result.startswith("[\n  {")

    async def test_get_issue_with_children(self, tools, mock_http_client):
        _respond(
            mock_http_client,
            {"data": {"issue": {"id": "i-1", "branchName": "eng-1"}}},
            {"data": {"issue": {"children": {"nodes": [{"id": "c-1"}]}}}},
        )

        result = json.loads(await tools.execute_tool("get_issue", {"id": "i-1", "include_children": True}))

        assert result["branchName"] == "eng-1"
        assert result["children"][0]["id"] == "c-1"

    async def test_get_team_issues_passes_first(self, tools, mock_http_client):
        _respond(mock_http_client, {"data": {"team": {"issues": {"nodes": []}}}})

        assert json.loads(await tools.execute_tool("get_team_issues", {"team_id": "t-1", "first": 5})) == []
        assert _sent_variables(mock_http_client) == {"teamId": "t-1", "first": 5}

    async def test_create_issue_arguments(self, tools, mock_http_client):
        _respond(mock_http_client, {"data": {"issueCreate": {"success": True, "issue": {"id": "i-1"}}}})

        await tools.execute_tool("create_issue", {
            "team_id": "t-1",
            "title": "Bug",
            "priority": 3,
            "parent_id": "i-0",
        })

        assert _sent_variables(mock_http_client) == {"input": {
            "teamId": "t-1",
            "title": "Bug",
            "description": "",
            "priority": 3,
            "parentId": "i-0",
        }}

    async def test_update_issue_sends_only_given_fields(self, tools, mock_http_client):
        _respond(mock_http_client, {"data": {"issueUpdate": {"success": True, "issue": {"id": "i-1"}}}})

        await tools.execute_tool("update_issue", {"issue_id": "i-1", "state_id": "s-2", "description": ""})

        assert _sent_variables(mock_http_client) == {
            "id": "i-1",
            "input": {"description": "", "stateId": "s-2"},
        }

    async def test_update_project_ignores_empty_strings(self, tools, mock_http_client):
        _respond(mock_http_client, {"data": {"projectUpdate": {"success": True, "project": {"id": "p-1"}}}})

        await tools.execute_tool("update_project", {
            "project_id": "p-1",
            "name": "",
            "state": "paused",
            "team_ids": [],
        })

        assert _sent_variables(mock_http_client) == {"id": "p-1", "input": {"state": "paused"}}

    async def test_get_projects_state_filter(self, tools, mock_http_client):
        _respond(mock_http_client, {"data": {"projects": {"nodes": []}}})

        await tools.execute_tool("get_projects", {"state": "completed"})

        assert _sent_variables(mock_http_client) == {
            "first": 50,
            "filter": {"state": {"eq": "completed"}},
        }

    async def test_linear_error_is_wrapped(self, tools, mock_http_client):
        _respond(mock_http_client, {"errors": [{"message": "Entity not found"}]})

        with pytest.raises(ToolError) as exc_info:
            await tools.execute_tool("get_project", {"project_id": "p-x"})

        assert str(exc_info.value) == (
            "Error executing tool 'get_project': GraphQL errors: Entity not found"
        )

    async def test_invalid_identifier_is_wrapped(self, tools):
        with pytest.raises(ToolError, match="invalid issue identifier"):
            await tools.execute_tool("get_issue_by_identifier", {"identifier": "ENG"})


def _stream_context(status_code=200, chunks=(b"",)):
    async def aiter_bytes():
        for chunk in chunks:
            yield chunk

    response = MagicMock()
    response.status_code = status_code
    response.aiter_bytes = aiter_bytes

    context = MagicMock()
    context.__aenter__.return_value = response
    context.__aexit__.return_value = False
    return context


@pytest.mark.asyncio
class TestDownloadAttachment:

    async def test_download(self, tools, mock_http_client, tmp_path):
        target = tmp_path / "shot.png"
        mock_http_client.stream = MagicMock(return_value=_stream_context(chunks=(b"abc", b"def")))

        result = await tools.execute_tool("download_attachment", {
            "url": "https://uploads.linear.app/abc/shot.png",
            "file_path": str(target),
        })

        assert result == f"Successfully downloaded attachment to {target}"
        assert target.read_bytes() == b"abcdef"
        call = mock_http_client.stream.call_args
        assert call.args == ("GET", "https://uploads.linear.app/abc/shot.png")
        assert call.kwargs["headers"]["Authorization"] == TEST_API_KEY

    async def test_rejects_other_hosts(self, tools, mock_http_client, tmp_path):
        mock_http_client.stream = MagicMock()

        with pytest.raises(ToolArgumentError, match="uploads.linear.app"):
            await tools.execute_tool("download_attachment", {
                "url": "https://evil.example.com/file",
                "file_path": str(tmp_path / "f"),
            })

        mock_http_client.stream.assert_not_called()

    async def test_non_200_status(self, tools, mock_http_client, tmp_path):
        target = tmp_path / "missing.png"
        mock_http_client.stream = MagicMock(return_value=_stream_context(status_code=404))

        with pytest.raises(ToolError, match="status 404"):
            await tools.execute_tool("download_attachment", {
                "url": "https://uploads.linear.app/abc/missing.png",
                "file_path": str(target),
            })

        assert not target.exists()

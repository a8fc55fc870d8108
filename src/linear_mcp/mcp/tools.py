"""Linear tools exposed over MCP.

Each tool maps its snake_case arguments onto a :class:`LinearClient` call and
returns the resulting record(s) as indented JSON text.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from mcp import types

from ..linear import (
    CreateIssueInput,
    CreateProjectInput,
    LinearClient,
    UpdateIssueInput,
    UpdateProjectInput,
)
from ..linear.models import LinearRecord

logger = logging.getLogger(__name__)

ATTACHMENT_URL_PREFIX = "https://uploads.linear.app/"
ATTACHMENT_TIMEOUT = 30.0

_FIRST_PROPERTY = {
    "type": "integer",
    "description": "Number of items to fetch (1-100, default 50)",
}


class ToolError(Exception):
    """A tool call failed; the message is reported back as the tool result."""

    pass


class ToolArgumentError(ToolError):
    """A tool was called with missing or invalid arguments."""

    pass


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def _require_str(arguments: Dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if not isinstance(value, str) or not value:
        raise ToolArgumentError(f"Missing required argument: {key}")
    return value


def _optional_str(arguments: Dict[str, Any], key: str) -> Optional[str]:
    value = arguments.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ToolArgumentError(f"Argument '{key}' must be a string")
    return value


def _optional_int(arguments: Dict[str, Any], key: str) -> Optional[int]:
    value = arguments.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ToolArgumentError(f"Argument '{key}' must be an integer")
    return int(value)


def _str_list(arguments: Dict[str, Any], key: str) -> List[str]:
    value = arguments.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ToolArgumentError(f"Argument '{key}' must be a list of strings")
    return list(value)


def _non_empty(value: Optional[str]) -> Optional[str]:
    return value or None


def _to_json(result: Any) -> str:
    if isinstance(result, list):
        payload = [item.to_dict() if isinstance(item, LinearRecord) else item for item in result]
    elif isinstance(result, LinearRecord):
        payload = result.to_dict()
    else:
        payload = result
    return json.dumps(payload, indent=2)


# ---------------------------------------------------------------------------
# Tool set
# ---------------------------------------------------------------------------


class LinearTools:
    """The Linear tool catalog and its dispatcher."""

    def __init__(self, client: LinearClient, api_key: str):
        self.client = client
        self.api_key = api_key

    def get_tools(self) -> List[types.Tool]:
        """Return the Linear tools with their JSON Schema input definitions."""
        return [
            types.Tool(
                name="get_issue",
                description="Get a Linear issue by ID",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "id": {
                            "type": "string",
                            "description": "The Linear issue ID to fetch",
                        },
                        "include_children": {
                            "type": "boolean",
                            "description": "Whether to include children (sub-issues) in the response",
                        },
                    },
                    "required": ["id"],
                },
            ),
            types.Tool(
                name="get_issue_by_identifier",
                description="Get a Linear issue by its identifier (e.g., 'ENG-123')",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "identifier": {
                            "type": "string",
                            "description": "The issue identifier to search for (e.g., 'ENG-123')",
                        },
                    },
                    "required": ["identifier"],
                },
            ),
            types.Tool(
                name="get_team_issues",
                description="Get issues for a Linear team",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "team_id": {
                            "type": "string",
                            "description": "The Linear team ID to fetch issues for",
                        },
                        "first": _FIRST_PROPERTY,
                    },
                    "required": ["team_id"],
                },
            ),
            types.Tool(
                name="create_issue",
                description="Create a new Linear issue",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "team_id": {
                            "type": "string",
                            "description": "The Linear team ID to create the issue in",
                        },
                        "title": {
                            "type": "string",
                            "description": "The title of the issue",
                        },
                        "description": {
                            "type": "string",
                            "description": "The description of the issue (Markdown)",
                        },
                        "priority": {
                            "type": "integer",
                            "minimum": 0,
                            "maximum": 4,
                            "description": "Priority: 0=None, 1=Urgent, 2=High, 3=Medium, 4=Low",
                        },
                        "state_id": {
                            "type": "string",
                            "description": "The workflow state ID for the issue",
                        },
                        "assignee_id": {
                            "type": "string",
                            "description": "The user ID to assign the issue to",
                        },
                        "project_id": {
                            "type": "string",
                            "description": "The project ID to associate the issue with",
                        },
                        "parent_id": {
                            "type": "string",
                            "description": "The parent issue ID to create this as a sub-issue of",
                        },
                    },
                    "required": ["team_id", "title"],
                },
            ),
            types.Tool(
                name="update_issue",
                description="Update an existing Linear issue",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issue_id": {
                            "type": "string",
                            "description": "The Linear issue ID to update",
                        },
                        "title": {
                            "type": "string",
                            "description": "The new title for the issue",
                        },
                        "description": {
                            "type": "string",
                            "description": "The new description for the issue",
                        },
                        "priority": {
                            "type": "integer",
                            "minimum": 0,
                            "maximum": 4,
                            "description": "The new priority for the issue",
                        },
                        "state_id": {
                            "type": "string",
                            "description": "The new workflow state ID",
                        },
                        "assignee_id": {
                            "type": "string",
                            "description": "The new assignee user ID",
                        },
                        "project_id": {
                            "type": "string",
                            "description": "The new project ID",
                        },
                        "parent_id": {
                            "type": "string",
                            "description": "The new parent issue ID",
                        },
                    },
                    "required": ["issue_id"],
                },
            ),
            types.Tool(
                name="get_issue_children",
                description="Get sub-issues for a Linear issue",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issue_id": {
                            "type": "string",
                            "description": "The Linear parent issue ID to fetch children for",
                        },
                        "first": _FIRST_PROPERTY,
                    },
                    "required": ["issue_id"],
                },
            ),
            types.Tool(
                name="get_teams",
                description="Get all Linear teams",
                inputSchema={
                    "type": "object",
                    "properties": {},
                },
            ),
            types.Tool(
                name="get_team_projects",
                description="Get projects for a Linear team",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "team_id": {
                            "type": "string",
                            "description": "The Linear team ID to fetch projects for",
                        },
                        "first": _FIRST_PROPERTY,
                    },
                    "required": ["team_id"],
                },
            ),
            types.Tool(
                name="get_projects",
                description="List Linear projects, optionally filtered by state",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "first": _FIRST_PROPERTY,
                        "state": {
                            "type": "string",
                            "description": "Only projects in this state (planned, started, paused, completed, canceled)",
                        },
                    },
                },
            ),
            types.Tool(
                name="get_project",
                description="Get a Linear project by ID",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "project_id": {
                            "type": "string",
                            "description": "The Linear project ID to fetch",
                        },
                    },
                    "required": ["project_id"],
                },
            ),
            types.Tool(
                name="create_project",
                description="Create a new Linear project",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "name": {
                            "type": "string",
                            "description": "The name of the project",
                        },
                        "description": {
                            "type": "string",
                            "description": "The description of the project",
                        },
                        "icon": {
                            "type": "string",
                            "description": "The icon for the project",
                        },
                        "color": {
                            "type": "string",
                            "description": "The color for the project",
                        },
                        "state": {
                            "type": "string",
                            "description": "The state of the project (planned, started, paused, completed, canceled)",
                        },
                        "team_ids": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "The team IDs to associate with the project",
                        },
                        "lead_id": {
                            "type": "string",
                            "description": "The user ID of the project lead",
                        },
                    },
                    "required": ["name"],
                },
            ),
            types.Tool(
                name="update_project",
                description="Update an existing Linear project",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "project_id": {
                            "type": "string",
                            "description": "The Linear project ID to update",
                        },
                        "name": {
                            "type": "string",
                            "description": "The new name for the project",
                        },
                        "description": {
                            "type": "string",
                            "description": "The new description for the project",
                        },
                        "icon": {
                            "type": "string",
                            "description": "The new icon for the project",
                        },
                        "color": {
                            "type": "string",
                            "description": "The new color for the project",
                        },
                        "state": {
                            "type": "string",
                            "description": "The new state of the project (planned, started, paused, completed, canceled)",
                        },
                        "team_ids": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "The new team IDs to associate with the project",
                        },
                        "lead_id": {
                            "type": "string",
                            "description": "The new user ID of the project lead",
                        },
                    },
                    "required": ["project_id"],
                },
            ),
            types.Tool(
                name="get_project_issues",
                description="Get issues for a Linear project",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "project_id": {
                            "type": "string",
                            "description": "The Linear project ID to fetch issues for",
                        },
                        "first": _FIRST_PROPERTY,
                    },
                    "required": ["project_id"],
                },
            ),
            types.Tool(
                name="get_viewer",
                description="Get the Linear user the API key belongs to",
                inputSchema={
                    "type": "object",
                    "properties": {},
                },
            ),
            types.Tool(
                name="download_attachment",
                description="Download a Linear attachment file",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "url": {
                            "type": "string",
                            "description": "URL of the attachment to download (must be from uploads.linear.app)",
                        },
                        "file_path": {
                            "type": "string",
                            "description": "Local file path to save the downloaded attachment to",
                        },
                    },
                    "required": ["url", "file_path"],
                },
            ),
        ]

    @property
    def tool_names(self) -> List[str]:
        return [tool.name for tool in self.get_tools()]

    async def execute_tool(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """Dispatch a tool call to the matching private method.

        Returns the JSON text of the result.

        Raises:
            ToolError: Unknown tool, bad arguments, or the Linear call failed.
                The message is what the caller should show.
        """
        arguments = arguments or {}
        handler = getattr(self, f"_{tool_name}", None)
        if handler is None or tool_name not in self.tool_names:
            raise ToolError(f"Unknown tool: {tool_name}")

        try:
            return await handler(arguments)
        except ToolError:
            raise
        except Exception as e:
            logger.exception("Error executing Linear tool '%s'", tool_name)
            raise ToolError(f"Error executing tool '{tool_name}': {e}") from e

    # -- Issues ------------------------------------------------------------

    async def _get_issue(self, arguments: Dict[str, Any]) -> str:
        issue = await self.client.get_issue(
            _require_str(arguments, "id"),
            include_children=bool(arguments.get("include_children", False)),
        )
        return _to_json(issue)

    async def _get_issue_by_identifier(self, arguments: Dict[str, Any]) -> str:
        identifier = _require_str(arguments, "identifier")
        return _to_json(await self.client.get_issue_by_identifier(identifier))

    async def _get_team_issues(self, arguments: Dict[str, Any]) -> str:
        issues = await self.client.get_team_issues(
            _require_str(arguments, "team_id"),
            first=_optional_int(arguments, "first"),
        )
        return _to_json(issues)

    async def _create_issue(self, arguments: Dict[str, Any]) -> str:
        issue_input = CreateIssueInput(
            team_id=_require_str(arguments, "team_id"),
            title=_require_str(arguments, "title"),
            description=_optional_str(arguments, "description") or "",
            priority=_optional_int(arguments, "priority") or 0,
            state_id=_optional_str(arguments, "state_id") or "",
            assignee_id=_optional_str(arguments, "assignee_id") or "",
            project_id=_optional_str(arguments, "project_id") or "",
            parent_id=_optional_str(arguments, "parent_id") or "",
        )
        return _to_json(await self.client.create_issue(issue_input))

    async def _update_issue(self, arguments: Dict[str, Any]) -> str:
        issue_id = _require_str(arguments, "issue_id")
        issue_input = UpdateIssueInput(
            title=_optional_str(arguments, "title"),
            description=_optional_str(arguments, "description"),
            priority=_optional_int(arguments, "priority"),
            state_id=_optional_str(arguments, "state_id"),
            assignee_id=_optional_str(arguments, "assignee_id"),
            project_id=_optional_str(arguments, "project_id"),
            parent_id=_optional_str(arguments, "parent_id"),
        )
        return _to_json(await self.client.update_issue(issue_id, issue_input))

    async def _get_issue_children(self, arguments: Dict[str, Any]) -> str:
        children = await self.client.get_issue_children(
            _require_str(arguments, "issue_id"),
            first=_optional_int(arguments, "first"),
        )
        return _to_json(children)

    # -- Teams -------------------------------------------------------------

    async def _get_teams(self, arguments: Dict[str, Any]) -> str:
        return _to_json(await self.client.get_teams())

    async def _get_team_projects(self, arguments: Dict[str, Any]) -> str:
        projects = await self.client.get_team_projects(
            _require_str(arguments, "team_id"),
            first=_optional_int(arguments, "first"),
        )
        return _to_json(projects)

    # -- Projects ----------------------------------------------------------

    async def _get_projects(self, arguments: Dict[str, Any]) -> str:
        projects = await self.client.get_projects(
            first=_optional_int(arguments, "first"),
            state=_optional_str(arguments, "state"),
        )
        return _to_json(projects)

    async def _get_project(self, arguments: Dict[str, Any]) -> str:
        project_id = _require_str(arguments, "project_id")
        return _to_json(await self.client.get_project(project_id))

    async def _create_project(self, arguments: Dict[str, Any]) -> str:
        project_input = CreateProjectInput(
            name=_require_str(arguments, "name"),
            description=_optional_str(arguments, "description") or "",
            icon=_optional_str(arguments, "icon") or "",
            color=_optional_str(arguments, "color") or "",
            state=_optional_str(arguments, "state") or "",
            team_ids=_str_list(arguments, "team_ids"),
            lead_id=_optional_str(arguments, "lead_id") or "",
        )
        return _to_json(await self.client.create_project(project_input))

    async def _update_project(self, arguments: Dict[str, Any]) -> str:
        # Empty strings mean "leave unchanged" for project updates.
        project_id = _require_str(arguments, "project_id")
        project_input = UpdateProjectInput(
            name=_non_empty(_optional_str(arguments, "name")),
            description=_non_empty(_optional_str(arguments, "description")),
            icon=_non_empty(_optional_str(arguments, "icon")),
            color=_non_empty(_optional_str(arguments, "color")),
            state=_non_empty(_optional_str(arguments, "state")),
            team_ids=_str_list(arguments, "team_ids"),
            lead_id=_non_empty(_optional_str(arguments, "lead_id")),
        )
        return _to_json(await self.client.update_project(project_id, project_input))

    async def _get_project_issues(self, arguments: Dict[str, Any]) -> str:
        project = await self.client.get_project_issues(
            _require_str(arguments, "project_id"),
            first=_optional_int(arguments, "first"),
        )
        return _to_json(project)

    # -- Users -------------------------------------------------------------

    async def _get_viewer(self, arguments: Dict[str, Any]) -> str:
        return _to_json(await self.client.get_viewer())

    # -- Attachments -------------------------------------------------------

    async def _download_attachment(self, arguments: Dict[str, Any]) -> str:
        """Stream an uploads.linear.app file to a local path."""
        url = _require_str(arguments, "url")
        file_path = _require_str(arguments, "file_path")
        if not url.startswith(ATTACHMENT_URL_PREFIX):
            raise ToolArgumentError("invalid URL: must be from uploads.linear.app domain")

        http_client = self.client.graphql.http_client
        async with http_client.stream(
            "GET",
            url,
            headers={
                "Authorization": self.api_key,
                "Content-Type": "application/json",
            },
            timeout=ATTACHMENT_TIMEOUT,
        ) as response:
            if response.status_code != 200:
                raise ToolError(
                    f"failed to download attachment: server returned status {response.status_code}"
                )
            with open(file_path, "wb") as out:
                async for chunk in response.aiter_bytes():
                    out.write(chunk)

        logger.info("Downloaded attachment to %s", file_path)
        return f"Successfully downloaded attachment to {file_path}"

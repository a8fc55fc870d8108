"""Linear API client.

One coroutine per API operation. Each builds the variables, runs one
GraphQL request (two for an issue fetched with its children) and maps the
``data`` tree onto the records in :mod:`linear_mcp.linear.models`.

Linear priority values: 0=No priority, 1=Urgent, 2=High, 3=Medium, 4=Low.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx

from . import queries
from .exceptions import (
    ChildrenFetchError,
    LinearError,
    MalformedResponseError,
    MutationFailedError,
)
from .graphql import DEFAULT_API_URL, GraphQLClient
from .models import (
    CreateIssueInput,
    CreateProjectInput,
    Issue,
    Project,
    ProjectWithIssues,
    Team,
    UpdateIssueInput,
    UpdateProjectInput,
    User,
)

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^\s*([A-Za-z0-9]+)-(\d+)\s*$")


# ---------------------------------------------------------------------------
# Shape checks
# ---------------------------------------------------------------------------


def _require_object(container: Dict[str, Any], key: str, operation: str) -> Dict[str, Any]:
    value = container.get(key)
    if not isinstance(value, dict):
        raise MalformedResponseError(key, operation)
    return value


def _require_nodes(container: Dict[str, Any], key: str, operation: str) -> List[Dict[str, Any]]:
    """Return ``container[key].nodes``; every node must be an object."""
    connection = _require_object(container, key, operation)
    nodes = connection.get("nodes")
    if not isinstance(nodes, list):
        raise MalformedResponseError(f"{key}.nodes", operation)
    for node in nodes:
        if not isinstance(node, dict):
            raise MalformedResponseError(f"{key}.nodes[]", operation)
    return nodes


def _mutation_result(
    data: Dict[str, Any], payload_key: str, object_key: str, operation: str
) -> Dict[str, Any]:
    """Check ``success`` on a mutation payload, then return the mutated object."""
    payload = _require_object(data, payload_key, operation)
    if payload.get("success") is not True:
        raise MutationFailedError(operation)
    return _require_object(payload, object_key, operation)


def parse_identifier(identifier: str) -> Tuple[str, int]:
    """Split ``ENG-123`` into ``("ENG", 123)``."""
    match = _IDENTIFIER_RE.match(identifier or "")
    if not match:
        raise ValueError(
            f"invalid issue identifier {identifier!r}: expected TEAM-NUMBER, e.g. 'ENG-123'"
        )
    return match.group(1).upper(), int(match.group(2))


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class LinearClient:
    """Typed access to the Linear operations exposed as MCP tools.

    Holds no per-call state; concurrent calls are safe as long as the
    underlying httpx client is.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.graphql = GraphQLClient(api_key, endpoint=api_url, http_client=http_client)

    @property
    def api_url(self) -> str:
        return self.graphql.endpoint

    async def _execute(
        self, query: str, variables: Optional[Dict[str, Any]], operation: str
    ) -> Dict[str, Any]:
        response = await self.graphql.execute(query, variables, operation=operation)
        return response.data

    # -- Users -------------------------------------------------------------

    async def get_viewer(self) -> User:
        """The user the API key belongs to."""
        data = await self._execute(queries.GET_VIEWER_QUERY, None, "get_viewer")
        return User.model_validate(_require_object(data, "viewer", "get_viewer"))

    # -- Teams -------------------------------------------------------------

    async def get_teams(self) -> List[Team]:
        """All teams in the workspace."""
        data = await self._execute(queries.GET_TEAMS_QUERY, None, "get_teams")
        nodes = _require_nodes(data, "teams", "get_teams")
        return [Team.model_validate(node) for node in nodes]

    # -- Issues ------------------------------------------------------------

    async def get_team_issues(self, team_id: str, first: Optional[int] = None) -> List[Issue]:
        """Issues of one team, first page only."""
        operation = "get_team_issues"
        variables = {"teamId": team_id, "first": queries.clamp_first(first)}
        data = await self._execute(queries.load_query(queries.GET_TEAM_ISSUES), variables, operation)
        team = _require_object(data, "team", operation)
        nodes = _require_nodes(team, "issues", operation)
        return [Issue.model_validate(node) for node in nodes]

    async def get_issue(
        self,
        issue_id: str,
        include_children: bool = False,
        children_first: Optional[int] = None,
    ) -> Issue:
        """Fetch one issue, optionally with its sub-issues.

        With ``include_children`` a second request loads the children
        (``children_first`` defaults to 50). If that request fails a
        :class:`ChildrenFetchError` carrying the primary issue is raised.
        """
        operation = "get_issue"
        data = await self._execute(
            queries.load_query(queries.GET_ISSUE), {"id": issue_id}, operation
        )
        issue = Issue.model_validate(_require_object(data, "issue", operation))

        if not include_children:
            return issue

        try:
            children = await self.get_issue_children(issue_id, first=children_first)
        except LinearError as exc:
            raise ChildrenFetchError(issue, exc) from exc

        return issue.model_copy(update={"children": children})

    async def get_issue_children(self, issue_id: str, first: Optional[int] = None) -> List[Issue]:
        """Sub-issues of an issue, first page only."""
        operation = "get_issue_children"
        variables = {"id": issue_id, "first": queries.clamp_first(first)}
        data = await self._execute(
            queries.load_query(queries.GET_ISSUE_CHILDREN), variables, operation
        )
        issue = _require_object(data, "issue", operation)
        nodes = _require_nodes(issue, "children", operation)
        return [Issue.model_validate(node) for node in nodes]

    async def get_issue_by_identifier(self, identifier: str) -> Issue:
        """Look an issue up by its human-readable identifier, e.g. ``ENG-123``."""
        operation = "get_issue_by_identifier"
        team_key, number = parse_identifier(identifier)
        data = await self._execute(
            queries.load_query(queries.GET_ISSUE_BY_IDENTIFIER),
            {"teamKey": team_key, "number": number},
            operation,
        )
        nodes = _require_nodes(data, "issues", operation)
        if not nodes:
            raise LinearError(f"issue {team_key}-{number} not found", operation)
        return Issue.model_validate(nodes[0])

    async def create_issue(self, issue_input: CreateIssueInput) -> Issue:
        operation = "create_issue"
        data = await self._execute(
            queries.load_query(queries.CREATE_ISSUE),
            {"input": issue_input.to_variables()},
            operation,
        )
        issue = _mutation_result(data, "issueCreate", "issue", operation)
        logger.info("Created issue %s", issue.get("identifier") or issue.get("id"))
        return Issue.model_validate(issue)

    async def update_issue(self, issue_id: str, issue_input: UpdateIssueInput) -> Issue:
        operation = "update_issue"
        data = await self._execute(
            queries.load_query(queries.UPDATE_ISSUE),
            {"id": issue_id, "input": issue_input.to_variables()},
            operation,
        )
        issue = _mutation_result(data, "issueUpdate", "issue", operation)
        logger.info("Updated issue %s", issue.get("identifier") or issue_id)
        return Issue.model_validate(issue)

    # -- Projects ----------------------------------------------------------

    async def get_projects(
        self, first: Optional[int] = None, state: Optional[str] = None
    ) -> List[Project]:
        """Workspace projects, optionally only those in ``state``."""
        operation = "get_projects"
        variables: Dict[str, Any] = {"first": queries.clamp_first(first)}
        state_filter = queries.project_state_filter(state)
        if state_filter:
            variables["filter"] = state_filter
        data = await self._execute(queries.GET_PROJECTS_QUERY, variables, operation)
        nodes = _require_nodes(data, "projects", operation)
        return [Project.model_validate(node) for node in nodes]

    async def get_project(self, project_id: str) -> Project:
        operation = "get_project"
        data = await self._execute(queries.GET_PROJECT_QUERY, {"id": project_id}, operation)
        return Project.model_validate(_require_object(data, "project", operation))

    async def create_project(self, project_input: CreateProjectInput) -> Project:
        operation = "create_project"
        data = await self._execute(
            queries.CREATE_PROJECT_MUTATION, {"input": project_input.to_variables()}, operation
        )
        project = _mutation_result(data, "projectCreate", "project", operation)
        logger.info("Created project %s", project.get("id"))
        return Project.model_validate(project)

    async def update_project(self, project_id: str, project_input: UpdateProjectInput) -> Project:
        operation = "update_project"
        data = await self._execute(
            queries.UPDATE_PROJECT_MUTATION,
            {"id": project_id, "input": project_input.to_variables()},
            operation,
        )
        project = _mutation_result(data, "projectUpdate", "project", operation)
        logger.info("Updated project %s", project_id)
        return Project.model_validate(project)

    async def get_project_issues(
        self, project_id: str, first: Optional[int] = None
    ) -> ProjectWithIssues:
        """A project's status and its issues, first page only."""
        operation = "get_project_issues"
        variables = {"projectId": project_id, "first": queries.clamp_first(first)}
        data = await self._execute(
            queries.load_query(queries.GET_PROJECT_ISSUES), variables, operation
        )
        project = _require_object(data, "project", operation)
        return ProjectWithIssues(
            id=project.get("id"),
            status=project.get("status"),
            issues=_require_nodes(project, "issues", operation),
        )

    async def get_team_projects(self, team_id: str, first: Optional[int] = None) -> List[Project]:
        """Projects associated with one team, first page only."""
        operation = "get_team_projects"
        variables = {"teamId": team_id, "first": queries.clamp_first(first)}
        data = await self._execute(
            queries.load_query(queries.GET_TEAM_PROJECTS), variables, operation
        )
        team = _require_object(data, "team", operation)
        nodes = _require_nodes(team, "projects", operation)
        return [Project.model_validate(node) for node in nodes]

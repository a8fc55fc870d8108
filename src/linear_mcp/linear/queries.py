"""GraphQL documents used by the Linear client.

Short documents live inline below; the longer issue-shaped ones ship as
``.graphql`` files in the ``documents/`` directory next to this module and
are read with :func:`load_query`.
"""

import posixpath
from functools import lru_cache
from importlib import resources
from typing import Any, Optional

from .exceptions import QueryNotFoundError

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

# ---------------------------------------------------------------------------
# Packaged documents
# ---------------------------------------------------------------------------

GET_ISSUE = "get_issue.graphql"
GET_ISSUE_CHILDREN = "get_issue_children.graphql"
GET_ISSUE_BY_IDENTIFIER = "get_issue_by_identifier.graphql"
GET_TEAM_ISSUES = "get_team_issues.graphql"
CREATE_ISSUE = "create_issue.graphql"
UPDATE_ISSUE = "update_issue.graphql"
GET_PROJECT_ISSUES = "get_project_issues.graphql"
GET_TEAM_PROJECTS = "get_team_projects.graphql"


@lru_cache(maxsize=None)
def load_query(filename: str) -> str:
    """Read a packaged ``.graphql`` document by file name.

    Directory components are stripped, so only files shipped in
    ``documents/`` can be loaded.

    Raises:
        QueryNotFoundError: No document with that name is packaged.
    """
    name = posixpath.basename(filename.replace("\\", "/"))
    document = resources.files(__package__).joinpath("documents").joinpath(name)
    try:
        return document.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
        raise QueryNotFoundError(f"GraphQL document not found: {name}") from exc


def clamp_first(
    value: Any,
    default: int = DEFAULT_PAGE_SIZE,
    maximum: int = MAX_PAGE_SIZE,
) -> int:
    """Page size for a ``first`` argument.

    Values in ``[1, maximum]`` pass through. Anything else (missing,
    non-integer, zero, negative or above ``maximum``) falls back to
    ``default`` rather than being clamped to the boundary.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    if 0 < value <= maximum:
        return value
    return default


def project_state_filter(state: Optional[str]) -> Optional[dict]:
    """``ProjectFilter`` variable for an optional project state."""
    if not state:
        return None
    return {"state": {"eq": state}}


# ---------------------------------------------------------------------------
# Inline documents
# ---------------------------------------------------------------------------

GET_VIEWER_QUERY = """
query GetViewer {
  viewer {
    id
    name
    email
  }
}
"""

GET_TEAMS_QUERY = """
query GetTeams {
  teams {
    nodes {
      id
      name
      key
    }
  }
}
"""

_PROJECT_FIELDS = """
    id
    name
    description
    icon
    color
    state
    createdAt
    updatedAt
    startedAt
    targetDate
    sortOrder
    url
    status { id name }
    lead { id name email }
    teams { nodes { id name key } }
"""

GET_PROJECTS_QUERY = """
query GetProjects($first: Int!, $filter: ProjectFilter) {
  projects(first: $first, filter: $filter) {
    nodes {%s    }
  }
}
""" % _PROJECT_FIELDS

GET_PROJECT_QUERY = """
query GetProject($id: String!) {
  project(id: $id) {%s    issues { nodes { id identifier title } }
  }
}
""" % _PROJECT_FIELDS

CREATE_PROJECT_MUTATION = """
mutation CreateProject($input: ProjectCreateInput!) {
  projectCreate(input: $input) {
    success
    project {%s    }
  }
}
""" % _PROJECT_FIELDS

UPDATE_PROJECT_MUTATION = """
mutation UpdateProject($id: String!, $input: ProjectUpdateInput!) {
  projectUpdate(id: $id, input: $input) {
    success
    project {%s    }
  }
}
""" % _PROJECT_FIELDS

"""Linear GraphQL API client."""

from .client import LinearClient
from .exceptions import (
    ChildrenFetchError,
    GraphQLError,
    HTTPStatusError,
    LinearError,
    MalformedResponseError,
    MutationFailedError,
    QueryNotFoundError,
    TransportError,
)
from .graphql import DEFAULT_API_URL, GraphQLClient, GraphQLResponse
from .models import (
    CreateIssueInput,
    CreateProjectInput,
    Issue,
    Project,
    ProjectStatus,
    ProjectWithIssues,
    Team,
    UpdateIssueInput,
    UpdateProjectInput,
    User,
    WorkflowState,
)

__all__ = [
    "DEFAULT_API_URL",
    "ChildrenFetchError",
    "CreateIssueInput",
    "CreateProjectInput",
    "GraphQLClient",
    "GraphQLError",
    "GraphQLResponse",
    "HTTPStatusError",
    "Issue",
    "LinearClient",
    "LinearError",
    "MalformedResponseError",
    "MutationFailedError",
    "Project",
    "ProjectStatus",
    "ProjectWithIssues",
    "QueryNotFoundError",
    "Team",
    "TransportError",
    "UpdateIssueInput",
    "UpdateProjectInput",
    "User",
    "WorkflowState",
]

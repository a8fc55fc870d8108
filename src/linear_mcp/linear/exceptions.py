"""Linear client exception types.

Every failure surfaces to the immediate caller as one of these; nothing is
retried. The MCP dispatcher turns them into error tool results.
"""

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .graphql import GraphQLResponse
    from .models import Issue


class LinearError(Exception):
    """Base exception for all Linear client errors."""

    def __init__(self, message: str, operation: str = ""):
        self.operation = operation
        super().__init__(message)


class TransportError(LinearError):
    """The request could not be sent or the body could not be decoded."""

    pass


class HTTPStatusError(TransportError):
    """Non-OK HTTP status combined with a body that is not JSON."""

    def __init__(self, message: str, status_code: int = 0, operation: str = ""):
        self.status_code = status_code
        super().__init__(message, operation)


class GraphQLError(LinearError):
    """The server reported one or more errors in a decodable body.

    The partial response is kept on ``response`` so callers can still look
    at whatever ``data`` came back.
    """

    def __init__(
        self,
        messages: List[str],
        response: Optional["GraphQLResponse"] = None,
        operation: str = "",
    ):
        self.messages = list(messages)
        self.response = response
        super().__init__(f"GraphQL errors: {'; '.join(self.messages)}", operation)


class MalformedResponseError(LinearError):
    """An expected key is missing from the decoded data, or has the wrong shape."""

    def __init__(self, key: str, operation: str = ""):
        self.key = key
        prefix = f"{operation}: " if operation else ""
        super().__init__(f"{prefix}invalid or missing '{key}' in response data", operation)


class MutationFailedError(LinearError):
    """A mutation payload reported ``success: false`` (or no success flag)."""

    def __init__(self, operation: str):
        super().__init__(f"{operation} was not successful", operation)


class QueryNotFoundError(LinearError):
    """A packaged .graphql document could not be found."""

    pass


class ChildrenFetchError(LinearError):
    """The issue was fetched but loading its children failed.

    ``issue`` holds the primary record, ``__cause__`` the underlying error.
    """

    def __init__(self, issue: "Issue", cause: LinearError):
        self.issue = issue
        super().__init__(f"failed to load children: {cause}", "get_issue")

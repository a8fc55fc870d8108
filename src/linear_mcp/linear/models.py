"""Domain records for the subset of Linear's schema this server exposes.

Records are frozen pydantic models built straight from the decoded GraphQL
``data`` tree. Decoding is lenient:

- a scalar of the wrong JSON type becomes the field type's zero value;
- an optional sub-object that is absent (or not an object) becomes ``None``;
- a nested ``{nodes: [...]}`` connection is flattened into a list, skipping
  entries that are not objects.

The only strict checks (top-level containers, ``nodes`` on list fetches,
mutation ``success``) live in :mod:`linear_mcp.linear.client`.
"""

import math
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _lenient_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _lenient_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return 0


def _lenient_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return 0.0
    if isinstance(value, float) and math.isfinite(value):
        return value
    return 0.0


def _object_or_none(value: Any) -> Optional[dict]:
    return value if isinstance(value, dict) else None


def _connection_nodes(value: Any) -> list:
    """Flatten ``{nodes: [...]}`` (or an already-flat list) into a list of objects."""
    if isinstance(value, dict):
        value = value.get("nodes")
    if not isinstance(value, list):
        return []
    return [node for node in value if isinstance(node, (dict, BaseModel))]


LenientStr = Annotated[str, BeforeValidator(_lenient_str)]
LenientInt = Annotated[int, BeforeValidator(_lenient_int)]
LenientFloat = Annotated[float, BeforeValidator(_lenient_float)]


class LinearRecord(BaseModel):
    """Base for all records: immutable, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    def to_dict(self) -> dict:
        """JSON-ready dict using Linear's field names, unset associations dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class User(LinearRecord):
    id: LenientStr = ""
    name: LenientStr = ""
    email: LenientStr = ""


class Team(LinearRecord):
    id: LenientStr = ""
    name: LenientStr = ""
    key: LenientStr = ""


class WorkflowState(LinearRecord):
    id: LenientStr = ""
    name: LenientStr = ""


class ProjectStatus(LinearRecord):
    id: LenientStr = ""
    name: LenientStr = ""


class Issue(LinearRecord):
    """A Linear issue.

    ``parent`` and ``children`` form a tree as reported by the server; the
    client does not check it for cycles.
    """

    id: LenientStr = ""
    identifier: LenientStr = ""
    title: LenientStr = ""
    description: LenientStr = ""
    state: Annotated[Optional[WorkflowState], BeforeValidator(_object_or_none)] = None
    assignee: Annotated[Optional[User], BeforeValidator(_object_or_none)] = None
    project: Annotated[Optional["Project"], BeforeValidator(_object_or_none)] = None
    parent: Annotated[Optional["Issue"], BeforeValidator(_object_or_none)] = None
    children: Annotated[List["Issue"], BeforeValidator(_connection_nodes)] = Field(
        default_factory=list
    )
    priority: LenientInt = 0
    created_at: LenientStr = ""
    updated_at: LenientStr = ""
    url: LenientStr = ""
    branch_name: LenientStr = ""


class Project(LinearRecord):
    """A Linear project.

    ``state`` is free-form: planned, started, paused, completed or canceled.
    """

    id: LenientStr = ""
    name: LenientStr = ""
    description: LenientStr = ""
    icon: LenientStr = ""
    color: LenientStr = ""
    state: LenientStr = ""
    status: Annotated[Optional[ProjectStatus], BeforeValidator(_object_or_none)] = None
    lead: Annotated[Optional[User], BeforeValidator(_object_or_none)] = None
    teams: Annotated[List[Team], BeforeValidator(_connection_nodes)] = Field(
        default_factory=list
    )
    issues: Annotated[List[Issue], BeforeValidator(_connection_nodes)] = Field(
        default_factory=list
    )
    created_at: LenientStr = ""
    updated_at: LenientStr = ""
    started_at: LenientStr = ""
    target_date: LenientStr = ""
    sort_order: LenientFloat = 0.0
    url: LenientStr = ""


class ProjectWithIssues(LinearRecord):
    """Result of the project-issues fetch: the project id, status and its issues."""

    id: LenientStr = ""
    status: Annotated[Optional[ProjectStatus], BeforeValidator(_object_or_none)] = None
    issues: Annotated[List[Issue], BeforeValidator(_connection_nodes)] = Field(
        default_factory=list
    )


Issue.model_rebuild()
Project.model_rebuild()
ProjectWithIssues.model_rebuild()


# ---------------------------------------------------------------------------
# Mutation inputs
# ---------------------------------------------------------------------------


class CreateIssueInput(BaseModel):
    team_id: str
    title: str
    description: str = ""
    priority: int = 0
    state_id: str = ""
    assignee_id: str = ""
    project_id: str = ""
    parent_id: str = ""

    def to_variables(self) -> dict:
        data = {
            "teamId": self.team_id,
            "title": self.title,
            "description": self.description,
        }
        if self.priority > 0:
            data["priority"] = self.priority
        for key, value in (
            ("stateId", self.state_id),
            ("assigneeId", self.assignee_id),
            ("projectId", self.project_id),
            ("parentId", self.parent_id),
        ):
            if value:
                data[key] = value
        return data


class UpdateIssueInput(BaseModel):
    """Only fields that are not ``None`` are sent."""

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[int] = None
    state_id: Optional[str] = None
    assignee_id: Optional[str] = None
    project_id: Optional[str] = None
    parent_id: Optional[str] = None

    def to_variables(self) -> dict:
        data = {}
        for key, value in (
            ("title", self.title),
            ("description", self.description),
            ("priority", self.priority),
            ("stateId", self.state_id),
            ("assigneeId", self.assignee_id),
            ("projectId", self.project_id),
            ("parentId", self.parent_id),
        ):
            if value is not None:
                data[key] = value
        return data


class CreateProjectInput(BaseModel):
    name: str
    description: str = ""
    icon: str = ""
    color: str = ""
    state: str = ""
    team_ids: List[str] = Field(default_factory=list)
    lead_id: str = ""
    start_date: str = ""
    target_date: str = ""

    def to_variables(self) -> dict:
        data: dict = {
            "name": self.name,
            "description": self.description,
        }
        for key, value in (
            ("icon", self.icon),
            ("color", self.color),
            ("state", self.state),
        ):
            if value:
                data[key] = value
        if self.team_ids:
            data["teamIds"] = list(self.team_ids)
        for key, value in (
            ("leadId", self.lead_id),
            ("startDate", self.start_date),
            ("targetDate", self.target_date),
        ):
            if value:
                data[key] = value
        return data


class UpdateProjectInput(BaseModel):
    """Only fields that are not ``None`` are sent; ``team_ids`` only when non-empty."""

    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    state: Optional[str] = None
    team_ids: List[str] = Field(default_factory=list)
    lead_id: Optional[str] = None
    start_date: Optional[str] = None
    target_date: Optional[str] = None

    def to_variables(self) -> dict:
        data: dict = {}
        for key, value in (
            ("name", self.name),
            ("description", self.description),
            ("icon", self.icon),
            ("color", self.color),
            ("state", self.state),
        ):
            if value is not None:
                data[key] = value
        if self.team_ids:
            data["teamIds"] = list(self.team_ids)
        for key, value in (
            ("leadId", self.lead_id),
            ("startDate", self.start_date),
            ("targetDate", self.target_date),
        ):
            if value is not None:
                data[key] = value
        return data

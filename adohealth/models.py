"""Pydantic models for Azure DevOps pull request data and report rows."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

NOT_AVAILABLE = "N/A"
UNKNOWN_NAME = "Unknown"


class PullRequestStatus(str, Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    ABANDONED = "Abandoned"
    UNKNOWN = "Unknown"


class CommentType(str, Enum):
    TEXT = "Text"
    SYSTEM = "System"
    CODE_CHANGE = "CodeChange"
    UNKNOWN = "Unknown"


class IdentityRef(BaseModel):
    """Identity of a PR author or commenter."""
    display_name: str | None = None
    unique_name: str | None = None
    id: str | None = None


class PullRequest(BaseModel):
    """Pull request data."""
    pr_id: int | None
    title: str = ""
    created_by: IdentityRef = Field(default_factory=IdentityRef)
    creation_date: datetime | None = None
    closed_date: datetime | None = None
    status: PullRequestStatus = PullRequestStatus.UNKNOWN
    source_ref: str | None = None
    target_ref: str | None = None
    is_draft: bool = False


class Comment(BaseModel):
    """Single comment inside a thread."""
    comment_id: int | None = None
    author: IdentityRef = Field(default_factory=IdentityRef)
    published_date: datetime | None = None
    comment_type: CommentType = CommentType.UNKNOWN
    is_deleted: bool = False


class CommentThread(BaseModel):
    """Discussion thread attached to a PR."""
    thread_id: int | None = None
    comments: list[Comment] = Field(default_factory=list)


class ReviewerResponse(BaseModel):
    """Earliest qualifying human response on a PR."""
    reviewer_name: str
    response_hours: str


class HealthReportRow(BaseModel):
    """One exported row. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    pr_id: int
    author: str
    created_date: date
    month: str
    status: str
    human_comment_count: int = Field(ge=0)
    hours_to_merge: str
    lead_reviewer: str
    reviewer_response_hours: str

    @model_validator(mode="after")
    def _reviewer_fields_set_together(self) -> "HealthReportRow":
        if (self.lead_reviewer == NOT_AVAILABLE) != (self.reviewer_response_hours == NOT_AVAILABLE):
            raise ValueError(
                "lead_reviewer and reviewer_response_hours must both be set or both be N/A"
            )
        return self

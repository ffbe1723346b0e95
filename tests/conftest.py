"""Shared test fixtures."""

from datetime import UTC, datetime

import pytest

from adohealth.models import (
    Comment,
    CommentThread,
    CommentType,
    IdentityRef,
    PullRequest,
    PullRequestStatus,
)


def ts(value: str) -> datetime:
    """Parse an ISO timestamp as UTC."""
    return datetime.fromisoformat(value.replace("Z", "+00:00")).astimezone(UTC)


def _identity(name: str | None) -> IdentityRef:
    if name is None:
        return IdentityRef()
    return IdentityRef(display_name=name, unique_name=f"{name}@example.com")


def _make_pr(
    author: str | None = "alice",
    created: str | None = "2024-01-01T00:00:00Z",
    closed: str | None = None,
    status: PullRequestStatus = PullRequestStatus.ACTIVE,
    pr_id: int | None = 101,
) -> PullRequest:
    return PullRequest(
        pr_id=pr_id,
        title="Add feature",
        created_by=_identity(author),
        creation_date=ts(created) if created else None,
        closed_date=ts(closed) if closed else None,
        status=status,
    )


def _make_comment(
    author: str | None = "bob",
    published: str | None = "2024-01-01T03:00:00Z",
    comment_type: CommentType = CommentType.TEXT,
    deleted: bool = False,
) -> Comment:
    return Comment(
        comment_id=1,
        author=_identity(author),
        published_date=ts(published) if published else None,
        comment_type=comment_type,
        is_deleted=deleted,
    )


def _make_thread(*comments: Comment) -> CommentThread:
    return CommentThread(thread_id=1, comments=list(comments))


@pytest.fixture
def make_pr():
    return _make_pr


@pytest.fixture
def make_comment():
    return _make_comment


@pytest.fixture
def make_thread():
    return _make_thread


# Raw Azure DevOps payloads
def _identity_data(name: str) -> dict:
    return {"displayName": name, "uniqueName": f"{name}@example.com", "id": f"id-{name}"}


def _make_pr_data(**overrides) -> dict:
    base = {
        "pullRequestId": 101,
        "title": "Add feature",
        "createdBy": _identity_data("alice"),
        "creationDate": "2024-01-01T00:00:00Z",
        "closedDate": "2024-01-02T00:00:00Z",
        "status": "completed",
        "sourceRefName": "refs/heads/feature",
        "targetRefName": "refs/heads/main",
        "isDraft": False,
    }
    base.update(overrides)
    return base


def _make_comment_data(**overrides) -> dict:
    base = {
        "id": 1,
        "author": _identity_data("bob"),
        "publishedDate": "2024-01-01T03:00:00Z",
        "commentType": "text",
        "isDeleted": False,
    }
    base.update(overrides)
    return base


def _make_thread_data(*comments: dict, thread_id: int = 1) -> dict:
    return {"id": thread_id, "comments": list(comments)}


@pytest.fixture
def make_pr_data():
    return _make_pr_data


@pytest.fixture
def make_comment_data():
    return _make_comment_data


@pytest.fixture
def make_thread_data():
    return _make_thread_data

"""Comment classification: human comment counts and first reviewer response.

Only comments are considered. Votes carry no timestamp in the pull request
payload, so a reviewer who approves without commenting never shows up as
lead reviewer.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .aggregator import hours_between
from .models import (
    UNKNOWN_NAME,
    Comment,
    CommentThread,
    CommentType,
    PullRequest,
    ReviewerResponse,
)


def iter_comments(threads: Iterable[CommentThread]) -> Iterator[Comment]:
    """Yield every comment across all threads in thread order."""
    for thread in threads:
        yield from thread.comments


def is_human_comment(comment: Comment) -> bool:
    """A comment counts as human if it is not system generated and not deleted."""
    return comment.comment_type != CommentType.SYSTEM and not comment.is_deleted


def count_human_comments(threads: Iterable[CommentThread]) -> int:
    """Count non-system, non-deleted comments. Timestamps are ignored."""
    return sum(1 for comment in iter_comments(threads) if is_human_comment(comment))


def _is_response_candidate(comment: Comment, pr_author: str | None) -> bool:
    return (
        comment.author.unique_name != pr_author
        and comment.published_date is not None
        and comment.comment_type != CommentType.SYSTEM
    )


def _response_sort_key(comment: Comment) -> tuple:
    # Equal timestamps resolve by author name so the result is independent
    # of thread order
    return (
        comment.published_date,
        comment.author.display_name or "",
        comment.author.unique_name or "",
    )


def find_first_human_response(
    pr: PullRequest, threads: Iterable[CommentThread]
) -> ReviewerResponse | None:
    """Find the earliest comment by someone other than the PR author.

    System comments and comments without a published date are skipped.
    Deleted comments still count as a response. Returns None when the PR has
    no creation date or nobody else commented.
    """
    if pr.creation_date is None:
        return None

    pr_author = pr.created_by.unique_name
    candidates = [
        comment for comment in iter_comments(threads)
        if _is_response_candidate(comment, pr_author)
    ]
    if not candidates:
        return None

    first = min(candidates, key=_response_sort_key)
    return ReviewerResponse(
        reviewer_name=first.author.display_name or UNKNOWN_NAME,
        response_hours=hours_between(pr.creation_date, first.published_date),
    )

"""Comment thread data extractors."""

from ..models import Comment, CommentThread, CommentType
from .prs import extract_identity, parse_datetime

COMMENT_TYPE_NAMES = {
    "text": CommentType.TEXT,
    "system": CommentType.SYSTEM,
    "codechange": CommentType.CODE_CHANGE,
}
COMMENT_TYPE_CODES = {
    1: CommentType.TEXT,
    2: CommentType.CODE_CHANGE,
    3: CommentType.SYSTEM,
}


def parse_comment_type(value: str | int | None) -> CommentType:
    """Map a REST comment type string or numeric code to a comment type."""
    if isinstance(value, bool):
        return CommentType.UNKNOWN
    if isinstance(value, int):
        return COMMENT_TYPE_CODES.get(value, CommentType.UNKNOWN)
    if isinstance(value, str):
        return COMMENT_TYPE_NAMES.get(value.strip().lower(), CommentType.UNKNOWN)
    return CommentType.UNKNOWN


def extract_comment(comment_data: dict) -> Comment:
    """Extract a single comment from Azure DevOps API response."""
    return Comment(
        comment_id=comment_data.get("id"),
        author=extract_identity(comment_data.get("author")),
        published_date=parse_datetime(comment_data.get("publishedDate")),
        comment_type=parse_comment_type(comment_data.get("commentType")),
        is_deleted=bool(comment_data.get("isDeleted", False)),
    )


def extract_thread(thread_data: dict) -> CommentThread:
    """Extract a comment thread, keeping comments in API order."""
    return CommentThread(
        thread_id=thread_data.get("id"),
        comments=[extract_comment(c) for c in thread_data.get("comments") or []],
    )

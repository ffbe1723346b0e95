"""Pull request data extractor."""

from datetime import UTC, datetime

from ..models import IdentityRef, PullRequest, PullRequestStatus

# REST payloads use lower camel case strings, the typed SDKs use numeric codes
STATUS_NAMES = {
    "active": PullRequestStatus.ACTIVE,
    "completed": PullRequestStatus.COMPLETED,
    "abandoned": PullRequestStatus.ABANDONED,
}
STATUS_CODES = {
    1: PullRequestStatus.ACTIVE,
    2: PullRequestStatus.ABANDONED,
    3: PullRequestStatus.COMPLETED,
}


def parse_datetime(dt_str: str | None) -> datetime | None:
    """Parse ISO datetime string, returns None if input is empty.

    Naive values are taken as UTC.
    """
    if not dt_str:
        return None
    parsed = datetime.fromisoformat(dt_str.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_status(value: str | int | None) -> PullRequestStatus:
    """Map a REST status string or numeric code to a status.

    Unrecognized values (including notSet and all) map to Unknown.
    """
    if isinstance(value, bool):
        return PullRequestStatus.UNKNOWN
    if isinstance(value, int):
        return STATUS_CODES.get(value, PullRequestStatus.UNKNOWN)
    if isinstance(value, str):
        return STATUS_NAMES.get(value.strip().lower(), PullRequestStatus.UNKNOWN)
    return PullRequestStatus.UNKNOWN


def extract_identity(identity_data: dict | None) -> IdentityRef:
    """Extract an identity reference, tolerating missing fields."""
    identity_data = identity_data or {}
    return IdentityRef(
        display_name=identity_data.get("displayName"),
        unique_name=identity_data.get("uniqueName"),
        id=identity_data.get("id"),
    )


def extract_pr(pr_data: dict) -> PullRequest:
    """Extract PR data from Azure DevOps API response."""
    return PullRequest(
        pr_id=pr_data.get("pullRequestId"),
        title=pr_data.get("title") or "",
        created_by=extract_identity(pr_data.get("createdBy")),
        creation_date=parse_datetime(pr_data.get("creationDate")),
        closed_date=parse_datetime(pr_data.get("closedDate")),
        status=parse_status(pr_data.get("status")),
        source_ref=pr_data.get("sourceRefName"),
        target_ref=pr_data.get("targetRefName"),
        is_draft=bool(pr_data.get("isDraft")),
    )

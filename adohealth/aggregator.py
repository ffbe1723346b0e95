"""Metric aggregation: hours to merge and report row assembly."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from .models import (
    NOT_AVAILABLE,
    UNKNOWN_NAME,
    HealthReportRow,
    PullRequest,
    PullRequestStatus,
    ReviewerResponse,
)

logger = logging.getLogger(__name__)


def hours_between(start: datetime, end: datetime) -> str:
    """Elapsed hours from start to end with two decimals (may be negative)."""
    return f"{(end - start).total_seconds() / 3600:.2f}"


def month_label(dt: datetime) -> str:
    """Full month name and four-digit year, e.g. "January 2023"."""
    return dt.astimezone(UTC).strftime("%B %Y")


def calculate_hours_to_merge(pr: PullRequest) -> str:
    """Hours from creation to close for completed PRs, "N/A" otherwise.

    A close before creation (clock skew) is reported as the negative
    difference.
    """
    if (
        pr.status != PullRequestStatus.COMPLETED
        or pr.creation_date is None
        or pr.closed_date is None
    ):
        return NOT_AVAILABLE

    if pr.closed_date < pr.creation_date:
        logger.warning(
            f"PR {pr.pr_id} closed before it was created "
            f"({pr.closed_date.isoformat()} < {pr.creation_date.isoformat()})"
        )
    return hours_between(pr.creation_date, pr.closed_date)


def build_row(
    pr: PullRequest,
    human_comment_count: int,
    response: ReviewerResponse | None,
    hours_to_merge: str,
    now: datetime | None = None,
) -> HealthReportRow:
    """Assemble one report row from already computed metrics.

    ``now`` stands in for a missing creation date, which only happens for
    synthetic data.
    """
    created = pr.creation_date or now or datetime.now(UTC)
    created = created.astimezone(UTC)

    if response is None:
        lead_reviewer, response_hours = NOT_AVAILABLE, NOT_AVAILABLE
    else:
        lead_reviewer, response_hours = response.reviewer_name, response.response_hours

    return HealthReportRow(
        pr_id=pr.pr_id,
        author=pr.created_by.display_name or UNKNOWN_NAME,
        created_date=created.date(),
        month=month_label(created),
        status=pr.status.value,
        human_comment_count=human_comment_count,
        hours_to_merge=hours_to_merge,
        lead_reviewer=lead_reviewer,
        reviewer_response_hours=response_hours,
    )

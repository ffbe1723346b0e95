"""Synthetic report rows for demos and dashboard prototyping."""

from __future__ import annotations

import random
from datetime import UTC, datetime

from .aggregator import month_label
from .models import NOT_AVAILABLE, HealthReportRow, PullRequestStatus

AUTHORS = ["Alice", "Bob", "Charlie", "David", "Eve"]
REVIEWERS = ["Frank", "Grace", "Heidi", "Ivan", "Judy"]
STATUSES = [PullRequestStatus.COMPLETED, PullRequestStatus.ACTIVE, PullRequestStatus.ABANDONED]

FIRST_PR_ID = 1001
DEFAULT_START = datetime(2023, 1, 1, tzinfo=UTC)
REVIEWER_PROBABILITY = 0.9
MAX_HOURS_TO_MERGE = 100
MAX_RESPONSE_HOURS = 48
MAX_HUMAN_COMMENTS = 15


def generate_mock_rows(
    count: int = 50,
    seed: int | None = None,
    start: datetime = DEFAULT_START,
    now: datetime | None = None,
) -> list[HealthReportRow]:
    """Generate ``count`` random rows created between ``start`` and ``now``.

    Hours to merge is only set for Completed rows, and lead reviewer and
    response hours are set together.
    """
    rng = random.Random(seed)
    now = now or datetime.now(UTC)
    span = (now - start).total_seconds()

    rows = []
    for i in range(count):
        created = datetime.fromtimestamp(start.timestamp() + rng.random() * span, tz=UTC)
        status = rng.choice(STATUSES)

        hours_to_merge = NOT_AVAILABLE
        if status == PullRequestStatus.COMPLETED:
            hours_to_merge = f"{rng.random() * MAX_HOURS_TO_MERGE:.2f}"

        lead_reviewer, response_hours = NOT_AVAILABLE, NOT_AVAILABLE
        if rng.random() < REVIEWER_PROBABILITY:
            response_hours = f"{rng.random() * MAX_RESPONSE_HOURS:.2f}"
            lead_reviewer = rng.choice(REVIEWERS)

        rows.append(
            HealthReportRow(
                pr_id=FIRST_PR_ID + i,
                author=rng.choice(AUTHORS),
                created_date=created.date(),
                month=month_label(created),
                status=status.value,
                human_comment_count=rng.randint(0, MAX_HUMAN_COMMENTS),
                hours_to_merge=hours_to_merge,
                lead_reviewer=lead_reviewer,
                reviewer_response_hours=response_hours,
            )
        )
    return rows

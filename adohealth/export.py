"""Export report rows to CSV or Parquet."""

from __future__ import annotations

import csv
import logging
import os
from collections.abc import Iterable
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from .models import HealthReportRow

logger = logging.getLogger(__name__)

# Column header -> row attribute, in export order
COLUMNS = {
    "PR_ID": "pr_id",
    "Author": "author",
    "Created_Date": "created_date",
    "Month": "month",
    "Status": "status",
    "Human_Comment_Count": "human_comment_count",
    "Hours_to_Merge": "hours_to_merge",
    "Lead_Reviewer": "lead_reviewer",
    "Reviewer_Response_Hours": "reviewer_response_hours",
}

METRIC_DESCRIPTIONS = {
    "PR_ID": "Pull request id.",
    "Author": "Display name of the PR creator.",
    "Created_Date": "UTC calendar date the PR was created (YYYY-MM-DD).",
    "Month": "Month and year of creation, for trend grouping.",
    "Status": "Active, Completed, Abandoned or Unknown.",
    "Human_Comment_Count": "Comments that are not system generated and not deleted.",
    "Hours_to_Merge": "Hours from creation to completion. N/A unless the PR is Completed.",
    "Lead_Reviewer": (
        "Author of the earliest non-system comment by someone other than the PR creator. "
        "Reviewers who only vote without commenting are not visible here."
    ),
    "Reviewer_Response_Hours": (
        "Hours from PR creation to the lead reviewer's first comment. "
        "N/A together with Lead_Reviewer; votes alone do not count as a response."
    ),
}

SCHEMA = pa.schema([
    ("PR_ID", pa.int64()),
    ("Author", pa.string()),
    ("Created_Date", pa.string()),
    ("Month", pa.string()),
    ("Status", pa.string()),
    ("Human_Comment_Count", pa.int64()),
    ("Hours_to_Merge", pa.string()),
    ("Lead_Reviewer", pa.string()),
    ("Reviewer_Response_Hours", pa.string()),
])


def to_record(row: HealthReportRow) -> dict:
    """Flatten a row into export columns."""
    record = {header: getattr(row, attr) for header, attr in COLUMNS.items()}
    record["Created_Date"] = row.created_date.isoformat()
    return record


def _write_atomic(path: Path, write) -> None:
    """Write to a temp file first, then rename over the target."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_file = path.with_name(f"{path.name}.tmp")
    try:
        write(temp_file)
        os.replace(temp_file, path)
    finally:
        if temp_file.exists():
            temp_file.unlink()


def write_csv(rows: Iterable[HealthReportRow], path: Path | str) -> int:
    """Write rows as CSV with the fixed header. Returns the number of rows."""
    records = [to_record(row) for row in rows]

    def write(target: Path) -> None:
        with open(target, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=list(COLUMNS))
            writer.writeheader()
            writer.writerows(records)

    _write_atomic(Path(path), write)
    logger.info(f"Wrote {len(records)} rows to {path}")
    return len(records)


def write_parquet(rows: Iterable[HealthReportRow], path: Path | str) -> int:
    """Write rows as a Parquet table. Returns the number of rows."""
    records = [to_record(row) for row in rows]
    table = pa.Table.from_pylist(records, schema=SCHEMA)
    _write_atomic(Path(path), lambda target: pq.write_table(table, target))
    logger.info(f"Wrote {len(records)} rows to {path}")
    return len(records)


WRITERS = {
    "csv": write_csv,
    "parquet": write_parquet,
}


def write_rows(rows: Iterable[HealthReportRow], path: Path | str, fmt: str = "csv") -> int:
    """Write rows in the requested format."""
    try:
        writer = WRITERS[fmt]
    except KeyError:
        raise ValueError(f"Unsupported export format: {fmt}") from None
    return writer(rows, path)

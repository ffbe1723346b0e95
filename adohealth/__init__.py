"""Pull request health metrics for Azure DevOps repositories.

Per PR this computes:
- Human comment count (system and deleted comments excluded)
- Hours to merge for completed PRs
- Lead reviewer and their first-response hours, from comments only
"""

from .aggregator import build_row, calculate_hours_to_merge
from .classifier import count_human_comments, find_first_human_response
from .models import HealthReportRow

__all__ = [
    # Classifier
    "count_human_comments",
    "find_first_human_response",
    # Aggregator
    "calculate_hours_to_merge",
    "build_row",
    "HealthReportRow",
]

"""Tests for mock report data."""

from datetime import UTC, datetime

from adohealth.mock_data import AUTHORS, FIRST_PR_ID, REVIEWERS, generate_mock_rows

NOW = datetime(2024, 6, 1, tzinfo=UTC)


class TestGenerateMockRows:
    def test_count_and_ids(self):
        rows = generate_mock_rows(count=10, seed=1, now=NOW)
        assert [row.pr_id for row in rows] == list(range(FIRST_PR_ID, FIRST_PR_ID + 10))

    def test_seed_is_reproducible(self):
        assert generate_mock_rows(count=20, seed=7, now=NOW) == generate_mock_rows(count=20, seed=7, now=NOW)

    def test_rows_follow_report_rules(self):
        for row in generate_mock_rows(count=200, seed=3, now=NOW):
            assert row.author in AUTHORS
            assert row.status in ("Completed", "Active", "Abandoned")
            assert 0 <= row.human_comment_count <= 15
            assert datetime(2023, 1, 1).date() <= row.created_date <= NOW.date()
            assert row.month == row.created_date.strftime("%B %Y")
            if row.status != "Completed":
                assert row.hours_to_merge == "N/A"
            else:
                assert row.hours_to_merge != "N/A"
            if row.lead_reviewer == "N/A":
                assert row.reviewer_response_hours == "N/A"
            else:
                assert row.lead_reviewer in REVIEWERS
                assert row.reviewer_response_hours != "N/A"

    def test_zero_rows(self):
        assert generate_mock_rows(count=0) == []

"""Tests for data extractors."""

from datetime import UTC, datetime

import pytest

from adohealth.extractors.prs import extract_identity, extract_pr, parse_datetime, parse_status
from adohealth.extractors.threads import extract_comment, extract_thread, parse_comment_type
from adohealth.models import CommentType, PullRequestStatus


class TestParseDatetime:
    def test_zulu(self):
        assert parse_datetime("2024-01-01T10:00:00Z") == datetime(2024, 1, 1, 10, tzinfo=UTC)

    def test_seven_digit_fraction(self):
        """Azure DevOps returns 100ns precision."""
        parsed = parse_datetime("2024-01-01T10:00:00.1234567Z")
        assert parsed.replace(microsecond=0) == datetime(2024, 1, 1, 10, tzinfo=UTC)

    def test_naive_is_utc(self):
        assert parse_datetime("2024-01-01T10:00:00").tzinfo == UTC

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value):
        assert parse_datetime(value) is None


class TestParseStatus:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("active", PullRequestStatus.ACTIVE),
            ("completed", PullRequestStatus.COMPLETED),
            ("abandoned", PullRequestStatus.ABANDONED),
            ("Completed", PullRequestStatus.COMPLETED),
            (1, PullRequestStatus.ACTIVE),
            (2, PullRequestStatus.ABANDONED),
            (3, PullRequestStatus.COMPLETED),
            # Unrecognized values never raise
            ("notSet", PullRequestStatus.UNKNOWN),
            ("all", PullRequestStatus.UNKNOWN),
            (0, PullRequestStatus.UNKNOWN),
            (4, PullRequestStatus.UNKNOWN),
            (99, PullRequestStatus.UNKNOWN),
            (None, PullRequestStatus.UNKNOWN),
            (True, PullRequestStatus.UNKNOWN),
        ],
    )
    def test_parse_status(self, value, expected):
        assert parse_status(value) == expected


class TestParseCommentType:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("text", CommentType.TEXT),
            ("system", CommentType.SYSTEM),
            ("codeChange", CommentType.CODE_CHANGE),
            ("unknown", CommentType.UNKNOWN),
            (1, CommentType.TEXT),
            (2, CommentType.CODE_CHANGE),
            (3, CommentType.SYSTEM),
            (0, CommentType.UNKNOWN),
            (None, CommentType.UNKNOWN),
        ],
    )
    def test_parse_comment_type(self, value, expected):
        assert parse_comment_type(value) == expected


class TestExtractPR:
    def test_basic_extraction(self, make_pr_data):
        pr = extract_pr(make_pr_data())
        assert pr.pr_id == 101
        assert pr.title == "Add feature"
        assert pr.created_by.display_name == "alice"
        assert pr.created_by.unique_name == "alice@example.com"
        assert pr.creation_date == datetime(2024, 1, 1, tzinfo=UTC)
        assert pr.closed_date == datetime(2024, 1, 2, tzinfo=UTC)
        assert pr.status == PullRequestStatus.COMPLETED
        assert pr.target_ref == "refs/heads/main"

    def test_active_pr_without_closed_date(self, make_pr_data):
        data = make_pr_data(status="active")
        del data["closedDate"]
        pr = extract_pr(data)
        assert pr.status == PullRequestStatus.ACTIVE
        assert pr.closed_date is None

    def test_missing_id(self, make_pr_data):
        data = make_pr_data()
        del data["pullRequestId"]
        assert extract_pr(data).pr_id is None

    def test_missing_creator(self, make_pr_data):
        data = make_pr_data()
        del data["createdBy"]
        pr = extract_pr(data)
        assert pr.created_by.display_name is None

    def test_null_draft_flag(self, make_pr_data):
        assert extract_pr(make_pr_data(isDraft=None)).is_draft is False


class TestExtractIdentity:
    def test_none(self):
        identity = extract_identity(None)
        assert identity.display_name is None
        assert identity.unique_name is None


class TestExtractThread:
    def test_comment_extraction(self, make_comment_data):
        comment = extract_comment(make_comment_data())
        assert comment.comment_id == 1
        assert comment.author.display_name == "bob"
        assert comment.published_date == datetime(2024, 1, 1, 3, tzinfo=UTC)
        assert comment.comment_type == CommentType.TEXT
        assert comment.is_deleted is False

    def test_system_comment(self, make_comment_data):
        comment = extract_comment(make_comment_data(commentType="system"))
        assert comment.comment_type == CommentType.SYSTEM

    def test_missing_published_date(self, make_comment_data):
        data = make_comment_data()
        del data["publishedDate"]
        assert extract_comment(data).published_date is None

    def test_thread_keeps_order(self, make_thread_data, make_comment_data):
        thread = extract_thread(
            make_thread_data(
                make_comment_data(id=1),
                make_comment_data(id=2, isDeleted=True),
                thread_id=7,
            )
        )
        assert thread.thread_id == 7
        assert [c.comment_id for c in thread.comments] == [1, 2]
        assert thread.comments[1].is_deleted is True

    def test_thread_without_comments(self):
        assert extract_thread({"id": 3}).comments == []
        assert extract_thread({"id": 3, "comments": None}).comments == []

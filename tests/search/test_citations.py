"""Tests for citations and time grouping."""

from datetime import datetime, timedelta

from collabbot.db.database_models import MessageDO
from collabbot.search import build_citation, citations_for, group_messages_by_time
from collabbot.search.citations import format_grouped


NOW = datetime(2024, 3, 7, 15, 0)


def _message(content="hello", activity_id="act-1", name="Alice", age=timedelta(hours=1)):
    return MessageDO(
        conversation_id="c1", role="user", content=content, name=name,
        timestamp=NOW - age, activity_id=activity_id
    )


class TestBuildCitation:
    """SUT: build_citation"""

    def test_fields(self):
        """Name, abstract and keywords describe the message."""
        citation = build_citation(_message(), "19:chat@thread.v2")
        assert citation.name == "Message from Alice"
        assert citation.abstract == 'Mar 7, 14:00: "hello"'
        assert citation.keywords == ["Alice"]
        assert citation.url.startswith("https://teams.microsoft.com/l/message/19%3Achat%40thread.v2/act-1?context=")

    def test_truncates_long_content(self):
        """Abstracts are cut at 120 characters."""
        citation = build_citation(_message(content="x" * 200), "c1")
        assert citation.abstract.endswith('x' * 120 + '..."')

    def test_without_activity_id(self):
        """Messages without a platform id cannot be cited."""
        assert build_citation(_message(activity_id=None), "c1") is None

    def test_custom_base(self):
        """The deep link base is configurable."""
        citation = build_citation(_message(), "c1", deep_link_base="https://chat.example.com/m/")
        assert citation.url.startswith("https://chat.example.com/m/c1/act-1")


def test_citations_for_limit():
    """Only citable messages count toward the limit."""
    messages = [_message(activity_id=None)] + [_message(activity_id=f"a{i}") for i in range(6)]
    citations = citations_for(messages, "c1", limit=3)
    assert [c.url.split("/")[-1].split("?")[0] for c in citations] == ["a0", "a1", "a2"]


class TestGroupMessagesByTime:
    """SUT: group_messages_by_time"""

    def test_buckets(self):
        """Messages land in the bucket for their age."""
        messages = [
            _message("today", age=timedelta(hours=2)),
            _message("yesterday", age=timedelta(hours=30)),
            _message("week", age=timedelta(days=4)),
            _message("month", age=timedelta(days=20)),
            _message("older", age=timedelta(days=90)),
        ]
        groups = group_messages_by_time(messages, NOW)
        assert list(groups) == ["Today", "Yesterday", "This week", "This month", "Older"]
        assert [m.content for m in groups["Yesterday"]] == ["yesterday"]

    def test_skips_empty_groups(self):
        """Empty groups are left out."""
        groups = group_messages_by_time([_message(age=timedelta(days=3))], NOW)
        assert list(groups) == ["This week"]

    def test_format_grouped(self):
        """Each group shows three previews and a remainder count."""
        messages = [_message(f"m{i}", age=timedelta(minutes=i)) for i in range(5)]
        listing = format_grouped(group_messages_by_time(messages, NOW))
        assert listing.splitlines()[0] == "Today (5):"
        assert listing.splitlines()[-1] == "... and 2 more"

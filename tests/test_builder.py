"""Tests for grouping raw messages into threads."""

from datetime import datetime

import pytest

from threadbox.builder import build_threads
from threadbox.models import FALLBACK_EMAIL, Message

from tests.helpers import at, user_msg


class TestBuildThreads:
    """Test cases for build_threads."""

    def test_groups_by_correspondent_and_discards_missing_id(self):
        """Five messages, three senders (one null id) give exactly two threads."""
        messages = [
            user_msg(1, 7, 3),
            user_msg(2, 8, 1),
            user_msg(3, None, 2),
            user_msg(4, 7, 0),
            user_msg(5, 8, 4, is_read=True),
        ]

        result = build_threads(messages)

        assert set(result.threads) == {7, 8}
        assert result.discarded == 1
        # The null-correspondent message is unread but not counted
        assert result.unread == 3
        assert sum(t.unread_count for t in result.threads.values()) == 3

    def test_messages_sorted_ascending(self):
        messages = [user_msg(i, 7, m) for i, m in enumerate([30, 5, 20, 0, 10])]

        thread = build_threads(messages).threads[7]

        stamps = [m.timestamp for m in thread.messages]
        assert stamps == sorted(stamps)
        assert thread.last_activity == at(30)

    def test_anchor_is_chronologically_last_message(self):
        messages = [user_msg(11, 7, 20), user_msg(12, 7, 5), user_msg(13, 7, 10)]

        thread = build_threads(messages).threads[7]

        assert thread.anchor_id == 11

    def test_correspondent_cached_from_first_message(self):
        messages = [
            user_msg(1, 7, 10, name="Alice", email="alice@example.com"),
            user_msg(2, 7, 0, name="Alice Renamed", email="other@example.com"),
        ]

        thread = build_threads(messages).threads[7]

        assert thread.correspondent.name == "Alice"
        assert thread.correspondent.email == "alice@example.com"

    def test_fallback_sender_metadata(self):
        thread = build_threads([user_msg(1, 42, 0)]).threads[42]

        assert thread.correspondent.name == "User 42"
        assert thread.correspondent.email == FALLBACK_EMAIL

    def test_missing_timestamp_uses_processing_time(self):
        now = at(60)
        messages = [user_msg(1, 7, None), user_msg(2, 7, 10)]

        thread = build_threads(messages, now=now).threads[7]

        assert [m.id for m in thread.messages] == [2, 1]
        assert thread.messages[-1].timestamp == now
        assert thread.messages[-1].timestamp_inferred is True
        assert thread.messages[0].timestamp_inferred is False

    def test_missing_timestamp_reject(self):
        messages = [user_msg(1, 7, None), user_msg(2, 7, 10), user_msg(3, 9, None)]

        result = build_threads(messages, missing_timestamp="reject")

        assert set(result.threads) == {7}
        assert [m.id for m in result.threads[7].messages] == [2]
        assert result.discarded == 2

    def test_unknown_missing_timestamp_policy(self):
        with pytest.raises(ValueError):
            build_threads([], missing_timestamp="guess")

    def test_empty_input(self):
        result = build_threads([])

        assert result.threads == {}
        assert result.unread == 0

    def test_naive_timestamp_with_missing_timestamp(self):
        """Naive and stamped timestamps sort together as UTC."""
        messages = [
            Message(id=1, content="naive", timestamp=datetime(2025, 3, 1, 9, 0), correspondent_id=7),
            Message(id=2, content="no time", correspondent_id=7),
        ]

        thread = build_threads(messages, now=at(60)).threads[7]

        assert [m.id for m in thread.messages] == [1, 2]
        assert thread.anchor_id == 2

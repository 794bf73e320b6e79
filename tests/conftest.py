"""Shared pytest fixtures."""

import pytest

from threadbox.api import StaticTokenProvider
from threadbox.models import Message
from threadbox.tracker import InboxStore

from tests.helpers import FakeInboxApi, admin_msg, user_msg


@pytest.fixture
def inbox_messages() -> list[Message]:
    """Two correspondents; user 7 has two unread messages, user 8 none."""
    return [
        user_msg(1, 7, 0, "first question", name="Alice", email="alice@example.com"),
        user_msg(2, 8, 5, "order status?", is_read=True, name="Bob", email="bob@example.com"),
        user_msg(3, 7, 10, "follow-up", name="Alice", email="alice@example.com"),
    ]


@pytest.fixture
def fake_api(inbox_messages) -> FakeInboxApi:
    return FakeInboxApi(
        messages=inbox_messages,
        replies={2: [admin_msg(100, 7, "shipped yesterday")]},
    )


@pytest.fixture
def store(fake_api) -> InboxStore:
    return InboxStore(fake_api, StaticTokenProvider("secret-token"))

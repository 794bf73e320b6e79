"""Test helpers: a scriptable fake inbox API and message factories."""

import copy
from datetime import datetime, timedelta, timezone

from threadbox.api import InboxApi
from threadbox.models import AuthorRole, Message

BASE_TIME = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """Timestamp ``minutes`` after BASE_TIME."""
    return BASE_TIME + timedelta(minutes=minutes)


def user_msg(
    id: int | None,
    user: int | None,
    minutes: int | None,
    content: str = "hello",
    is_read: bool = False,
    name: str | None = None,
    email: str | None = None,
) -> Message:
    return Message(
        id=id,
        content=content,
        role=AuthorRole.CORRESPONDENT,
        timestamp=at(minutes) if minutes is not None else None,
        is_read=is_read,
        correspondent_id=user,
        sender_name=name,
        sender_email=email,
    )


def admin_msg(id: int | None, minutes: int, content: str = "reply") -> Message:
    return Message(
        id=id,
        content=content,
        role=AuthorRole.ADMINISTRATOR,
        timestamp=at(minutes),
        is_read=True,
    )


class FakeInboxApi(InboxApi):
    """In-memory API with failure injection.

    Every fetch returns deep copies so the store never shares objects with
    the fake's own state.
    """

    def __init__(self, messages=None, replies=None):
        self.messages: list[Message] = list(messages or [])
        self.replies: dict[int, list[Message]] = {k: list(v) for k, v in (replies or {}).items()}
        self.calls: list[tuple] = []
        self.next_id = 1000

        self.fail_fetch = False
        self.fail_replies: set[int] = set()
        self.send_result: bool | Exception = True
        self.mark_fail_ids: set[int] = set()
        self.mark_raise_ids: set[int] = set()
        self.delete_fail_ids: set[int] = set()
        # Called after a reply fetch is requested, before it resolves
        self.on_fetch_replies = None

    async def fetch_inbox_messages(self, token):
        self.calls.append(("fetch_inbox_messages",))
        if self.fail_fetch:
            raise ConnectionError("server unreachable")
        return copy.deepcopy(self.messages)

    async def fetch_replies(self, token, anchor_id):
        self.calls.append(("fetch_replies", anchor_id))
        if self.on_fetch_replies is not None:
            await self.on_fetch_replies(anchor_id)
        if anchor_id in self.fail_replies:
            raise ConnectionError(f"replies for {anchor_id} unavailable")
        return copy.deepcopy(self.replies.get(anchor_id, []))

    async def send_reply(self, token, anchor_id, text):
        self.calls.append(("send_reply", anchor_id, text))
        if isinstance(self.send_result, Exception):
            raise self.send_result
        if self.send_result:
            self.replies.setdefault(anchor_id, []).append(admin_msg(self.next_id, 500, text))
            self.next_id += 1
        return self.send_result

    async def mark_message_read(self, token, message_id):
        self.calls.append(("mark_message_read", message_id))
        if message_id in self.mark_raise_ids:
            raise ConnectionError("timeout")
        if message_id in self.mark_fail_ids:
            return False
        for message in self.messages:
            if message.id == message_id:
                message.is_read = True
        return True

    async def delete_message(self, token, message_id):
        self.calls.append(("delete_message", message_id))
        if message_id in self.delete_fail_ids:
            return False
        self.messages = [m for m in self.messages if m.id != message_id]
        return True

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]



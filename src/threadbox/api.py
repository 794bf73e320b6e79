"""Collaborator interfaces for the inbox API.

The core never talks to the network itself. The surrounding application
provides an ``InboxApi`` implementation (HTTP client, RPC stub, ...) and a
``TokenProvider``. ``SnapshotInboxApi`` serves a JSON snapshot from memory
for tooling and tests.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from threadbox.errors import AuthError
from threadbox.models import Message, utcnow


class InboxApi(ABC):
    """Abstract base class for the inbox API collaborator.

    Every method may raise on auth or network failure. Boolean results
    report whether the server accepted the change.
    """

    @abstractmethod
    async def fetch_inbox_messages(self, token: str) -> List[Message]:
        """Fetch all correspondent messages in the inbox."""
        pass

    @abstractmethod
    async def fetch_replies(self, token: str, anchor_id: int) -> List[Message]:
        """Fetch the complete reply set for an anchor message.

        Replies are read unless the payload flags them unread.
        """
        pass

    @abstractmethod
    async def send_reply(self, token: str, anchor_id: int, text: str) -> bool:
        """Post an administrator reply to an anchor message."""
        pass

    @abstractmethod
    async def mark_message_read(self, token: str, message_id: int) -> bool:
        """Mark one correspondent message as read."""
        pass

    @abstractmethod
    async def delete_message(self, token: str, message_id: int) -> bool:
        """Delete a message and its replies."""
        pass


class TokenProvider(ABC):
    """Source of the API token."""

    @abstractmethod
    async def get_token(self) -> Optional[str]:
        """Return the current token, or None if signed out."""
        pass


class StaticTokenProvider(TokenProvider):
    """Token provider returning a fixed value (usually from config)."""

    def __init__(self, token: Optional[str]):
        self.token = token

    async def get_token(self) -> Optional[str]:
        return self.token


class SnapshotInboxApi(InboxApi):
    """In-memory inbox API seeded from a snapshot.

    Snapshot format::

        {
            "messages": [{"id": 1, "user_id": 7, "message": "...", ...}],
            "replies": {"1": [{"id": 100, "content": "...", "is_admin": true}]}
        }

    Writes (replies, read flags, deletes) only change the in-memory copy.
    """

    def __init__(self, data: Dict[str, Any]):
        self.messages: List[Dict[str, Any]] = [dict(m) for m in data.get("messages", [])]
        self.replies: Dict[int, List[Dict[str, Any]]] = {
            int(anchor): [dict(r) for r in replies]
            for anchor, replies in (data.get("replies") or {}).items()
        }
        self._next_id = self._max_id() + 1

    @classmethod
    def from_file(cls, path: Path) -> "SnapshotInboxApi":
        """Load a snapshot from a JSON file."""
        with open(path) as f:
            return cls(json.load(f))

    def _max_id(self) -> int:
        ids = [m.get("id") or 0 for m in self.messages]
        for replies in self.replies.values():
            ids.extend(r.get("id") or 0 for r in replies)
        return max(ids, default=0)

    def _check_token(self, token: str) -> None:
        if not token:
            raise AuthError()

    def _find(self, message_id: int) -> Optional[Dict[str, Any]]:
        for message in self.messages:
            if message.get("id") == message_id:
                return message
        for replies in self.replies.values():
            for reply in replies:
                if reply.get("id") == message_id:
                    return reply
        return None

    async def fetch_inbox_messages(self, token: str) -> List[Message]:
        self._check_token(token)
        return [Message.from_dict(m) for m in self.messages]

    async def fetch_replies(self, token: str, anchor_id: int) -> List[Message]:
        self._check_token(token)
        return [Message.from_dict(r, reply=True) for r in self.replies.get(anchor_id, [])]

    async def send_reply(self, token: str, anchor_id: int, text: str) -> bool:
        self._check_token(token)
        if self._find(anchor_id) is None:
            return False
        self.replies.setdefault(anchor_id, []).append(
            {
                "id": self._next_id,
                "content": text,
                "is_admin": True,
                "timestamp": utcnow().isoformat(),
            }
        )
        self._next_id += 1
        return True

    async def mark_message_read(self, token: str, message_id: int) -> bool:
        self._check_token(token)
        message = self._find(message_id)
        if message is None:
            return False
        message["is_read"] = True
        return True

    async def delete_message(self, token: str, message_id: int) -> bool:
        self._check_token(token)
        before = len(self.messages)
        self.messages = [m for m in self.messages if m.get("id") != message_id]
        if len(self.messages) == before:
            return False
        self.replies.pop(message_id, None)
        return True

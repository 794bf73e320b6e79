"""
Inbox data model.

Messages are plain data. A thread owns its message list and derives every
counter from it on access, so unread and activity values never drift from
the messages they describe.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

FALLBACK_EMAIL = "user@email.com"


def fallback_name(correspondent_id: int) -> str:
    """Display name used when a payload carries no sender metadata."""
    return f"User {correspondent_id}"


class AuthorRole(Enum):
    """Who wrote a message."""

    CORRESPONDENT = "correspondent"
    ADMINISTRATOR = "administrator"


@dataclass
class Correspondent:
    """A user who sent one or more messages to the inbox."""

    id: int
    name: str
    email: str


@dataclass
class Message:
    """A single message in a conversation."""

    content: str
    role: AuthorRole = AuthorRole.CORRESPONDENT
    timestamp: datetime | None = None
    is_read: bool = False
    id: int | None = None
    correspondent_id: int | None = None
    sender_name: str | None = None
    sender_email: str | None = None

    # Set on optimistic entries that the server has not confirmed yet
    temp_id: str | None = None
    # True when the payload had no timestamp and processing time was used
    timestamp_inferred: bool = False

    def __post_init__(self):
        # Naive datetimes are read as UTC so every timestamp compares
        if self.timestamp is not None:
            self.timestamp = ensure_aware(self.timestamp)

    @property
    def is_admin(self) -> bool:
        return self.role is AuthorRole.ADMINISTRATOR

    @property
    def is_unread(self) -> bool:
        """Administrator messages are never unread."""
        return not self.is_admin and not self.is_read

    @property
    def is_optimistic(self) -> bool:
        return self.temp_id is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any], reply: bool = False) -> "Message":
        """
        Create from a raw API payload.

        Accepts both inbox message payloads (``message``, ``sender``,
        ``user_id``) and reply payloads (``content``, ``is_admin``).

        Args:
            data: Decoded JSON object
            reply: Payload came from a reply set; such messages default to read

        Returns:
            Parsed Message
        """
        sender = data.get("sender") or {}
        is_admin = bool(data.get("is_admin", False))

        correspondent_id = data.get("correspondent_id", data.get("user_id"))
        if correspondent_id is None:
            correspondent_id = sender.get("id")

        content = data.get("content")
        if content is None:
            content = data.get("message") or ""

        # Administrator messages and reply-set entries arrive read unless flagged
        is_read = data.get("is_read", is_admin or reply)

        return cls(
            id=data.get("id"),
            content=content,
            role=AuthorRole.ADMINISTRATOR if is_admin else AuthorRole.CORRESPONDENT,
            timestamp=parse_timestamp(data.get("timestamp")),
            is_read=bool(is_read),
            correspondent_id=correspondent_id,
            sender_name=sender.get("name", data.get("sender_name")),
            sender_email=sender.get("email", data.get("sender_email")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "content": self.content,
            "role": self.role.value,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "is_read": self.is_read,
            "correspondent_id": self.correspondent_id,
            "temp_id": self.temp_id,
        }


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (or pass through a datetime)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return ensure_aware(parsed)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so all comparisons are well defined."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def stamp_missing(message: Message, now: datetime) -> bool:
    """
    Fill in an absent timestamp with processing time.

    Returns:
        True if the message had no timestamp
    """
    if message.timestamp is not None:
        return False
    message.timestamp = now
    message.timestamp_inferred = True
    return True


def _sort_key(message: Message) -> datetime:
    # Stamped on the way in; the fallback only guards hand-built threads
    if message.timestamp is None:
        return _EPOCH
    return ensure_aware(message.timestamp)


@dataclass
class Thread:
    """
    All messages exchanged with one correspondent.

    The correspondent id is the thread identity. Counters are properties over
    ``messages`` and are recomputed on every access.
    """

    correspondent: Correspondent
    messages: list[Message] = field(default_factory=list)
    anchor_id: int | None = None

    @property
    def id(self) -> int:
        return self.correspondent.id

    @property
    def last_activity(self) -> datetime | None:
        if not self.messages:
            return None
        return self.messages[-1].timestamp

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None

    @property
    def unread_count(self) -> int:
        return sum(1 for m in self.messages if m.is_unread)

    @property
    def reply_count(self) -> int:
        return sum(1 for m in self.messages if m.is_admin)

    @property
    def has_reply(self) -> bool:
        return any(m.is_admin for m in self.messages)

    def sort(self) -> None:
        """Order messages by timestamp ascending (stable for ties)."""
        self.messages.sort(key=_sort_key)

    def add(self, message: Message) -> None:
        """Insert a message keeping chronological order."""
        self.messages.append(message)
        self.sort()

    def remove_optimistic(self, temp_id: str) -> Message | None:
        """Remove exactly the optimistic message with ``temp_id``."""
        for i, message in enumerate(self.messages):
            if message.temp_id == temp_id:
                return self.messages.pop(i)
        return None

    def unread_messages(self) -> list[Message]:
        return [m for m in self.messages if m.is_unread]

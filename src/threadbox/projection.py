"""Filter and sort threads for presentation."""

from collections.abc import Iterable
from enum import Enum

from threadbox.models import Thread


class FilterMode(Enum):
    """Inbox list filters."""

    ALL = "all"
    UNREAD = "unread"
    READ = "read"
    REPLIED = "replied"

    @classmethod
    def parse(cls, value: "str | FilterMode | None") -> "FilterMode":
        """Parse a filter name, falling back to ALL for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.ALL


def _matches(thread: Thread, mode: FilterMode) -> bool:
    if mode is FilterMode.UNREAD:
        return thread.unread_count > 0
    if mode is FilterMode.READ:
        return thread.unread_count == 0
    if mode is FilterMode.REPLIED:
        return thread.has_reply
    return True


def project_threads(
    threads: Iterable[Thread], mode: "str | FilterMode | None" = FilterMode.ALL
) -> list[Thread]:
    """
    Return the threads matching ``mode``, most recent activity first.

    Threads without any message sort last.
    """
    mode = FilterMode.parse(mode)
    selected = [t for t in threads if _matches(t, mode)]
    with_activity = [t for t in selected if t.last_activity is not None]
    without_activity = [t for t in selected if t.last_activity is None]
    with_activity.sort(key=lambda t: t.last_activity, reverse=True)
    return with_activity + without_activity

"""
threadbox - Conversation threading core for an administrator inbox

This package groups user-submitted messages into per-correspondent threads,
merges reply sets fetched from the inbox API, and keeps read/unread state
consistent with what the server has confirmed.
"""

from threadbox.builder import BuildResult, build_threads
from threadbox.errors import ActionError, AuthError, ConfigError, FetchError, InboxError
from threadbox.models import AuthorRole, Correspondent, Message, Thread
from threadbox.projection import FilterMode, project_threads
from threadbox.reconcile import ReplyPolicy, merge_replies, reconcile_thread
from threadbox.tracker import InboxStore

__version__ = "0.1.0"
__all__ = [
    "__version__",
    "ActionError",
    "AuthError",
    "AuthorRole",
    "BuildResult",
    "ConfigError",
    "Correspondent",
    "FetchError",
    "FilterMode",
    "InboxError",
    "InboxStore",
    "Message",
    "ReplyPolicy",
    "Thread",
    "build_threads",
    "merge_replies",
    "project_threads",
    "reconcile_thread",
]

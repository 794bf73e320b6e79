"""
Common error classes for the inbox core.

Provides a consistent error hierarchy so the presentation layer can decide
between a full-screen error state (auth and initial load failures) and a
transient notification (failed actions).
"""


class InboxError(Exception):
    """Base exception for all inbox errors."""

    def __init__(self, message: str, details: dict | None = None):
        """
        Initialize inbox error.

        Args:
            message: Error message
            details: Optional error details
        """
        super().__init__(message)
        self.details = details or {}


class AuthError(InboxError):
    """Raised when the API token is missing or rejected."""

    def __init__(self, message: str = "No authentication token found"):
        super().__init__(message)


class FetchError(InboxError):
    """Raised when loading messages or replies fails."""

    def __init__(
        self,
        operation: str,
        anchor_id: int | None = None,
        message: str = "Failed to load messages",
    ):
        """
        Initialize fetch error.

        Args:
            operation: Collaborator operation that failed
            anchor_id: Anchor message id for reply fetches
            message: Error message
        """
        super().__init__(message, {"operation": operation, "anchor_id": anchor_id})
        self.operation = operation
        self.anchor_id = anchor_id


class ActionError(InboxError):
    """Raised when send-reply, mark-read or delete fails.

    Local state has already been rolled back when this is raised, so callers
    only need to notify the user.
    """

    def __init__(
        self,
        action: str,
        thread_id: int,
        message: str = "Action failed",
        failed_ids: list[int] | None = None,
    ):
        """
        Initialize action error.

        Args:
            action: Action name (send_reply, mark_read, delete)
            thread_id: Correspondent id of the affected thread
            message: Error message
            failed_ids: Message ids whose remote update failed
        """
        super().__init__(
            message,
            {"action": action, "thread_id": thread_id, "failed_ids": failed_ids or []},
        )
        self.action = action
        self.thread_id = thread_id
        self.failed_ids = failed_ids or []


class ConfigError(InboxError):
    """Raised when configuration is invalid or missing."""

    pass

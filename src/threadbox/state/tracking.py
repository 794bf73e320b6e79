"""
Action state tracking.

Every user action (send reply, mark read, delete) is recorded with an
explicit status instead of ad hoc flags, so the presentation layer can show
what is in flight and what was rolled back.
"""

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum


class ActionState(Enum):
    """State of an action."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED_ROLLED_BACK = "failed_rolled_back"


@dataclass
class ActionRecord:
    """Information about a single action."""

    action: str
    thread_id: int
    action_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: ActionState = ActionState.PENDING
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["state"] = self.state.value
        return data


class ActionLog:
    """
    In-memory record of actions and their states.

    Records are kept in start order. Only PENDING records may transition.
    """

    def __init__(self):
        self.records: dict[str, ActionRecord] = {}

    def start(self, action: str, thread_id: int) -> ActionRecord:
        """
        Start tracking a new action.

        Args:
            action: Action name
            thread_id: Correspondent id of the thread

        Returns:
            Created ActionRecord in PENDING state
        """
        record = ActionRecord(action=action, thread_id=thread_id)
        self.records[record.action_id] = record
        return record

    def confirm(self, record: ActionRecord) -> None:
        self._transition(record, ActionState.CONFIRMED)

    def fail(self, record: ActionRecord, error: str) -> None:
        self._transition(record, ActionState.FAILED_ROLLED_BACK, error)

    def _transition(
        self, record: ActionRecord, state: ActionState, error: str | None = None
    ) -> None:
        if record.state is not ActionState.PENDING:
            raise ValueError(
                f"Action {record.action_id} already {record.state.value}"
            )
        record.state = state
        record.updated_at = datetime.now().isoformat()
        if error:
            record.error = error

    def pending(self, thread_id: int | None = None) -> list[ActionRecord]:
        """
        Get all pending actions.

        Args:
            thread_id: Optional thread filter
        """
        return [
            r
            for r in self.records.values()
            if r.state is ActionState.PENDING
            and (thread_id is None or r.thread_id == thread_id)
        ]

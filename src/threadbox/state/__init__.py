"""Action state tracking for optimistic inbox operations."""

from .tracking import ActionLog, ActionRecord, ActionState

__all__ = ["ActionLog", "ActionRecord", "ActionState"]

"""Tests for action state tracking."""

import pytest

from threadbox.state import ActionLog, ActionState


class TestActionLog:
    def test_lifecycle_confirmed(self):
        log = ActionLog()
        record = log.start("send_reply", 7)

        assert record.state is ActionState.PENDING
        assert log.pending(7) == [record]

        log.confirm(record)

        assert record.state is ActionState.CONFIRMED
        assert record.updated_at is not None
        assert log.pending() == []

    def test_lifecycle_failed(self):
        log = ActionLog()
        record = log.start("delete", 7)

        log.fail(record, "server said no")

        assert record.state is ActionState.FAILED_ROLLED_BACK
        assert record.error == "server said no"
        assert record.to_dict()["state"] == "failed_rolled_back"

    def test_finished_action_cannot_transition(self):
        log = ActionLog()
        record = log.start("mark_read", 7)
        log.confirm(record)

        with pytest.raises(ValueError):
            log.fail(record, "late failure")

    def test_pending_filters_by_thread(self):
        log = ActionLog()
        a = log.start("send_reply", 7)
        log.start("send_reply", 8)

        assert log.pending(7) == [a]
        assert log.records[a.action_id] is a
        assert len(log.pending()) == 2

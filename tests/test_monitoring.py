"""Tests for logging and metrics helpers."""

import logging

from threadbox.monitoring import MetricsCollector, configure_logging, get_logger


def test_context_logger_format(caplog):
    logger = get_logger("threadbox.test", "store")

    with caplog.at_level(logging.INFO, logger="threadbox.test"):
        logger.info("Reply sent", thread_id=7, anchor_id=3)
        logger.debug("hidden")

    assert caplog.messages == ["[store] Reply sent | thread_id=7 anchor_id=3"]


def test_metrics_stats():
    metrics = MetricsCollector()
    metrics.start_operation("send_reply").complete(success=True)
    metrics.start_operation("send_reply").complete(success=False, error="rejected")
    metrics.start_operation("fetch_replies")

    stats = metrics.get_stats("send_reply")
    assert stats["total_operations"] == 2
    assert stats["success_rate"] == 50.0
    assert stats["error_count"] == 1

    assert metrics.get_stats()["completed_operations"] == 2
    [error] = metrics.get_recent_errors()
    assert error["operation"] == "send_reply"
    assert error["error"] == "rejected"


def test_empty_stats():
    assert MetricsCollector().get_stats()["total_operations"] == 0


def test_configure_logging_replaces_own_handlers(tmp_path):
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        configure_logging("INFO")
        configure_logging("DEBUG", log_file=tmp_path / "threadbox.log")

        added = [h for h in root.handlers if h not in before]
        assert len(added) == 2
        assert root.level == logging.DEBUG
    finally:
        for handler in root.handlers:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)

"""Group raw inbox messages into per-correspondent threads."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from threadbox.models import (
    FALLBACK_EMAIL,
    Correspondent,
    Message,
    Thread,
    fallback_name,
    stamp_missing,
    utcnow,
)
from threadbox.monitoring import get_logger

logger = get_logger(__name__, "builder")

MISSING_TIMESTAMP_POLICIES = ("now", "reject")


@dataclass
class BuildResult:
    """Output of a build pass."""

    threads: dict[int, Thread] = field(default_factory=dict)
    # Unread correspondent messages across every kept input message
    unread: int = 0
    discarded: int = 0


def build_threads(
    messages: Iterable[Message],
    missing_timestamp: str = "now",
    now: datetime | None = None,
) -> BuildResult:
    """
    Build one thread per distinct correspondent id.

    Messages without a correspondent id are dropped. A message without a
    timestamp is stamped with processing time and flagged, or dropped when
    ``missing_timestamp`` is ``"reject"``.

    Args:
        messages: Raw messages in any order
        missing_timestamp: "now" or "reject"
        now: Processing time (defaults to the current UTC time)

    Returns:
        BuildResult keyed by correspondent id (mapping order is unspecified)
    """
    if missing_timestamp not in MISSING_TIMESTAMP_POLICIES:
        raise ValueError(f"Unknown missing_timestamp policy: {missing_timestamp}")

    now = now or utcnow()
    result = BuildResult()

    for message in messages:
        correspondent_id = message.correspondent_id
        if correspondent_id is None:
            result.discarded += 1
            logger.debug("Discarding message without correspondent", message_id=message.id)
            continue

        if message.timestamp is None and missing_timestamp == "reject":
            result.discarded += 1
            logger.warning("Rejecting message without timestamp", message_id=message.id)
            continue
        if stamp_missing(message, now):
            logger.warning("Message has no timestamp, using processing time", message_id=message.id)

        thread = result.threads.get(correspondent_id)
        if thread is None:
            thread = Thread(
                correspondent=Correspondent(
                    id=correspondent_id,
                    name=message.sender_name or fallback_name(correspondent_id),
                    email=message.sender_email or FALLBACK_EMAIL,
                )
            )
            result.threads[correspondent_id] = thread

        thread.messages.append(message)
        if message.is_unread:
            result.unread += 1

    for thread in result.threads.values():
        thread.sort()
        thread.anchor_id = thread.messages[-1].id

    logger.info(
        "Built threads",
        threads=len(result.threads),
        unread=result.unread,
        discarded=result.discarded,
    )
    return result

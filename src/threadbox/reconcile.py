"""
Reply reconciliation.

Merges a freshly fetched reply set into an existing thread. The canonical
policy replaces every administrator message with the fetched set, which
makes repeated reloads idempotent; the append policy reproduces the older
inbox screen and duplicates replies on every reload.
"""

from collections.abc import Callable, Sequence
from enum import Enum

from threadbox.api import InboxApi
from threadbox.models import Message, Thread, stamp_missing, utcnow
from threadbox.monitoring import MetricsCollector, get_logger

logger = get_logger(__name__, "reconcile")


class ReplyPolicy(Enum):
    """How fetched replies are merged into a thread."""

    REPLACE = "replace"
    APPEND = "append"


def merge_replies(
    thread: Thread,
    replies: Sequence[Message],
    policy: ReplyPolicy = ReplyPolicy.REPLACE,
) -> None:
    """
    Merge ``replies`` into ``thread`` and restore chronological order.

    Args:
        thread: Thread to mutate
        replies: Complete reply set for the thread's anchor
        policy: Merge policy
    """
    now = utcnow()
    if policy is ReplyPolicy.REPLACE:
        # Optimistic entries are administrator messages too and go with them
        thread.messages = [m for m in thread.messages if not m.is_admin]
        seen = {m.id for m in thread.messages if m.id is not None}
        for reply in replies:
            if reply.id is not None and reply.id in seen:
                continue
            if reply.id is not None:
                seen.add(reply.id)
            stamp_missing(reply, now)
            thread.messages.append(reply)
    else:
        for reply in replies:
            stamp_missing(reply, now)
            thread.messages.append(reply)

    for reply in replies:
        if reply.correspondent_id is None:
            reply.correspondent_id = thread.id
    thread.sort()


async def reconcile_thread(
    thread: Thread,
    api: InboxApi,
    token: str,
    policy: ReplyPolicy = ReplyPolicy.REPLACE,
    metrics: MetricsCollector | None = None,
    is_current: Callable[[], bool] | None = None,
) -> bool:
    """
    Fetch replies for the thread's anchor and merge them.

    A failed fetch is logged and leaves the thread exactly as it was.
    ``is_current`` is checked after the fetch resolves; when it returns
    False the result is stale and is dropped.

    Returns:
        True if the thread was updated
    """
    if thread.anchor_id is None:
        return False

    replies = await fetch_replies(api, token, thread.anchor_id, metrics)
    # None on failure; an empty set means the server has nothing newer
    if not replies:
        return False
    if is_current is not None and not is_current():
        logger.info("Discarding stale replies", thread_id=thread.id, anchor_id=thread.anchor_id)
        return False

    merge_replies(thread, replies, policy)
    logger.debug(
        "Reconciled replies",
        thread_id=thread.id,
        anchor_id=thread.anchor_id,
        replies=len(replies),
    )
    return True


async def fetch_replies(
    api: InboxApi,
    token: str,
    anchor_id: int,
    metrics: MetricsCollector | None = None,
) -> list[Message] | None:
    """
    Fetch the reply set for ``anchor_id``.

    Returns:
        List of replies, or None if the fetch failed
    """
    op = metrics.start_operation("fetch_replies") if metrics else None
    try:
        replies = list(await api.fetch_replies(token, anchor_id))
    except Exception as e:
        if op:
            op.complete(success=False, error=str(e))
        logger.error("Error loading replies", anchor_id=anchor_id, error=e)
        return None
    if op:
        op.complete(success=True)
    return replies

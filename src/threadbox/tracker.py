"""
Inbox store and read-state tracking.

``InboxStore`` is the state object the presentation layer owns. It holds the
thread map and exposes the inbox operations: refresh, reconcile, open, mark
read, send reply and delete. Counters are always derived from the messages;
local read flags only flip after the server confirmed them, and optimistic
replies are removed again when the send fails.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from threadbox.api import InboxApi, TokenProvider
from threadbox.builder import build_threads
from threadbox.config import InboxConfig
from threadbox.errors import ActionError, AuthError, FetchError
from threadbox.models import AuthorRole, Message, Thread, utcnow
from threadbox.monitoring import MetricsCollector, get_logger
from threadbox.projection import FilterMode, project_threads
from threadbox.reconcile import ReplyPolicy, reconcile_thread
from threadbox.state import ActionLog, ActionRecord

logger = get_logger(__name__, "store")


class InboxStore:
    """
    Thread map plus the operations that mutate it.

    All operations run on one event loop. A full ``refresh()`` replaces the
    thread map and bumps ``generation``; reply fetches that resolve after a
    newer refresh are dropped instead of being applied to the new map.
    """

    def __init__(
        self,
        api: InboxApi,
        tokens: TokenProvider,
        config: InboxConfig | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize inbox store.

        Args:
            api: Inbox API collaborator
            tokens: Source of the API token
            config: Core configuration (defaults apply when omitted)
            metrics: Optional collector for API call metrics
        """
        self.api = api
        self.tokens = tokens
        self.config = config or InboxConfig()
        self.metrics = metrics or MetricsCollector()
        self.actions = ActionLog()
        self.threads: dict[int, Thread] = {}
        self.generation = 0
        self.discarded = 0

    @property
    def global_unread(self) -> int:
        return sum(t.unread_count for t in self.threads.values())

    def project(self, mode: "str | FilterMode | None" = FilterMode.ALL) -> list[Thread]:
        """Threads for the list view, filtered and most recent first."""
        return project_threads(self.threads.values(), mode)

    def get_thread(self, thread_id: int) -> Thread:
        """
        Get a thread by correspondent id.

        Raises:
            KeyError: If no such thread is loaded
        """
        try:
            return self.threads[thread_id]
        except KeyError:
            raise KeyError(f"Unknown thread: {thread_id}") from None

    async def _require_token(self) -> str:
        token = await self.tokens.get_token()
        if not token:
            raise AuthError()
        return token

    async def _call(self, operation: str, call: Awaitable[Any]) -> Any:
        """Await a collaborator call and record its metrics."""
        op = self.metrics.start_operation(operation)
        try:
            result = await call
        except Exception as e:
            op.complete(success=False, error=str(e))
            raise
        # Boolean results report whether the server accepted the change
        rejected = result is False
        op.complete(success=not rejected, error="rejected" if rejected else None)
        return result

    def _is_live(self, thread: Thread, generation: int) -> Callable[[], bool]:
        return lambda: self.generation == generation and self.threads.get(thread.id) is thread

    async def refresh(self) -> None:
        """
        Rebuild the thread map from scratch and load replies for every thread.

        Raises:
            AuthError: If no token is available
            FetchError: If the inbox list could not be loaded
        """
        token = await self._require_token()

        try:
            messages = await self._call(
                "fetch_inbox_messages", self.api.fetch_inbox_messages(token)
            )
        except AuthError:
            raise
        except Exception as e:
            logger.error("Error loading messages", error=e)
            raise FetchError(
                "fetch_inbox_messages", message=f"Failed to load messages: {e}"
            ) from e

        result = build_threads(messages, missing_timestamp=self.config.missing_timestamp)
        self.generation += 1
        generation = self.generation
        self.threads = result.threads
        self.discarded = result.discarded

        threads = list(self.threads.values())
        if self.config.parallel_reply_fetch:
            await asyncio.gather(*(self._reconcile(t, token, generation) for t in threads))
        else:
            for thread in threads:
                await self._reconcile(thread, token, generation)

        logger.info(
            "Inbox loaded",
            generation=generation,
            threads=len(self.threads),
            unread=self.global_unread,
        )

    async def _reconcile(
        self,
        thread: Thread,
        token: str,
        generation: int,
        policy: ReplyPolicy | None = None,
    ) -> bool:
        return await reconcile_thread(
            thread,
            self.api,
            token,
            policy=policy or self.config.reply_policy,
            metrics=self.metrics,
            is_current=self._is_live(thread, generation),
        )

    async def reconcile(self, thread_id: int) -> bool:
        """
        Reload replies for one thread.

        Returns:
            True if the thread was updated
        """
        thread = self.get_thread(thread_id)
        token = await self._require_token()
        return await self._reconcile(thread, token, self.generation)

    async def open_thread(self, thread_id: int) -> Thread:
        """Return a thread for the detail view, marking it read if needed."""
        thread = self.get_thread(thread_id)
        if thread.unread_count:
            try:
                await self.mark_thread_read(thread_id)
            except ActionError as e:
                logger.warning("Could not mark thread read", thread_id=thread_id, error=e)
        return thread

    async def mark_thread_read(self, thread_id: int) -> ActionRecord | None:
        """
        Mark every unread correspondent message in a thread as read.

        Messages are marked one at a time. A message's local flag only flips
        after the server confirmed it; a failure does not stop the others.

        Returns:
            The action record, or None if nothing was unread

        Raises:
            ActionError: If any message could not be marked (after trying all)
        """
        thread = self.get_thread(thread_id)
        targets = [m for m in thread.unread_messages() if m.id is not None]
        if not targets:
            return None

        token = await self._require_token()
        record = self.actions.start("mark_read", thread_id)
        failed: list[int] = []

        for message in targets:
            try:
                ok = await self._call(
                    "mark_message_read", self.api.mark_message_read(token, message.id)
                )
            except Exception as e:
                logger.error("Error marking as read", message_id=message.id, error=e)
                ok = False
            if ok:
                message.is_read = True
            else:
                failed.append(message.id)

        if failed:
            self.actions.fail(record, f"Failed to mark messages {failed} as read")
            raise ActionError(
                "mark_read",
                thread_id,
                message="Failed to mark message as read",
                failed_ids=failed,
            )

        self.actions.confirm(record)
        logger.debug(
            "Marked thread read",
            thread_id=thread_id,
            marked=len(targets),
            unread=self.global_unread,
        )
        return record

    async def send_reply(self, thread_id: int, text: str) -> ActionRecord | None:
        """
        Send an administrator reply with an optimistic local entry.

        Blank text is ignored. On success the thread's replies are reloaded
        (replacing the optimistic entry) and stale unread messages are marked
        read. On failure exactly the optimistic entry is removed.

        Returns:
            The confirmed action record, or None for blank text

        Raises:
            ActionError: If the server did not accept the reply
        """
        text = text.strip()
        if not text:
            return None

        thread = self.get_thread(thread_id)
        anchor_id = thread.anchor_id
        if anchor_id is None:
            raise ActionError("send_reply", thread_id, message="Thread has no message to reply to")

        token = await self._require_token()
        record = self.actions.start("send_reply", thread_id)
        generation = self.generation

        optimistic = Message(
            content=text,
            role=AuthorRole.ADMINISTRATOR,
            timestamp=utcnow(),
            is_read=True,
            correspondent_id=thread_id,
            sender_name=self.config.admin_name,
            sender_email=self.config.admin_email,
            temp_id=record.action_id,
        )
        error: str | None = None
        try:
            thread.add(optimistic)
            ok = await self._call("send_reply", self.api.send_reply(token, anchor_id, text))
            if not ok:
                error = "Server rejected reply"
        except Exception as e:
            error = str(e)

        if error is not None:
            thread.remove_optimistic(record.action_id)
            self.actions.fail(record, error)
            logger.warning("Reply failed, rolled back", thread_id=thread_id, error=error)
            raise ActionError("send_reply", thread_id, message=f"Failed to send reply: {error}")

        self.actions.confirm(record)
        logger.info("Reply sent", thread_id=thread_id, anchor_id=anchor_id)

        # The server copy replaces the optimistic entry
        await self._reconcile(thread, token, generation, policy=ReplyPolicy.REPLACE)

        if self.threads.get(thread_id) is thread and thread.unread_count:
            try:
                await self.mark_thread_read(thread_id)
            except ActionError as e:
                logger.warning("Could not mark thread read after reply", thread_id=thread_id, error=e)

        return record

    async def delete_thread(self, thread_id: int) -> ActionRecord:
        """
        Delete every correspondent message of a thread on the server.

        The thread is dropped once all deletes succeeded. When some fail, only
        the messages the server actually deleted are removed locally.

        Raises:
            ActionError: If any delete failed
        """
        thread = self.get_thread(thread_id)
        token = await self._require_token()
        record = self.actions.start("delete", thread_id)

        targets = [m for m in thread.messages if not m.is_admin and m.id is not None]
        deleted: list[Message] = []
        failed: list[int] = []
        for message in targets:
            try:
                ok = await self._call("delete_message", self.api.delete_message(token, message.id))
            except Exception as e:
                logger.error("Error deleting message", message_id=message.id, error=e)
                ok = False
            if ok:
                deleted.append(message)
            else:
                failed.append(message.id)

        if not failed:
            if self.threads.get(thread_id) is thread:
                del self.threads[thread_id]
            self.actions.confirm(record)
            logger.info("Thread deleted", thread_id=thread_id, messages=len(deleted))
            return record

        if deleted:
            gone = {id(m) for m in deleted}
            thread.messages = [m for m in thread.messages if id(m) not in gone]
            if thread.anchor_id in {m.id for m in deleted}:
                remaining = [m.id for m in thread.messages if not m.is_admin and m.id is not None]
                thread.anchor_id = remaining[-1] if remaining else None

        self.actions.fail(record, f"Failed to delete messages {failed}")
        raise ActionError(
            "delete", thread_id, message="Failed to delete message", failed_ids=failed
        )

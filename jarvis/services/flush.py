"""BatchFlusher - drains a key's queued links into delivery tasks."""

from __future__ import annotations

import structlog
from sqlalchemy.exc import SQLAlchemyError

from jarvis.concurrency.locks import get_key_lock
from jarvis.delivery.base import DeliveryTask, TaskDispatcher
from jarvis.errors import DispatchFailure, ValidationError
from jarvis.services.dispatch import resolve_active_key
from jarvis.store.keys import KeyStore

logger = structlog.get_logger()


class BatchFlusher:
    """Flushes queued links in insertion order.

    Each entry is its own transaction: the row delete is committed only
    after the task was handed off. The first failed hand-off stops the
    flush and leaves that entry and everything after it queued.

    If the commit itself fails, the task is already out but its row stays
    queued, so the next flush delivers that link again (at-least-once).
    """

    def __init__(self, store: KeyStore, dispatcher: TaskDispatcher) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._log = logger.bind(component="flush")

    async def flush(self, identifier: str | None) -> int:
        """Hand off every queued link of a key.

        Returns:
            Number of entries flushed

        Raises:
            ValidationError: If identifier is missing
            AuthError: If the key is unknown or not active
            DispatchFailure: If a hand-off failed; details carry the
                flushed and remaining counts
        """
        if not identifier:
            raise ValidationError()

        api_key = await resolve_active_key(self._store, identifier)
        api_key_id, email = api_key.id, api_key.email

        key_lock = await get_key_lock(api_key_id)
        async with key_lock:
            # Snapshot: links appended after this point wait for the next flush
            snapshot = await self._store.list_pending(api_key_id)
            self._log.info("flush.start", api_key_id=api_key_id, pending=len(snapshot))

            flushed = 0
            for entry in snapshot:
                task = DeliveryTask(
                    api_key_id=api_key_id,
                    email=email,
                    link=entry.link,
                    title=entry.title,
                    preview=entry.preview,
                    queued=True,
                )
                entry_id = entry.id

                await self._store.remove_pending(entry)
                try:
                    self._dispatcher.submit(task)
                except DispatchFailure as e:
                    await self._store.rollback()
                    remaining = len(snapshot) - flushed
                    self._log.warning(
                        "flush.stopped",
                        api_key_id=api_key_id,
                        entry_id=entry_id,
                        flushed=flushed,
                        remaining=remaining,
                    )
                    raise DispatchFailure(
                        details={"flushed": flushed, "remaining": remaining, **e.details}
                    ) from e
                try:
                    await self._store.commit()
                except SQLAlchemyError:
                    self._log.exception(
                        "flush.commit_failed",
                        api_key_id=api_key_id,
                        entry_id=entry_id,
                        task_id=task.task_id,
                        flushed=flushed,
                    )
                    raise
                flushed += 1

        self._log.info("flush.complete", api_key_id=api_key_id, flushed=flushed)
        return flushed

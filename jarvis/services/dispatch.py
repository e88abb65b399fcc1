"""DispatchEngine - link submission.

A submission is validated, authorized against an active key, then
either appended to the key's queue or handed off for immediate
delivery. Either way the caller gets an answer before delivery happens.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import structlog

from jarvis.concurrency.locks import get_key_lock
from jarvis.delivery.base import DeliveryTask, TaskDispatcher
from jarvis.errors import AuthError, ValidationError
from jarvis.models.api_key import ApiKey
from jarvis.store.keys import KeyStore

logger = structlog.get_logger()


class Outcome(str, Enum):
    """Result of an accepted submission."""

    ACCEPTED = "accepted"


@dataclass(frozen=True)
class LinkSubmission:
    """One link as sent by a client."""

    link: str
    title: str | None = None
    preview: bool = False
    queued: bool = False


async def resolve_active_key(store: KeyStore, identifier: str) -> ApiKey:
    """Load a key that may dispatch links.

    Raises:
        AuthError: If the key is unknown or not active
    """
    api_key = await store.get(identifier)
    if api_key is None or not api_key.is_active:
        raise AuthError()
    return api_key


class DispatchEngine:
    """Validates submissions and routes them to the queue or the dispatcher."""

    def __init__(self, store: KeyStore, dispatcher: TaskDispatcher) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._log = logger.bind(component="dispatch")

    async def submit(
        self,
        identifier: str | None,
        link: str | None,
        title: str | None = None,
        preview: bool = False,
        queued: bool = False,
    ) -> Outcome:
        """Submit a link on behalf of a key.

        Raises:
            ValidationError: If identifier or link is missing
            AuthError: If the key is unknown or not active
            DispatchFailure: If an immediate hand-off could not be scheduled
        """
        if not identifier or not link:
            raise ValidationError()

        submission = LinkSubmission(link=link, title=title, preview=preview, queued=queued)
        api_key = await resolve_active_key(self._store, identifier)

        if submission.queued:
            await self._enqueue(api_key, submission)
        else:
            self._hand_off(api_key, submission)

        return Outcome.ACCEPTED

    async def _enqueue(self, api_key: ApiKey, submission: LinkSubmission) -> None:
        key_lock = await get_key_lock(api_key.id)
        async with key_lock:
            entry = await self._store.append_pending(
                api_key.id,
                link=submission.link,
                title=submission.title,
                preview=submission.preview,
            )
            await self._store.commit()

        self._log.info("link.queued", api_key_id=api_key.id, entry_id=entry.id)

    def _hand_off(self, api_key: ApiKey, submission: LinkSubmission) -> None:
        handle = self._dispatcher.submit(
            DeliveryTask(
                api_key_id=api_key.id,
                email=api_key.email,
                link=submission.link,
                title=submission.title,
                preview=submission.preview,
                queued=False,
            )
        )
        self._log.info("link.dispatched", api_key_id=api_key.id, task_id=handle.task_id)

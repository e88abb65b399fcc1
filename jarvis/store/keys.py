"""KeyStore - persistence of API keys, their queues and delivery logs.

Thin repository over an AsyncSession. Callers own transaction
boundaries: the store flushes but only commits through ``commit()``.
"""

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from jarvis.models.api_key import ApiKey, ClientSource, KeyStatus
from jarvis.models.link import DeliveryLog, QueuedLink


class KeyStore:
    """Persistence for ApiKey records and the rows they own."""

    def __init__(self, db_session: AsyncSession) -> None:
        self._db = db_session

    # ---- keys ----

    async def get(self, identifier: str) -> ApiKey | None:
        result = await self._db.execute(select(ApiKey).where(ApiKey.id == identifier))
        return result.scalars().first()

    async def get_by_email(self, email: str) -> ApiKey | None:
        """Get the oldest key registered for an email."""
        result = await self._db.execute(
            select(ApiKey).where(ApiKey.email == email).order_by(ApiKey.created_at)
        )
        return result.scalars().first()

    async def get_by_confirmation_code(self, code: str) -> ApiKey | None:
        result = await self._db.execute(
            select(ApiKey).where(ApiKey.confirmation_code == code)
        )
        return result.scalars().first()

    async def save(self, api_key: ApiKey) -> ApiKey:
        self._db.add(api_key)
        await self._db.flush()
        return api_key

    async def count_keys_by_status(self) -> dict[KeyStatus, int]:
        result = await self._db.execute(
            select(ApiKey.status, func.count()).group_by(ApiKey.status)
        )
        return {KeyStatus(status): count for status, count in result.all()}

    async def count_keys_by_source(self) -> dict[ClientSource, int]:
        result = await self._db.execute(
            select(ApiKey.source, func.count()).group_by(ApiKey.source)
        )
        return {ClientSource(source): count for source, count in result.all()}

    # ---- pending links ----

    async def append_pending(
        self,
        api_key_id: str,
        link: str,
        title: str | None,
        preview: bool,
    ) -> QueuedLink:
        entry = QueuedLink(api_key_id=api_key_id, link=link, title=title, preview=preview)
        self._db.add(entry)
        await self._db.flush()
        return entry

    async def list_pending(self, api_key_id: str) -> list[QueuedLink]:
        """Pending links of a key in insertion order."""
        result = await self._db.execute(
            select(QueuedLink)
            .where(QueuedLink.api_key_id == api_key_id)
            .order_by(QueuedLink.id)
        )
        return list(result.scalars().all())

    async def remove_pending(self, entry: QueuedLink) -> None:
        await self._db.delete(entry)
        await self._db.flush()

    async def count_pending(self, api_key_id: str | None = None) -> int:
        query = select(func.count()).select_from(QueuedLink)
        if api_key_id is not None:
            query = query.where(QueuedLink.api_key_id == api_key_id)
        result = await self._db.execute(query)
        return result.scalar_one()

    # ---- delivery log ----

    async def append_delivery_log(self, entry: DeliveryLog) -> DeliveryLog:
        self._db.add(entry)
        await self._db.flush()
        return entry

    async def list_delivery_log(self, api_key_id: str) -> list[DeliveryLog]:
        result = await self._db.execute(
            select(DeliveryLog)
            .where(DeliveryLog.api_key_id == api_key_id)
            .order_by(DeliveryLog.id)
        )
        return list(result.scalars().all())

    async def count_delivery_log(self) -> int:
        result = await self._db.execute(select(func.count()).select_from(DeliveryLog))
        return result.scalar_one()

    # ---- transactions ----

    async def commit(self) -> None:
        await self._db.commit()

    async def rollback(self) -> None:
        await self._db.rollback()

"""LinkDeliverer implementations."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import structlog

from jarvis.delivery.base import DeliveryTask, LinkDeliverer
from jarvis.services.http import get_http_client

logger = structlog.get_logger()


class LoggingDeliverer(LinkDeliverer):
    """Logs each link. Default for development."""

    @property
    def name(self) -> str:
        return "log"

    async def deliver(self, task: DeliveryTask) -> None:
        logger.info(
            "delivery.link",
            task_id=task.task_id,
            api_key_id=task.api_key_id,
            link=task.link,
            title=task.title,
            preview=task.preview,
            queued=task.queued,
        )


class WebhookDeliverer(LinkDeliverer):
    """POSTs each link as JSON to a configured URL."""

    def __init__(
        self,
        url: str,
        client_factory: Callable[[], httpx.AsyncClient] = get_http_client,
    ) -> None:
        self._url = url
        self._client_factory = client_factory

    @property
    def name(self) -> str:
        return "webhook"

    async def deliver(self, task: DeliveryTask) -> None:
        response = await self._client_factory().post(
            self._url,
            json={
                "task_id": task.task_id,
                "api_key": task.api_key_id,
                "email": task.email,
                "link": task.link,
                "title": task.title,
                "preview": task.preview,
                "queued": task.queued,
            },
        )
        response.raise_for_status()

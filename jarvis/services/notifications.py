"""Confirmation code notification channel."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

import httpx
import structlog

from jarvis.config import NotificationConfig
from jarvis.models.api_key import ApiKey
from jarvis.services.http import get_http_client

logger = structlog.get_logger()


class ConfirmationNotifier(ABC):
    """Delivers a confirmation code to the key owner.

    Implementations must not raise: a failed notification never fails the
    registration, the owner can register again to get a new code.
    """

    @abstractmethod
    async def notify(self, api_key: ApiKey, code: str) -> None: ...


class LoggingNotifier(ConfirmationNotifier):
    """Logs the confirmation URL instead of sending it."""

    def __init__(self, config: NotificationConfig) -> None:
        self._config = config

    async def notify(self, api_key: ApiKey, code: str) -> None:
        logger.info(
            "notify.confirmation",
            channel="log",
            api_key_id=api_key.id,
            email=api_key.email,
            confirm_url=self._config.confirm_url(code),
        )


class WebhookNotifier(ConfirmationNotifier):
    """POSTs the confirmation URL to a mailer webhook."""

    def __init__(
        self,
        config: NotificationConfig,
        client_factory: Callable[[], httpx.AsyncClient] = get_http_client,
    ) -> None:
        if not config.webhook_url:
            raise ValueError("notifications.webhook_url is required for the webhook channel")
        self._config = config
        self._url = config.webhook_url
        self._client_factory = client_factory

    async def notify(self, api_key: ApiKey, code: str) -> None:
        try:
            response = await self._client_factory().post(
                self._url,
                json={
                    "email": api_key.email,
                    "confirmation_url": self._config.confirm_url(code),
                },
            )
            response.raise_for_status()
        except (httpx.HTTPError, RuntimeError) as e:
            logger.warning(
                "notify.confirmation.failed",
                channel="webhook",
                api_key_id=api_key.id,
                error=str(e),
            )
            return

        logger.info("notify.confirmation", channel="webhook", api_key_id=api_key.id)


def build_notifier(config: NotificationConfig) -> ConfirmationNotifier:
    """Create the notifier selected by configuration."""
    if config.channel == "webhook":
        return WebhookNotifier(config)
    return LoggingNotifier(config)

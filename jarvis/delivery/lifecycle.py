"""Delivery pool lifecycle management for FastAPI lifespan integration."""

from __future__ import annotations

import structlog

from jarvis.config import DeliveryConfig, get_settings
from jarvis.db.session import get_async_session
from jarvis.delivery.base import LinkDeliverer
from jarvis.delivery.deliverers import LoggingDeliverer, WebhookDeliverer
from jarvis.delivery.worker import DeliveryWorkerPool

logger = structlog.get_logger()

# Global pool instance
_delivery_pool: DeliveryWorkerPool | None = None


def build_deliverer(config: DeliveryConfig) -> LinkDeliverer:
    """Create the deliverer selected by configuration.

    Raises:
        ValueError: If the webhook deliverer is selected without a URL
    """
    if config.deliverer == "webhook":
        if not config.webhook_url:
            raise ValueError("delivery.webhook_url is required for the webhook deliverer")
        return WebhookDeliverer(config.webhook_url)
    return LoggingDeliverer()


async def init_delivery_pool() -> DeliveryWorkerPool:
    """Create and start the delivery pool.

    Called during FastAPI lifespan startup, after database initialization.
    """
    global _delivery_pool

    config = get_settings().delivery
    deliverer = build_deliverer(config)

    logger.info(
        "delivery.init",
        deliverer=deliverer.name,
        workers=config.workers,
        queue_size=config.queue_size,
    )

    _delivery_pool = DeliveryWorkerPool(
        deliverer=deliverer,
        config=config,
        session_factory=get_async_session,
    )
    await _delivery_pool.start()
    return _delivery_pool


async def shutdown_delivery_pool() -> None:
    """Drain and stop the delivery pool.

    Called during FastAPI lifespan shutdown.
    """
    global _delivery_pool

    if _delivery_pool is not None:
        await _delivery_pool.stop()
        _delivery_pool = None


def get_delivery_pool() -> DeliveryWorkerPool | None:
    """Get the current pool instance."""
    return _delivery_pool

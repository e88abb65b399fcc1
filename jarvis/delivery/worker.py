"""Delivery worker pool - in-process TaskDispatcher."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from jarvis.delivery.base import DeliveryTask, LinkDeliverer, TaskDispatcher, TaskHandle
from jarvis.errors import DispatchFailure
from jarvis.models.link import DeliveryLog, DeliveryStatus
from jarvis.store.keys import KeyStore

if TYPE_CHECKING:
    from jarvis.config import DeliveryConfig

logger = structlog.get_logger()

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class DeliveryWorkerPool(TaskDispatcher):
    """Bounded asyncio queue drained by a fixed set of worker coroutines.

    submit() only enqueues. Workers run the deliverer and append one
    DeliveryLog row per task, in a fresh session per task. Delivery
    errors are logged and recorded, never raised to the submitter.

    Usage:
        pool = DeliveryWorkerPool(
            deliverer=LoggingDeliverer(),
            config=settings.delivery,
            session_factory=get_async_session,
        )
        await pool.start()
        pool.submit(task)
        await pool.stop()
    """

    def __init__(
        self,
        deliverer: LinkDeliverer,
        config: "DeliveryConfig",
        session_factory: SessionFactory,
    ) -> None:
        self._deliverer = deliverer
        self._config = config
        self._session_factory = session_factory
        self._log = logger.bind(service="delivery_pool", deliverer=deliverer.name)

        self._queue: asyncio.Queue[DeliveryTask] = asyncio.Queue(maxsize=config.queue_size)
        self._workers: list[asyncio.Task] = []
        self._running = False

        self.delivered_count = 0
        self.failed_count = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def pending_count(self) -> int:
        return self._queue.qsize()

    def submit(self, task: DeliveryTask) -> TaskHandle:
        if not self._running:
            raise DispatchFailure(details={"reason": "pool_not_running"})

        try:
            self._queue.put_nowait(task)
        except asyncio.QueueFull:
            self._log.warning("delivery.queue_full", task_id=task.task_id)
            raise DispatchFailure(details={"reason": "queue_full"}) from None

        self._log.debug("delivery.submitted", task_id=task.task_id, queued=task.queued)
        return TaskHandle(task_id=task.task_id)

    async def start(self) -> None:
        if self._running:
            self._log.warning("delivery.pool.already_running")
            return

        self._running = True
        self._workers = [
            asyncio.create_task(self._worker_loop(i), name=f"delivery-worker-{i}")
            for i in range(self._config.workers)
        ]
        self._log.info("delivery.pool.started", workers=self._config.workers)

    async def stop(self) -> None:
        """Stop accepting tasks, drain the queue, then stop the workers.

        Tasks still queued after shutdown_timeout are dropped with a warning.
        """
        if not self._running:
            return

        self._log.info("delivery.pool.stopping", pending=self._queue.qsize())
        self._running = False

        try:
            await asyncio.wait_for(self._queue.join(), timeout=self._config.shutdown_timeout)
        except asyncio.TimeoutError:
            self._log.warning("delivery.pool.drain_timeout", dropped=self._queue.qsize())

        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

        self._log.info(
            "delivery.pool.stopped",
            delivered=self.delivered_count,
            failed=self.failed_count,
        )

    async def _worker_loop(self, index: int) -> None:
        while True:
            task = await self._queue.get()
            try:
                await self._process(task)
            except Exception as e:
                # Recording the outcome itself failed; keep the worker alive
                self._log.exception(
                    "delivery.record_failed",
                    worker=index,
                    task_id=task.task_id,
                    error=str(e),
                )
            finally:
                self._queue.task_done()

    async def _process(self, task: DeliveryTask) -> None:
        status = DeliveryStatus.DELIVERED
        error: str | None = None

        try:
            await self._deliverer.deliver(task)
        except Exception as e:
            status = DeliveryStatus.FAILED
            error = str(e) or e.__class__.__name__
            self.failed_count += 1
            self._log.warning(
                "delivery.failed",
                task_id=task.task_id,
                api_key_id=task.api_key_id,
                error=error,
            )
        else:
            self.delivered_count += 1
            self._log.info(
                "delivery.delivered",
                task_id=task.task_id,
                api_key_id=task.api_key_id,
                queued=task.queued,
            )

        async with self._session_factory() as db_session:
            store = KeyStore(db_session)
            await store.append_delivery_log(
                DeliveryLog(
                    api_key_id=task.api_key_id,
                    task_id=task.task_id,
                    link=task.link,
                    title=task.title,
                    preview=task.preview,
                    queued=task.queued,
                    status=status,
                    error=error,
                )
            )
            await store.commit()

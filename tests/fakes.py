"""Fake implementations for testing.

These fakes stand in for the delivery and notification collaborators so
unit tests can assert on hand-offs without running workers.
"""

from __future__ import annotations

import asyncio

from jarvis.delivery.base import DeliveryTask, LinkDeliverer, TaskDispatcher, TaskHandle
from jarvis.errors import DispatchFailure
from jarvis.models.api_key import ApiKey
from jarvis.services.notifications import ConfirmationNotifier


class RecordingDispatcher(TaskDispatcher):
    """Records every handed-off task, like a faked job queue."""

    def __init__(self) -> None:
        self.tasks: list[DeliveryTask] = []

    def submit(self, task: DeliveryTask) -> TaskHandle:
        self.tasks.append(task)
        return TaskHandle(task_id=task.task_id)

    @property
    def links(self) -> list[str]:
        return [t.link for t in self.tasks]


class FailingDispatcher(RecordingDispatcher):
    """Accepts the first ``accept`` tasks, then fails every hand-off."""

    def __init__(self, accept: int = 0) -> None:
        super().__init__()
        self._accept = accept
        self.attempts = 0

    def submit(self, task: DeliveryTask) -> TaskHandle:
        self.attempts += 1
        if len(self.tasks) >= self._accept:
            raise DispatchFailure(details={"reason": "test"})
        return super().submit(task)


class RecordingNotifier(ConfirmationNotifier):
    """Records confirmation notifications."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    async def notify(self, api_key: ApiKey, code: str) -> None:
        self.sent.append((api_key.id, api_key.email, code))

    @property
    def last_code(self) -> str | None:
        return self.sent[-1][2] if self.sent else None


class RecordingDeliverer(LinkDeliverer):
    """Records delivered tasks; links in ``fail_links`` raise instead."""

    def __init__(self, fail_links: set[str] | None = None) -> None:
        self.delivered: list[DeliveryTask] = []
        self.fail_links = fail_links or set()
        self.calls = 0
        self.block: asyncio.Event | None = None

    @property
    def name(self) -> str:
        return "recording"

    async def deliver(self, task: DeliveryTask) -> None:
        self.calls += 1
        if self.block is not None:
            await self.block.wait()
        if task.link in self.fail_links:
            raise RuntimeError(f"cannot deliver {task.link}")
        self.delivered.append(task)

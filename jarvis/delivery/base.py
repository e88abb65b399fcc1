"""Delivery hand-off contracts.

The core never awaits delivery. It hands a DeliveryTask to a
TaskDispatcher and gets a TaskHandle back; what happens to the task
after that belongs to the dispatcher.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class DeliveryTask:
    """Payload handed to the delivery subsystem.

    Attributes:
        api_key_id: Identifier of the key the link was sent with
        email: Owner email at hand-off time
        link: URL to deliver
        title: Optional page title
        preview: Whether the client asked for a preview
        queued: True when the task comes from a queue flush
        task_id: Unique task id, also written to the delivery log
    """

    api_key_id: str
    email: str
    link: str
    title: str | None = None
    preview: bool = False
    queued: bool = False
    task_id: str = field(default_factory=lambda: f"task-{uuid.uuid4().hex[:16]}")


@dataclass(frozen=True)
class TaskHandle:
    """Receipt for a handed-off task."""

    task_id: str


class TaskDispatcher(ABC):
    """Fire-and-forget task submission capability."""

    @abstractmethod
    def submit(self, task: DeliveryTask) -> TaskHandle:
        """Hand off a task without waiting for it to run.

        Raises:
            DispatchFailure: If the task could not be scheduled
        """
        ...


class LinkDeliverer(ABC):
    """Performs the actual delivery of one link."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Deliverer name (for logging)."""
        ...

    @abstractmethod
    async def deliver(self, task: DeliveryTask) -> None:
        """Deliver the link. Raise on failure."""
        ...

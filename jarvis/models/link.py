"""Queued link and delivery log models.

QueuedLink rows are a key's pending links; the autoincrement id is the
queue order. DeliveryLog rows are append-only and written by the
delivery workers after each task runs.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from jarvis.models.api_key import utcnow


class DeliveryStatus(str, Enum):
    """Outcome of one delivery task."""

    DELIVERED = "delivered"
    FAILED = "failed"


class QueuedLink(SQLModel, table=True):
    """A link waiting for the next flush of its key."""

    __tablename__ = "queued_links"

    id: Optional[int] = Field(default=None, primary_key=True)
    api_key_id: str = Field(foreign_key="api_keys.id", index=True)

    link: str
    title: Optional[str] = Field(default=None)
    preview: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow)


class DeliveryLog(SQLModel, table=True):
    """Record of a link that went through the delivery workers."""

    __tablename__ = "delivery_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    api_key_id: str = Field(foreign_key="api_keys.id", index=True)
    task_id: str = Field(index=True)

    link: str
    title: Optional[str] = Field(default=None)
    preview: bool = Field(default=False)
    queued: bool = Field(default=False)

    status: DeliveryStatus
    error: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow)

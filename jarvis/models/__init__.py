"""SQLModel data models."""

from jarvis.models.api_key import ApiKey, ClientSource, KeyStatus
from jarvis.models.link import DeliveryLog, DeliveryStatus, QueuedLink

__all__ = [
    "ApiKey",
    "ClientSource",
    "DeliveryLog",
    "DeliveryStatus",
    "KeyStatus",
    "QueuedLink",
]

"""Link delivery subsystem."""

from jarvis.delivery.base import DeliveryTask, LinkDeliverer, TaskDispatcher, TaskHandle

__all__ = ["DeliveryTask", "LinkDeliverer", "TaskDispatcher", "TaskHandle"]

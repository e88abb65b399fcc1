"""Jarvis services layer."""

from jarvis.services.dispatch import DispatchEngine, Outcome
from jarvis.services.flush import BatchFlusher
from jarvis.services.lifecycle import KeyLifecycle
from jarvis.services.policy import TrustPolicy
from jarvis.services.registration import RegistrationService

__all__ = [
    "BatchFlusher",
    "DispatchEngine",
    "KeyLifecycle",
    "Outcome",
    "RegistrationService",
    "TrustPolicy",
]

"""Concurrency utilities for Jarvis."""

from jarvis.concurrency.locks import get_email_lock, get_key_lock

__all__ = ["get_email_lock", "get_key_lock"]

"""Persistence layer."""

from jarvis.store.keys import KeyStore

__all__ = ["KeyStore"]

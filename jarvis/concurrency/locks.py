"""Per-key in-memory locks.

Every lookup-then-mutate sequence on one API key runs under that key's
lock: queue appends, flush drains, email updates. Registration locks on
the email address instead, since the key may not exist yet.

Note: These locks only work within a single process. Running several
instances against one database needs store-level locking instead.
"""

from __future__ import annotations

import asyncio

# Key: "key:<identifier>" or "email:<address>"
_locks: dict[str, asyncio.Lock] = {}
_locks_lock = asyncio.Lock()


async def _get_lock(name: str) -> asyncio.Lock:
    async with _locks_lock:
        if name not in _locks:
            _locks[name] = asyncio.Lock()
        return _locks[name]


async def get_key_lock(identifier: str) -> asyncio.Lock:
    """Get or create the lock serializing mutations of one API key.

    Args:
        identifier: The API key identifier

    Returns:
        asyncio.Lock for the key
    """
    return await _get_lock(f"key:{identifier}")


async def get_email_lock(email: str) -> asyncio.Lock:
    """Get or create the lock serializing registrations for one email."""
    return await _get_lock(f"email:{email.lower()}")


def get_lock_count() -> int:
    """Get current number of locks (for testing/metrics)."""
    return len(_locks)

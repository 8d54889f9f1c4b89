"""Per-tenant mutual exclusion for swaps."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class TenantLocks:
    """One asyncio.Lock per account id.

    Guarantees at most one in-flight swap per tenant while letting
    different tenants proceed in parallel. Locks are created on demand and
    dropped once nobody holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, account_id: str) -> AsyncIterator[None]:
        """Hold the lock for an account for the duration of the block."""
        lock = self._locks.setdefault(account_id, asyncio.Lock())
        self._waiters[account_id] = self._waiters.get(account_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[account_id] -= 1
            if self._waiters[account_id] == 0:
                del self._waiters[account_id]
                del self._locks[account_id]

    def is_locked(self, account_id: str) -> bool:
        """True if a swap is in flight for the account."""
        lock = self._locks.get(account_id)
        return lock is not None and lock.locked()

"""Concurrency control for transaction signing.

Two swaps paying out of the same address must not read the same pending
nonce. Per-(chain, address) locking serializes freshness-token acquisition,
signing and submission for one address, and the NonceAllocator hands out
strictly increasing nonces even when the node has not seen an earlier
submission yet.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from swapsolver.errors import SolverError

logger = logging.getLogger(__name__)

LockKey = tuple[str, str]

# Global lock registry: (chain, address) -> asyncio.Lock
_address_locks: dict[LockKey, asyncio.Lock] = {}
_registry_lock = asyncio.Lock()


def _key(chain: str, address: str) -> LockKey:
    # EVM addresses are case-insensitive; base58 keys are not
    chain = str(getattr(chain, "value", chain))
    if address.startswith("0x"):
        address = address.lower()
    return chain, address


async def get_address_lock(chain: str, address: str) -> asyncio.Lock:
    """Get or create the lock for a (chain, address) pair."""
    key = _key(chain, address)
    async with _registry_lock:
        if key not in _address_locks:
            _address_locks[key] = asyncio.Lock()
        return _address_locks[key]


class LockTimeoutError(SolverError):
    """Raised when a lock cannot be acquired within the timeout period."""

    retryable = True


@asynccontextmanager
async def address_lock(
    chain: str,
    address: str,
    timeout: Optional[float] = 30.0,
    operation: str = "sign_and_submit",
):
    """Hold exclusive use of an address for the duration of the block.

    Args:
        chain: Chain tag
        address: Sending address
        timeout: Maximum time to wait for lock (None = wait forever)
        operation: Description for logging

    Example:
        async with address_lock("ethereum", pool, operation="swap"):
            nonce = allocator.allocate("ethereum", pool, chain_nonce)
    """
    chain = _key(chain, address)[0]
    lock = await get_address_lock(chain, address)

    try:
        if timeout:
            await asyncio.wait_for(lock.acquire(), timeout=timeout)
        else:
            await lock.acquire()
    except asyncio.TimeoutError:
        logger.warning(f"Lock timeout for {chain}:{address}: {operation}")
        raise LockTimeoutError(
            f"Could not acquire lock for {chain}:{address} within {timeout}s",
            chain=chain,
        )

    logger.debug(f"Lock acquired for {chain}:{address}: {operation}")
    try:
        yield
    finally:
        lock.release()
        logger.debug(f"Lock released for {chain}:{address}: {operation}")


def clear_address_locks() -> None:
    """Clear all address locks (useful for testing)."""
    _address_locks.clear()


class NonceAllocator:
    """Hands out nonces per (chain, address).

    Call only while holding ``address_lock`` for the same pair. The next
    nonce is the higher of the node's pending count and one past the last
    nonce handed out, so back-to-back submissions never collide.
    """

    def __init__(self):
        self._next: dict[LockKey, int] = {}

    def allocate(self, chain: str, address: str, chain_nonce: int) -> int:
        key = _key(chain, address)
        nonce = max(chain_nonce, self._next.get(key, 0))
        self._next[key] = nonce + 1
        return nonce

    def reset(self, chain: str, address: str) -> None:
        """Forget the cached nonce (after a rejection) so the node is trusted again."""
        self._next.pop(_key(chain, address), None)

    def peek(self, chain: str, address: str) -> Optional[int]:
        return self._next.get(_key(chain, address))

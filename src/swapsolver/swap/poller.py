"""Transaction lookup with retries.

A freshly submitted transaction is often not visible on the node yet, so
"not found" is retried while any other adapter error fails immediately.
Retries are bounded three ways: an attempt budget, an optional wall-clock
deadline, and an optional cancellation event checked between attempts.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional

from swapsolver.adapters.base import TransactionRecord
from swapsolver.adapters.factory import AdapterRegistry
from swapsolver.chains import parse_chain
from swapsolver.errors import LookupCancelled, LookupExhausted, Stage, TransactionNotFound

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_DELAY = 5.0


@dataclass(frozen=True)
class RetryPolicy:
    """Delay schedule between lookup attempts.

    ``multiplier=1`` with ``jitter=0`` is the plain fixed delay. Larger
    multipliers give exponential backoff capped at ``max_delay``; ``jitter``
    spreads each delay by up to that fraction in either direction.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delay: float = DEFAULT_DELAY
    multiplier: float = 1.0
    max_delay: float = 30.0
    jitter: float = 0.0
    deadline: Optional[float] = None  # seconds for the whole lookup

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be non-negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")
        if not 0 <= self.jitter <= 1:
            raise ValueError("jitter must be within [0, 1]")

    def delay_for(self, attempt: int, rng: Callable[[], float] = random.random) -> float:
        """Delay after the ``attempt``-th failed attempt (1-based)."""
        base = self.delay * (self.multiplier ** (attempt - 1))
        if self.multiplier > 1:
            base = min(base, self.max_delay)
        if self.jitter:
            base *= 1 + self.jitter * (2 * rng() - 1)
        return max(base, 0.0)

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.lookup_max_attempts,
            delay=settings.lookup_delay,
            multiplier=settings.lookup_backoff,
            max_delay=settings.lookup_max_delay,
            jitter=settings.lookup_jitter,
            deadline=settings.lookup_deadline,
        )


class ConfirmationPoller:
    """Fetches transactions by id, retrying while the node has not seen them."""

    def __init__(self, adapters: AdapterRegistry, policy: Optional[RetryPolicy] = None):
        self.adapters = adapters
        self.policy = policy or RetryPolicy()

    async def fetch(
        self,
        chain,
        tx_id: str,
        max_attempts: Optional[int] = None,
        delay: Optional[float] = None,
        *,
        policy: Optional[RetryPolicy] = None,
        cancel_event: Optional[asyncio.Event] = None,
        until_final: bool = False,
        call_timeout: Optional[float] = None,
    ) -> TransactionRecord:
        """Fetch a transaction record.

        Args:
            chain: Chain tag
            tx_id: Transaction hash / signature
            max_attempts: Override the policy's attempt budget
            delay: Override the policy's base delay
            policy: Use this policy instead of the poller default
            cancel_event: When set, stop before the next attempt
            until_final: Also keep retrying while the record is still pending
            call_timeout: Timeout for each adapter call

        Raises:
            LookupExhausted: attempts or deadline used up
            LookupCancelled: ``cancel_event`` was set
            RPCUnavailable / UnsupportedChain: not retried
        """
        chain = parse_chain(chain, Stage.LOOKUP)
        adapter = self.adapters.get(chain, Stage.LOOKUP)

        policy = policy or self.policy
        if max_attempts is not None or delay is not None:
            policy = RetryPolicy(
                max_attempts=max_attempts if max_attempts is not None else policy.max_attempts,
                delay=delay if delay is not None else policy.delay,
                multiplier=policy.multiplier,
                max_delay=policy.max_delay,
                jitter=policy.jitter,
                deadline=policy.deadline,
            )

        loop = asyncio.get_running_loop()
        deadline_at = loop.time() + policy.deadline if policy.deadline is not None else None

        for attempt in range(1, policy.max_attempts + 1):
            if cancel_event is not None and cancel_event.is_set():
                raise LookupCancelled(
                    f"Lookup of {tx_id} cancelled after {attempt - 1} attempt(s)",
                    chain=chain.value,
                    stage=Stage.LOOKUP,
                )

            try:
                record = await adapter.get_transaction(tx_id, timeout=call_timeout)
                if not (until_final and record.is_pending):
                    if attempt > 1:
                        logger.info(f"Found {chain.value} transaction {tx_id} on attempt {attempt}")
                    return record
                logger.debug(f"{chain.value} transaction {tx_id} still pending")
            except TransactionNotFound:
                logger.debug(
                    f"{chain.value} transaction {tx_id} not found "
                    f"(attempt {attempt}/{policy.max_attempts})"
                )

            if attempt == policy.max_attempts:
                break

            wait = policy.delay_for(attempt)
            if deadline_at is not None and loop.time() + wait > deadline_at:
                raise LookupExhausted(
                    f"Deadline of {policy.deadline}s reached looking up {tx_id} "
                    f"after {attempt} attempt(s)",
                    chain=chain.value,
                    attempts=attempt,
                )

            if cancel_event is None:
                await asyncio.sleep(wait)
            else:
                # wake early on cancellation; the check at loop top raises
                try:
                    await asyncio.wait_for(cancel_event.wait(), timeout=wait)
                except asyncio.TimeoutError:
                    pass

        raise LookupExhausted(
            f"Failed to get {chain.value} transaction {tx_id} after "
            f"{policy.max_attempts} attempt(s)",
            chain=chain.value,
            attempts=policy.max_attempts,
        )

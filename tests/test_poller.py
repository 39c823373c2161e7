"""Tests for transaction lookup with retries."""

import asyncio

import pytest

from swapsolver.chains import Chain
from swapsolver.errors import (
    LookupCancelled,
    LookupExhausted,
    RPCUnavailable,
    UnsupportedChain,
)
from swapsolver.swap import ConfirmationPoller, RetryPolicy

from conftest import eth_transaction, rpc_error, sol_transaction


@pytest.fixture
def poller(context) -> ConfirmationPoller:
    return ConfirmationPoller(context.adapters, RetryPolicy(delay=0))


class TestFetch:
    """Tests for ConfirmationPoller.fetch."""

    @pytest.mark.asyncio
    async def test_found_immediately(self, poller, node):
        node.on("getTransaction", sol_transaction(signature="sig1"))

        record = await poller.fetch(Chain.SOLANA, "sig1")

        assert record.tx_hash == "sig1"
        assert node.count("getTransaction") == 1

    @pytest.mark.asyncio
    async def test_found_on_tenth_attempt(self, poller, node):
        """Nine misses then success returns the record."""
        node.on("eth_getTransactionByHash", *([None] * 9), eth_transaction())

        record = await poller.fetch("ethereum", "0x" + "ab" * 32)

        assert record.value == 10**18
        assert node.count("eth_getTransactionByHash") == 10

    @pytest.mark.asyncio
    async def test_never_found(self, poller, node):
        """Exactly max_attempts calls, then LookupExhausted."""
        node.on("eth_getTransactionByHash", None)

        with pytest.raises(LookupExhausted) as exc_info:
            await poller.fetch("ethereum", "0x" + "ab" * 32)

        assert exc_info.value.attempts == 10
        assert node.count("eth_getTransactionByHash") == 10

    @pytest.mark.asyncio
    async def test_attempt_override(self, poller, node):
        node.on("getTransaction", None)

        with pytest.raises(LookupExhausted):
            await poller.fetch("solana", "sig1", max_attempts=3, delay=0)
        assert node.count("getTransaction") == 3

    @pytest.mark.asyncio
    async def test_transport_errors_not_retried(self, poller, node):
        node.on("getTransaction", rpc_error("node unhealthy"))

        with pytest.raises(RPCUnavailable):
            await poller.fetch("solana", "sig1")
        assert node.count("getTransaction") == 1

    @pytest.mark.asyncio
    async def test_unsupported_chain(self, poller):
        with pytest.raises(UnsupportedChain):
            await poller.fetch("bitcoin", "abc")

    @pytest.mark.asyncio
    async def test_pending_returned_by_default(self, poller, node):
        node.on("eth_getTransactionByHash", eth_transaction(block_number=None))

        record = await poller.fetch("ethereum", "0x" + "ab" * 32)

        assert record.is_pending
        assert node.count("eth_getTransactionByHash") == 1

    @pytest.mark.asyncio
    async def test_until_final_waits_for_block(self, poller, node):
        node.on(
            "eth_getTransactionByHash",
            eth_transaction(block_number=None),
            eth_transaction(block_number=None),
            eth_transaction(block_number=7),
        )

        record = await poller.fetch("ethereum", "0x" + "ab" * 32, until_final=True)

        assert record.block_number == 7
        assert node.count("eth_getTransactionByHash") == 3


class TestCancellation:
    """Tests for cancelling and bounding a lookup."""

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, poller, node):
        event = asyncio.Event()
        event.set()

        with pytest.raises(LookupCancelled):
            await poller.fetch("solana", "sig1", cancel_event=event)
        assert node.count("getTransaction") == 0

    @pytest.mark.asyncio
    async def test_cancel_wakes_sleeping_lookup(self, context, node):
        """Setting the event interrupts a long delay."""
        poller = ConfirmationPoller(context.adapters, RetryPolicy(delay=60))
        event = asyncio.Event()

        def not_found(params):
            event.set()
            return None

        node.on("getTransaction", not_found)

        with pytest.raises(LookupCancelled):
            await asyncio.wait_for(poller.fetch("solana", "sig1", cancel_event=event), timeout=5)
        assert node.count("getTransaction") == 1

    @pytest.mark.asyncio
    async def test_deadline(self, context, node):
        """A wait that would pass the deadline ends the lookup."""
        poller = ConfirmationPoller(context.adapters, RetryPolicy(delay=10, deadline=0.5))
        node.on("getTransaction", None)

        with pytest.raises(LookupExhausted) as exc_info:
            await asyncio.wait_for(poller.fetch("solana", "sig1"), timeout=5)

        assert exc_info.value.attempts == 1
        assert node.count("getTransaction") == 1


class TestRetryPolicy:
    """Tests for the delay schedule."""

    def test_fixed_delay(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 10
        assert [policy.delay_for(n) for n in (1, 5, 9)] == [5.0, 5.0, 5.0]

    def test_exponential_backoff_is_capped(self):
        policy = RetryPolicy(delay=1, multiplier=2, max_delay=5)
        assert [policy.delay_for(n) for n in range(1, 6)] == [1, 2, 4, 5, 5]

    def test_jitter_bounds(self):
        policy = RetryPolicy(delay=10, jitter=0.5)
        assert policy.delay_for(1, rng=lambda: 0.0) == 5
        assert policy.delay_for(1, rng=lambda: 1.0) == 15

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"delay": -1},
            {"multiplier": 0.5},
            {"jitter": 2},
        ],
    )
    def test_invalid_policy(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    def test_from_settings(self, settings):
        policy = RetryPolicy.from_settings(settings)
        assert policy.max_attempts == 3
        assert policy.delay == 0

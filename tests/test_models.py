"""Tests for the swap data model."""

from decimal import Decimal

import pytest

from swapsolver.chains import Chain
from swapsolver.errors import SubmissionRejected
from swapsolver.quotes import SwapQuote
from swapsolver.swap import (
    EthereumParams,
    InvalidTransition,
    SolanaParams,
    SwapExecution,
    SwapStatus,
    TransactionIntent,
)


def make_intent(chain=Chain.ETHEREUM, params=None) -> TransactionIntent:
    if params is None:
        params = EthereumParams(gas_price=1, gas_limit=21000, nonce=0, chain_id=1337)
    return TransactionIntent(
        chain=chain,
        from_address="0x" + "11" * 20,
        to_address="0x" + "22" * 20,
        amount=Decimal("1"),
        native_amount=10**18,
        chain_params=params,
    )


def make_execution() -> SwapExecution:
    quote = SwapQuote.create("SOL", "ETH", Decimal("20"), Decimal("0.05"))
    return SwapExecution(quote=quote, chain=Chain.ETHEREUM, destination_address="0x" + "22" * 20)


class TestTransactionIntent:
    """Tests for intent construction."""

    def test_matching_params(self):
        intent = make_intent()
        assert intent.to_dict()["gas_limit"] == 21000

    def test_mismatched_params_rejected(self):
        """Solana params cannot ride on an Ethereum intent."""
        with pytest.raises(TypeError):
            make_intent(params=SolanaParams(recent_blockhash="abc", lamports=1))

        with pytest.raises(TypeError):
            make_intent(
                chain=Chain.SOLANA,
                params=EthereumParams(gas_price=1, gas_limit=21000, nonce=0, chain_id=1),
            )


class TestSwapExecution:
    """Tests for status transitions."""

    def test_happy_path(self):
        execution = make_execution()
        assert execution.status == SwapStatus.PENDING
        assert execution.raw_signed_tx == ""

        execution.attach_intent(make_intent())
        execution.mark_submitted("0xdeadbeef", "0xhash")
        execution.mark_confirmed()

        assert execution.status == SwapStatus.CONFIRMED
        assert execution.history == [SwapStatus.PENDING, SwapStatus.SUBMITTED, SwapStatus.CONFIRMED]
        assert execution.raw_signed_tx == "0xdeadbeef"
        assert execution.tx_hash == "0xhash"

    def test_failed_is_terminal(self):
        execution = make_execution()
        execution.mark_failed(SubmissionRejected("nope", chain="ethereum"))

        assert execution.status == SwapStatus.FAILED
        with pytest.raises(InvalidTransition):
            execution.mark_submitted("0xdeadbeef", "0xhash")
        with pytest.raises(InvalidTransition):
            execution.mark_failed(SubmissionRejected("again"))

    def test_confirmed_cannot_fail(self):
        execution = make_execution()
        execution.mark_submitted("0xdeadbeef", "0xhash")
        execution.mark_confirmed()

        with pytest.raises(InvalidTransition):
            execution.mark_failed(SubmissionRejected("late"))

    def test_cannot_confirm_before_submit(self):
        execution = make_execution()
        with pytest.raises(InvalidTransition):
            execution.mark_confirmed()

        assert execution.status == SwapStatus.PENDING
        assert execution.history == [SwapStatus.PENDING]

    def test_signed_tx_present_once_past_pending(self):
        """Every status after pending was reached through submission."""
        execution = make_execution()
        execution.attach_intent(make_intent())

        with pytest.raises(InvalidTransition):
            execution.mark_confirmed()
        assert execution.raw_signed_tx == ""

        execution.mark_submitted("0xdeadbeef", "0xhash")
        execution.mark_confirmed()
        assert execution.raw_signed_tx == "0xdeadbeef"

    def test_cannot_submit_twice(self):
        execution = make_execution()
        execution.mark_submitted("0xdeadbeef", "0xhash")
        with pytest.raises(InvalidTransition):
            execution.mark_submitted("0xdeadbeef", "0xhash")

    def test_submit_needs_raw_transaction(self):
        execution = make_execution()
        with pytest.raises(ValueError):
            execution.mark_submitted("", "0xhash")
        assert execution.status == SwapStatus.PENDING

    def test_intent_chain_must_match(self):
        execution = make_execution()
        with pytest.raises(ValueError):
            execution.attach_intent(
                make_intent(
                    chain=Chain.SOLANA,
                    params=SolanaParams(recent_blockhash="abc", lamports=1),
                )
            )

    def test_to_dict(self):
        execution = make_execution()
        execution.mark_failed(SubmissionRejected("nonce too low", chain="ethereum"))

        data = execution.to_dict()
        assert data["status"] == "failed"
        assert data["raw_tx"] is None
        assert data["error"]["error"] == "SubmissionRejected"
        assert data["swap_result"]["to_amount"] == "1.00"

"""Swap transaction pipeline: prepare -> sign -> submit.

Stages run strictly in order and are never retried as a unit. A failed
submit leaves the execution FAILED; retrying means starting over from
prepare so the transaction carries a fresh nonce or blockhash.

For the account chain, ``execute`` holds the per-address lock from nonce
lookup through submission so concurrent swaps paying out of the same pool
cannot reuse a nonce.
"""

import logging
from decimal import Decimal
from typing import Optional

from swapsolver.adapters.base import EthereumFee
from swapsolver.adapters.eth import TRANSFER_GAS_LIMIT
from swapsolver.adapters.factory import AdapterRegistry
from swapsolver.chains import Chain, parse_chain
from swapsolver.errors import (
    AddressParseError,
    AmountOverflow,
    SolverError,
    Stage,
    SubmissionRejected,
)
from swapsolver.hdwallet.base import KeyStore
from swapsolver.pools import PoolDirectory
from swapsolver.quotes.base import SwapQuote
from swapsolver.swap.models import (
    EthereumParams,
    SolanaParams,
    SwapExecution,
    TransactionIntent,
)
from swapsolver.swap.poller import ConfirmationPoller
from swapsolver.swap.signer import SignedTransaction, sign_intent
from swapsolver.units import native_unit, round_down, to_native
from swapsolver.utils.locks import NonceAllocator, address_lock

logger = logging.getLogger(__name__)


class TransactionPipeline:
    """Builds, signs and submits outbound swap transfers.

    Args:
        adapters: Chain adapters
        keys: Derived keypairs
        pools: Resolves the pool address funds are paid from
        ethereum_chain_id: EIP-155 chain id baked into Ethereum signatures
        lock_timeout: Max wait for the per-address lock in ``execute``
        call_timeout: Timeout passed to every adapter call
    """

    def __init__(
        self,
        adapters: AdapterRegistry,
        keys: KeyStore,
        pools: PoolDirectory,
        ethereum_chain_id: int = 1337,
        lock_timeout: Optional[float] = 30.0,
        call_timeout: Optional[float] = None,
    ):
        self.adapters = adapters
        self.keys = keys
        self.pools = pools
        self.ethereum_chain_id = ethereum_chain_id
        self.lock_timeout = lock_timeout
        self.call_timeout = call_timeout
        self.nonces = NonceAllocator()

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def prepare(
        self,
        chain,
        quote: SwapQuote,
        destination_address: str,
        from_address: Optional[str] = None,
    ) -> TransactionIntent:
        """Build the transfer intent paying ``quote.to_amount`` to the destination.

        The payout is truncated to the chain's smallest unit; ``intent.amount``
        holds the truncated value. The source is the chain's pool address
        unless ``from_address`` is given.

        Raises:
            UnsupportedChain, AddressParseError, PoolNotFound, RPCUnavailable,
            AmountOverflow: payout negative, out of range or below one native unit
        """
        chain = parse_chain(chain, Stage.PREPARE)
        self.adapters.get(chain, Stage.PREPARE)

        payout = round_down(quote.to_amount, chain)
        if payout == 0 and quote.to_amount > 0:
            raise AmountOverflow(
                f"Payout {quote.to_amount} {quote.to_token} is below one {native_unit(chain)}",
                chain=chain.value,
                stage=Stage.PREPARE,
            )

        if from_address is None:
            from_address = await self.pools.get_pool_address(chain, Stage.PREPARE)
        return await self.prepare_transfer(chain, from_address, destination_address, payout)

    async def prepare_transfer(
        self,
        chain,
        from_address: str,
        to_address: str,
        amount: Decimal,
        chain_id: Optional[int] = None,
    ) -> TransactionIntent:
        """Build a plain native-coin transfer of ``amount`` whole coins."""
        chain = parse_chain(chain, Stage.PREPARE)
        adapter = self.adapters.get(chain, Stage.PREPARE)

        to_address = self._parse_address(adapter, to_address)
        from_address = self._parse_address(adapter, from_address)

        amount = Decimal(amount)
        native_amount = to_native(amount, chain, Stage.PREPARE)

        token = await adapter.get_nonce_or_blockhash(from_address, timeout=self.call_timeout)
        fee = await adapter.estimate_fee(timeout=self.call_timeout)

        if chain == Chain.ETHEREUM:
            if not isinstance(fee, EthereumFee):
                raise TypeError(f"Ethereum adapter returned {type(fee).__name__} as fee")
            params = EthereumParams(
                gas_price=fee.gas_price,
                gas_limit=TRANSFER_GAS_LIMIT,
                nonce=self.nonces.allocate(chain.value, from_address, token),
                chain_id=chain_id if chain_id is not None else self.ethereum_chain_id,
            )
        else:
            params = SolanaParams(recent_blockhash=token, lamports=native_amount)

        intent = TransactionIntent(
            chain=chain,
            from_address=from_address,
            to_address=to_address,
            amount=amount,
            native_amount=native_amount,
            chain_params=params,
        )
        logger.info(
            f"Prepared {chain.value} transfer of {amount} from {from_address} to {to_address}"
        )
        return intent

    def sign(self, intent: TransactionIntent) -> SignedTransaction:
        """Sign ``intent`` with the derived key for its chain (no network)."""
        return sign_intent(intent, self.keys)

    async def submit(self, execution: SwapExecution, signed: SignedTransaction) -> SwapExecution:
        """Submit a signed transaction and record the outcome on ``execution``.

        Raises:
            SubmissionRejected: node refused it; execution is FAILED
            RPCUnavailable: node unreachable; execution is FAILED
        """
        adapter = self.adapters.get(signed.chain, Stage.SUBMIT)
        try:
            tx_hash = await adapter.submit(signed.raw, timeout=self.call_timeout)
        except SolverError as e:
            execution.mark_failed(e)
            if isinstance(e, SubmissionRejected) and execution.intent is not None:
                self.nonces.reset(execution.chain.value, execution.intent.from_address)
            logger.error(f"Submission failed for {execution.chain.value} swap: {e}")
            raise

        execution.mark_submitted(signed.raw, tx_hash)
        logger.info(f"Submitted {execution.chain.value} transaction {tx_hash}")
        return execution

    # ------------------------------------------------------------------
    # Whole run
    # ------------------------------------------------------------------

    async def execute(
        self,
        chain,
        quote: SwapQuote,
        destination_address: str,
    ) -> SwapExecution:
        """Run prepare, sign and submit for one swap.

        Any stage failure marks the execution FAILED and re-raises.
        """
        chain = parse_chain(chain, Stage.PREPARE)
        execution = SwapExecution(quote=quote, chain=chain, destination_address=destination_address)

        try:
            from_address = await self.pools.get_pool_address(chain, Stage.PREPARE)
            async with address_lock(
                chain.value, from_address, timeout=self.lock_timeout, operation="swap"
            ):
                intent = await self.prepare(chain, quote, destination_address, from_address)
                execution.attach_intent(intent)
                signed = self.sign(intent)
                await self.submit(execution, signed)
        except SolverError as e:
            if execution.intent is not None and execution.tx_hash is None:
                # the allocated nonce was never used on chain
                self.nonces.reset(chain.value, execution.intent.from_address)
            if not execution.status.is_terminal:
                execution.mark_failed(e)
            raise

        return execution

    async def confirm(
        self,
        execution: SwapExecution,
        poller: ConfirmationPoller,
        **fetch_kwargs,
    ) -> SwapExecution:
        """Wait until the submitted transaction is final.

        CONFIRMED when the node reports success, FAILED when it reports an
        execution error. Lookup errors propagate without changing status, so
        the caller can try again later.
        """
        if execution.tx_hash is None:
            raise ValueError("Only a submitted swap can be confirmed")

        record = await poller.fetch(
            execution.chain, execution.tx_hash, until_final=True, **fetch_kwargs
        )
        adapter = self.adapters.get(execution.chain, Stage.LOOKUP)
        record = await adapter.fetch_outcome(record, timeout=self.call_timeout)
        if record.failed:
            execution.mark_failed(
                SubmissionRejected(
                    f"Transaction {execution.tx_hash} failed on chain",
                    chain=execution.chain.value,
                    stage=Stage.LOOKUP,
                )
            )
        else:
            execution.mark_confirmed()
            logger.info(f"Confirmed {execution.chain.value} transaction {execution.tx_hash}")
        return execution

    @staticmethod
    def _parse_address(adapter, address: str) -> str:
        try:
            return adapter.validate_address(address)
        except AddressParseError as e:
            e.stage = Stage.PREPARE
            raise

"""Swap service: the operations exposed over HTTP.

Ties quoting, pool lookup, the transaction pipeline and the poller together.
A swap always settles on the chain of its ``to_token``; the source of funds
is that chain's pool.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from swapsolver.adapters.base import Balance, TransactionRecord
from swapsolver.chains import chain_for_token, parse_chain, token_for_chain
from swapsolver.errors import SolverError, Stage
from swapsolver.quotes.base import SwapQuote
from swapsolver.swap.models import SwapExecution
from swapsolver.units import from_native

logger = logging.getLogger(__name__)


@dataclass
class DepositResult:
    """A looked-up deposit and the swap it triggered, if any."""

    chain: str
    record: TransactionRecord
    execution: Optional[SwapExecution] = None

    def to_dict(self) -> dict:
        data = {
            "status": "success",
            "chain": self.chain,
            "data": self.record.to_dict(),
        }
        if self.execution is not None:
            data["swap_result"] = self.execution.to_dict()
        return data


class SwapService:
    """Quote, execute and look up swaps.

    Args:
        context: Application context holding the shared components
    """

    def __init__(self, context):
        self.context = context

    async def quote(self, from_token: str, to_token: str, amount: Decimal) -> SwapQuote:
        """Price a swap without executing it."""
        # both legs must settle on a supported chain
        chain_for_token(from_token, Stage.QUOTE)
        chain_for_token(to_token, Stage.QUOTE)
        return await self.context.quotes.quote(from_token, to_token, amount)

    async def execute_swap(
        self,
        from_token: str,
        to_token: str,
        amount: Decimal,
        destination_address: str,
    ) -> SwapExecution:
        """Quote and pay out a swap to ``destination_address``.

        Raises:
            SolverError: any stage failure; the execution is FAILED
        """
        chain = chain_for_token(to_token, Stage.QUOTE)
        quote = await self.quote(from_token, to_token, amount)
        logger.info(
            f"Executing swap {quote.from_amount} {quote.from_token} -> "
            f"{quote.to_amount} {quote.to_token} to {destination_address}"
        )
        return await self.context.pipeline.execute(chain, quote, destination_address)

    async def lookup_transaction(self, chain, tx_hash: str, **fetch_kwargs) -> TransactionRecord:
        """Fetch a transaction, retrying while the node has not seen it."""
        return await self.context.poller.fetch(chain, tx_hash, **fetch_kwargs)

    async def process_deposit(
        self,
        chain,
        tx_hash: str,
        to_token: Optional[str] = None,
        destination_address: Optional[str] = None,
    ) -> DepositResult:
        """Look up a deposit and, when a target is given, swap it.

        The swapped amount is what the deposit actually moved on chain:
        ``value`` for Ethereum, the sender's balance drop minus the fee for
        Solana.
        """
        chain = parse_chain(chain, Stage.LOOKUP)
        swap_requested = bool(to_token and destination_address)

        # only a deposit that made it into a block is paid out; one still
        # pending after the retry budget ends in LookupExhausted
        record = await self.lookup_transaction(chain, tx_hash, until_final=swap_requested)
        result = DepositResult(chain=chain.value, record=record)

        if not swap_requested:
            return result

        adapter = self.context.adapters.get(chain, Stage.LOOKUP)
        record = result.record = await adapter.fetch_outcome(record)
        if record.failed:
            raise SolverError(
                f"Deposit {tx_hash} failed on chain, nothing to swap",
                chain=chain.value,
                stage=Stage.LOOKUP,
            )

        amount = from_native(record.transferred_amount, chain)
        from_token = token_for_chain(chain)
        logger.info(f"Deposit {tx_hash} moved {amount} {from_token}")

        result.execution = await self.execute_swap(
            from_token, to_token, amount, destination_address
        )
        return result

    async def get_balance(self, chain, address: str) -> Balance:
        adapter = self.context.adapters.get(chain, Stage.BALANCE)
        return await adapter.get_balance(address)

    async def get_pool_address(self, chain) -> str:
        return await self.context.pools.get_pool_address(chain, Stage.PREPARE)

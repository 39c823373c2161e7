"""Dev-network faucet.

Solana coins come from the validator's airdrop. Ethereum has no airdrop, so
coins are sent from the derived Ethereum account (pre-funded on dev nodes)
through the same sign and submit path the swap pipeline uses.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from swapsolver.chains import Chain, parse_chain
from swapsolver.errors import SolverError, Stage
from swapsolver.units import to_native
from swapsolver.utils.locks import address_lock

logger = logging.getLogger(__name__)


@dataclass
class FaucetResult:
    """Outcome of one faucet request."""

    chain: Chain
    address: str
    amount: Decimal
    tx_hash: str

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "amount": str(self.amount),
            "tx_hash": self.tx_hash,
        }


class FaucetService:
    """Fund addresses on dev networks."""

    def __init__(self, context):
        self.context = context

    async def request(self, chain, address: str, amount: Optional[Decimal] = None) -> FaucetResult:
        """Send ``amount`` (or the configured default) to ``address``."""
        chain = parse_chain(chain, Stage.FAUCET)
        if chain == Chain.SOLANA:
            return await self.airdrop_solana(address, amount)
        return await self.send_ethereum(address, amount)

    async def airdrop_solana(self, address: str, amount: Optional[Decimal] = None) -> FaucetResult:
        amount = Decimal(amount) if amount is not None else self.context.settings.faucet_sol_amount
        lamports = to_native(amount, Chain.SOLANA, Stage.FAUCET)

        adapter = self.context.adapters.get(Chain.SOLANA, Stage.FAUCET)
        signature = await adapter.request_airdrop(address, lamports)
        logger.info(f"Airdropped {amount} SOL to {address}: {signature}")
        return FaucetResult(chain=Chain.SOLANA, address=address, amount=amount, tx_hash=signature)

    async def send_ethereum(self, address: str, amount: Optional[Decimal] = None) -> FaucetResult:
        amount = Decimal(amount) if amount is not None else self.context.settings.faucet_eth_amount
        pipeline = self.context.pipeline
        adapter = self.context.adapters.get(Chain.ETHEREUM, Stage.FAUCET)
        sender = self.context.keys.address(Chain.ETHEREUM)

        # sign for whatever network the node actually runs
        chain_id = await adapter.get_chain_id()

        async with address_lock(
            Chain.ETHEREUM, sender, timeout=pipeline.lock_timeout, operation="faucet"
        ):
            intent = await pipeline.prepare_transfer(
                Chain.ETHEREUM, sender, address, amount, chain_id=chain_id
            )
            try:
                signed = pipeline.sign(intent)
                tx_hash = await adapter.submit(signed.raw)
            except SolverError:
                pipeline.nonces.reset(Chain.ETHEREUM.value, sender)
                raise

        logger.info(f"Faucet sent {amount} ETH to {intent.to_address}: {tx_hash}")
        return FaucetResult(
            chain=Chain.ETHEREUM, address=intent.to_address, amount=amount, tx_hash=tx_hash
        )

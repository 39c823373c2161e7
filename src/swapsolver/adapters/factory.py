"""Adapter registry built from settings."""

import logging
from types import MappingProxyType
from typing import Mapping, Optional

import httpx

from swapsolver.adapters.base import ChainAdapter
from swapsolver.adapters.eth import EthereumAdapter
from swapsolver.adapters.solana import SolanaAdapter
from swapsolver.chains import Chain, parse_chain
from swapsolver.config import Settings
from swapsolver.errors import Stage, UnsupportedChain

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Read-only chain -> ChainAdapter mapping."""

    def __init__(self, adapters: Mapping[Chain, ChainAdapter]):
        self._adapters = MappingProxyType(dict(adapters))

    def get(self, chain, stage: Stage = Stage.PREPARE) -> ChainAdapter:
        """Get adapter for a chain.

        Raises:
            UnsupportedChain: unknown tag or no adapter configured
        """
        chain = parse_chain(chain, stage)
        adapter = self._adapters.get(chain)
        if adapter is None:
            raise UnsupportedChain(
                f"No adapter configured for {chain.value}", chain=chain.value, stage=stage
            )
        return adapter

    @property
    def chains(self) -> list[Chain]:
        return list(self._adapters)

    async def aclose(self) -> None:
        for adapter in self._adapters.values():
            await adapter.aclose()


def create_adapters(
    settings: Settings, client: Optional[httpx.AsyncClient] = None
) -> AdapterRegistry:
    """Create one adapter per supported chain."""
    adapters = {
        Chain.ETHEREUM: EthereumAdapter(
            settings.ethereum_rpc, timeout=settings.rpc_timeout, client=client
        ),
        Chain.SOLANA: SolanaAdapter(
            settings.solana_rpc, timeout=settings.rpc_timeout, client=client
        ),
    }
    logger.info(
        f"Initialized RPC endpoints - Ethereum: {settings.ethereum_rpc}, "
        f"Solana: {settings.solana_rpc}"
    )
    return AdapterRegistry(adapters)

"""Pool address lookup.

A pool address is the chain-specific source of funds for outbound swap legs.
Pools are registered in the solver application; a static map from settings
can stand in for it on dev networks.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping

from swapsolver.chains import parse_chain, token_for_chain
from swapsolver.errors import PoolNotFound, RPCUnavailable, Stage
from swapsolver.graphql import GraphQLClient, GraphQLError

logger = logging.getLogger(__name__)

ALL_POOLS_QUERY = "query pools { getAllPools { chainName poolAddress } }"


@dataclass(frozen=True)
class Pool:
    chain_name: str
    pool_address: str


class PoolDirectory(ABC):
    """Resolves the pool address for a chain."""

    @abstractmethod
    async def get_pools(self) -> list[Pool]:
        """All registered pools."""

    async def get_pool_address(self, chain, stage: Stage = Stage.PREPARE) -> str:
        """Pool address for ``chain``.

        Pools may be registered under the chain tag ("solana") or its native
        token ("SOL").

        Raises:
            PoolNotFound: no pool registered for the chain
        """
        chain = parse_chain(chain, stage)
        names = {chain.value, token_for_chain(chain)}
        for pool in await self.get_pools():
            if pool.chain_name in names or pool.chain_name.lower() == chain.value:
                logger.debug(f"Pool for {chain.value}: {pool.pool_address}")
                return pool.pool_address
        raise PoolNotFound(f"Pool not found for chain: {chain.value}", chain=chain.value, stage=stage)


class StaticPoolDirectory(PoolDirectory):
    """Pools from a fixed chain -> address map."""

    def __init__(self, pools: Mapping[str, str]):
        self._pools = [Pool(chain_name=name, pool_address=addr) for name, addr in pools.items()]

    async def get_pools(self) -> list[Pool]:
        return list(self._pools)


class SolverPoolDirectory(PoolDirectory):
    """Pools from the solver application's ``getAllPools`` query."""

    def __init__(self, client: GraphQLClient):
        self.client = client

    async def get_pools(self) -> list[Pool]:
        try:
            data = await self.client.execute(ALL_POOLS_QUERY, stage=Stage.PREPARE)
        except GraphQLError as e:
            raise RPCUnavailable(f"Failed to get pools: {e}", stage=Stage.PREPARE)
        return [
            Pool(chain_name=p["chainName"], pool_address=p["poolAddress"])
            for p in data.get("getAllPools") or []
        ]


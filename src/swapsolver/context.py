"""Application wiring.

Everything the request handlers need is built once at startup from the
frozen settings and the derived key store, then shared read-only.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from swapsolver.adapters.factory import AdapterRegistry, create_adapters
from swapsolver.config import Settings
from swapsolver.graphql import GraphQLClient
from swapsolver.hdwallet import KeyStore, derive_keypairs
from swapsolver.pools import PoolDirectory, SolverPoolDirectory, StaticPoolDirectory
from swapsolver.quotes import FixedRateQuoteEngine, QuoteEngine, SolverQuoteEngine
from swapsolver.swap.pipeline import TransactionPipeline
from swapsolver.swap.poller import ConfirmationPoller, RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Shared, long-lived components."""

    settings: Settings
    keys: KeyStore
    adapters: AdapterRegistry
    pools: PoolDirectory
    quotes: QuoteEngine
    pipeline: TransactionPipeline
    poller: ConfirmationPoller
    http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def build(
        cls,
        settings: Settings,
        keys: Optional[KeyStore] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "AppContext":
        """Build the context.

        Args:
            settings: Frozen settings
            keys: Pre-derived keys; derived from ``settings.seed_phrase`` if omitted
            client: Shared HTTP client for RPC and solver calls

        Raises:
            InvalidSecret: no usable seed phrase
        """
        if keys is None:
            phrase = settings.seed_phrase.get_secret_value() if settings.seed_phrase else ""
            keys = derive_keypairs(phrase)

        adapters = create_adapters(settings, client=client)
        solver = GraphQLClient(settings.solver_url, timeout=settings.rpc_timeout, client=client)

        if settings.pool_addresses:
            pools: PoolDirectory = StaticPoolDirectory(settings.pool_addresses)
            logger.info(f"Using static pools for: {', '.join(settings.pool_addresses)}")
        else:
            pools = SolverPoolDirectory(solver)

        if settings.quote_rates:
            quotes: QuoteEngine = FixedRateQuoteEngine(settings.quote_rates)
        else:
            quotes = SolverQuoteEngine(solver)
        logger.info(f"Quote engine: {quotes.name}")

        pipeline = TransactionPipeline(
            adapters,
            keys,
            pools,
            ethereum_chain_id=settings.ethereum_chain_id,
            lock_timeout=settings.lock_timeout,
        )
        poller = ConfirmationPoller(adapters, RetryPolicy.from_settings(settings))

        return cls(
            settings=settings,
            keys=keys,
            adapters=adapters,
            pools=pools,
            quotes=quotes,
            pipeline=pipeline,
            poller=poller,
            http_client=client,
        )

    async def aclose(self) -> None:
        await self.adapters.aclose()
        if self.http_client is not None:
            await self.http_client.aclose()

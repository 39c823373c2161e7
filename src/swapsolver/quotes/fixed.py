"""Quote engine backed by a static rate table (dev networks and tests)."""

import logging
from decimal import Decimal
from typing import Mapping

from swapsolver.errors import QuoteUnavailable, Stage
from swapsolver.quotes.base import QuoteEngine

logger = logging.getLogger(__name__)


class FixedRateQuoteEngine(QuoteEngine):
    """Looks up rates in a ``"FROM:TO" -> rate`` table.

    The inverse pair is derived when only one direction is configured.
    Same-token swaps are quoted at 1.
    """

    def __init__(self, rates: Mapping[str, Decimal]):
        self._rates: dict[tuple[str, str], Decimal] = {}
        for pair, rate in rates.items():
            from_token, sep, to_token = pair.partition(":")
            if not sep or not from_token or not to_token:
                raise ValueError(f"Rate key must look like 'FROM:TO', got {pair!r}")
            self._rates[(from_token.strip().upper(), to_token.strip().upper())] = Decimal(rate)

    @property
    def name(self) -> str:
        return "fixed"

    async def get_rate(self, from_token: str, to_token: str, amount: Decimal) -> Decimal:
        if from_token == to_token:
            return Decimal(1)

        rate = self._rates.get((from_token, to_token))
        if rate is not None:
            return rate

        inverse = self._rates.get((to_token, from_token))
        if inverse:
            return Decimal(1) / inverse

        raise QuoteUnavailable(f"No rate configured for {from_token}->{to_token}", stage=Stage.QUOTE)

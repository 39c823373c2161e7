"""Quote engine that asks the solver application for its rate."""

import logging
from decimal import Decimal, InvalidOperation

from swapsolver.errors import QuoteUnavailable, Stage
from swapsolver.graphql import GraphQLClient, GraphQLError
from swapsolver.quotes.base import QuoteEngine

logger = logging.getLogger(__name__)

CALCULATE_SWAP_QUERY = """
query CalculateSwap($fromToken: String!, $toToken: String!, $amount: Float!) {
  calculateSwap(fromToken: $fromToken, toToken: $toToken, amount: $amount) {
    fromToken toToken fromAmount toAmount exchangeRate
  }
}
"""


class SolverQuoteEngine(QuoteEngine):
    """Pricing via the solver application's ``calculateSwap`` query.

    Only the exchange rate is taken from the service; ``to_amount`` is
    recomputed locally so the quote stays internally consistent.
    """

    def __init__(self, client: GraphQLClient):
        self.client = client

    @property
    def name(self) -> str:
        return "solver"

    async def get_rate(self, from_token: str, to_token: str, amount: Decimal) -> Decimal:
        try:
            data = await self.client.execute(
                CALCULATE_SWAP_QUERY,
                {"fromToken": from_token, "toToken": to_token, "amount": float(amount)},
                stage=Stage.QUOTE,
            )
        except GraphQLError as e:
            raise QuoteUnavailable(f"Solver refused quote: {e}", stage=Stage.QUOTE)

        result = data.get("calculateSwap")
        if not result or result.get("exchangeRate") is None:
            raise QuoteUnavailable(
                f"Solver returned no quote for {from_token}->{to_token}", stage=Stage.QUOTE
            )

        try:
            # str() keeps the JSON number's shortest repr instead of binary noise
            rate = Decimal(str(result["exchangeRate"]))
        except InvalidOperation:
            raise QuoteUnavailable(
                f"Solver returned invalid rate {result['exchangeRate']!r}", stage=Stage.QUOTE
            )

        logger.info(f"Quote from solver: 1 {from_token} = {rate} {to_token}")
        return rate

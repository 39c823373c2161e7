"""Swap quote model and the quote engine interface.

The pricing algorithm itself lives outside this service. Whatever rate an
engine returns, ``to_amount == from_amount * exchange_rate`` holds exactly.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, localcontext

from swapsolver.errors import QuoteUnavailable, Stage

# Enough digits that the product of two amounts is never rounded
_QUOTE_PRECISION = 120


def _exact_product(a: Decimal, b: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _QUOTE_PRECISION
        return a * b


@dataclass(frozen=True)
class SwapQuote:
    """An immutable swap quote."""

    from_token: str
    to_token: str
    from_amount: Decimal
    to_amount: Decimal
    exchange_rate: Decimal
    timestamp: float = field(default_factory=time.time, compare=False)

    def __post_init__(self):
        if _exact_product(self.from_amount, self.exchange_rate) != self.to_amount:
            raise ValueError(
                f"Inconsistent quote: {self.from_amount} x {self.exchange_rate} "
                f"!= {self.to_amount}"
            )

    @classmethod
    def create(
        cls, from_token: str, to_token: str, amount: Decimal, exchange_rate: Decimal
    ) -> "SwapQuote":
        """Build a quote, deriving ``to_amount`` from the rate."""
        amount = Decimal(amount)
        exchange_rate = Decimal(exchange_rate)
        return cls(
            from_token=from_token.upper(),
            to_token=to_token.upper(),
            from_amount=amount,
            to_amount=_exact_product(amount, exchange_rate),
            exchange_rate=exchange_rate,
        )

    def to_dict(self) -> dict:
        return {
            "from_token": self.from_token,
            "to_token": self.to_token,
            "from_amount": format(self.from_amount, "f"),
            "to_amount": format(self.to_amount, "f"),
            "exchange_rate": format(self.exchange_rate, "f"),
        }


class QuoteEngine(ABC):
    """Pricing strategy seam."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name identifier."""

    @abstractmethod
    async def get_rate(self, from_token: str, to_token: str, amount: Decimal) -> Decimal:
        """Exchange rate for swapping ``amount`` of ``from_token``."""

    async def quote(self, from_token: str, to_token: str, amount: Decimal) -> SwapQuote:
        """Quote a swap.

        Raises:
            QuoteUnavailable: invalid input or no rate for the pair
        """
        try:
            amount = Decimal(amount)
        except (InvalidOperation, TypeError, ValueError):
            raise QuoteUnavailable(f"Invalid amount: {amount!r}", stage=Stage.QUOTE)
        if not amount.is_finite() or amount < 0:
            raise QuoteUnavailable(f"Invalid amount: {amount}", stage=Stage.QUOTE)

        rate = await self.get_rate(from_token.upper(), to_token.upper(), amount)
        if not rate.is_finite() or rate < 0:
            raise QuoteUnavailable(
                f"{self.name} returned invalid rate {rate} for {from_token}->{to_token}",
                stage=Stage.QUOTE,
            )
        return SwapQuote.create(from_token, to_token, amount, rate)

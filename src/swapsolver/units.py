"""Conversion between whole-coin decimals and native integer units.

ETH uses 10^18 wei per coin, SOL uses 10^9 lamports per coin. All conversions
go through Decimal; a value that would need rounding or that does not fit the
chain's native integer range raises AmountOverflow instead of being truncated.
Computed payouts are truncated explicitly with round_down first.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Union

from swapsolver.chains import get_chain_config, parse_chain
from swapsolver.errors import AmountOverflow, Stage

AmountLike = Union[Decimal, int, str]

# Wide enough for uint256 wei values with 18 fractional digits
_PRECISION = 100


def _as_decimal(amount: AmountLike) -> Decimal:
    if isinstance(amount, float):
        # repr() gives the shortest string that round-trips the float
        amount = repr(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, ValueError, TypeError):
        raise AmountOverflow(f"Not a decimal amount: {amount!r}")
    if not value.is_finite():
        raise AmountOverflow(f"Amount must be finite: {amount!r}")
    return value


def to_native(amount: AmountLike, chain, stage: Stage = Stage.PREPARE) -> int:
    """Convert a whole-coin amount to native integer units.

    Raises:
        AmountOverflow: amount is negative, has more fractional digits than the
            chain supports, or exceeds the native integer range.
    """
    cfg = get_chain_config(chain)
    value = _as_decimal(amount)

    if value < 0:
        raise AmountOverflow(
            f"Negative amount {value} {cfg.symbol}", chain=cfg.chain.value, stage=stage
        )

    with localcontext() as ctx:
        ctx.prec = max(_PRECISION, len(value.as_tuple().digits) + cfg.decimals)
        scaled = value.scaleb(cfg.decimals)
        native = scaled.to_integral_value()
        if native != scaled:
            raise AmountOverflow(
                f"{value} {cfg.symbol} has more than {cfg.decimals} fractional digits",
                chain=cfg.chain.value,
                stage=stage,
            )

    native = int(native)
    if native > cfg.max_native:
        raise AmountOverflow(
            f"{value} {cfg.symbol} exceeds the {cfg.unit} range",
            chain=cfg.chain.value,
            stage=stage,
        )
    return native


def round_down(amount: AmountLike, chain) -> Decimal:
    """Truncate ``amount`` to the chain's smallest unit.

    Used for computed payouts, where a rate can leave more fractional digits
    than the chain represents. Range checks are left to ``to_native``.
    """
    cfg = get_chain_config(chain)
    value = _as_decimal(amount)
    with localcontext() as ctx:
        ctx.prec = max(_PRECISION, value.adjusted() + cfg.decimals + 2)
        return value.quantize(Decimal(1).scaleb(-cfg.decimals), rounding=ROUND_DOWN)


def from_native(native: int, chain) -> Decimal:
    """Convert native integer units to a whole-coin Decimal."""
    cfg = get_chain_config(chain)
    if native < 0 or native > cfg.max_native:
        raise AmountOverflow(
            f"{native} {cfg.unit} is outside the native range",
            chain=cfg.chain.value,
        )
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(int(native)).scaleb(-cfg.decimals)


def wei_to_eth(wei: int) -> Decimal:
    return from_native(wei, "ethereum")


def eth_to_wei(amount: AmountLike) -> int:
    return to_native(amount, "ethereum")


def lamports_to_sol(lamports: int) -> Decimal:
    return from_native(lamports, "solana")


def sol_to_lamports(amount: AmountLike) -> int:
    return to_native(amount, "solana")


def native_unit(chain) -> str:
    return get_chain_config(parse_chain(chain)).unit

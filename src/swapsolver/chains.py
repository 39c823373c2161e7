"""Supported chains and their static configuration.

Two chains are modeled:
- ethereum: account/nonce based, hex addresses, amounts in wei (10^18)
- solana: blockhash based, base58 addresses, amounts in lamports (10^9)
"""

from dataclasses import dataclass
from enum import Enum

from swapsolver.errors import Stage, UnsupportedChain


class Chain(str, Enum):
    """Chain tag."""
    ETHEREUM = "ethereum"
    SOLANA = "solana"


@dataclass(frozen=True)
class ChainConfig:
    """Static configuration for a blockchain."""

    chain: Chain
    name: str
    symbol: str
    decimals: int
    unit: str              # name of the native integer unit
    max_native: int        # largest representable native amount
    coin_type: int         # BIP44 coin type (SLIP-44)


CHAINS: dict[Chain, ChainConfig] = {
    Chain.ETHEREUM: ChainConfig(
        chain=Chain.ETHEREUM,
        name="Ethereum",
        symbol="ETH",
        decimals=18,
        unit="wei",
        max_native=2**256 - 1,
        coin_type=60,
    ),
    Chain.SOLANA: ChainConfig(
        chain=Chain.SOLANA,
        name="Solana",
        symbol="SOL",
        decimals=9,
        unit="lamport",
        max_native=2**64 - 1,
        coin_type=501,
    ),
}

# Native token symbol -> chain it settles on
TOKEN_CHAINS: dict[str, Chain] = {cfg.symbol: chain for chain, cfg in CHAINS.items()}


def parse_chain(value, stage: Stage = Stage.PREPARE) -> Chain:
    """Parse a chain tag, raising UnsupportedChain for anything unknown."""
    if isinstance(value, Chain):
        return value
    try:
        return Chain(str(value).strip().lower())
    except ValueError:
        raise UnsupportedChain(
            f"Unsupported chain: {value!r}. Must be one of "
            f"{', '.join(c.value for c in Chain)}",
            chain=str(value),
            stage=stage,
        )


def get_chain_config(chain) -> ChainConfig:
    """Get configuration for a chain."""
    return CHAINS[parse_chain(chain)]


def chain_for_token(token: str, stage: Stage = Stage.QUOTE) -> Chain:
    """Determine which chain a native token settles on."""
    chain = TOKEN_CHAINS.get(token.upper())
    if chain is None:
        raise UnsupportedChain(f"No chain settles token {token!r}", stage=stage)
    return chain


def token_for_chain(chain) -> str:
    """Native token symbol for a chain."""
    return get_chain_config(chain).symbol

"""Keypair and key store types.

A KeyStore is built once at startup from the seed phrase and never mutated,
so concurrent readers need no synchronization.

Security: private keys are excluded from repr() and are never logged.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping

from swapsolver.chains import Chain, parse_chain
from swapsolver.errors import SigningKeyMissing, Stage, UnsupportedChain


@dataclass(frozen=True)
class KeyPair:
    """Signing keypair for one chain."""

    chain: Chain
    public_key: bytes
    private_key: bytes = field(repr=False)
    address: str
    derivation_path: str


class KeyStore:
    """Read-only chain -> KeyPair mapping."""

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Mapping[Chain, KeyPair]):
        for chain, pair in pairs.items():
            if pair.chain != chain:
                raise ValueError(f"KeyPair for {pair.chain.value} stored under {chain.value}")
        object.__setattr__(self, "_pairs", MappingProxyType(dict(pairs)))

    def __setattr__(self, name, value):
        raise AttributeError("KeyStore is read-only")

    def get(self, chain, stage: Stage = Stage.SIGN) -> KeyPair:
        """Get the keypair for a chain.

        Raises:
            SigningKeyMissing: no keypair was derived for the chain
        """
        chain = parse_chain(chain, stage)
        pair = self._pairs.get(chain)
        if pair is None:
            raise SigningKeyMissing(
                f"No signing key derived for {chain.value}", chain=chain.value, stage=stage
            )
        return pair

    def address(self, chain) -> str:
        return self.get(chain).address

    def __contains__(self, chain) -> bool:
        try:
            return parse_chain(chain) in self._pairs
        except UnsupportedChain:
            return False

    def __iter__(self) -> Iterator[KeyPair]:
        return iter(self._pairs.values())

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        addrs = ", ".join(f"{c.value}={p.address}" for c, p in self._pairs.items())
        return f"KeyStore({addrs})"

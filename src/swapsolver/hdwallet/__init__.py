"""Deterministic key derivation from a BIP-39 seed phrase."""

from swapsolver.hdwallet.base import KeyPair, KeyStore
from swapsolver.hdwallet.factory import derive_keypairs, validate_seed_phrase

__all__ = [
    "KeyPair",
    "KeyStore",
    "derive_keypairs",
    "validate_seed_phrase",
]

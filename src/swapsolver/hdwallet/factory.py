"""Derive every chain's keypair from one seed phrase."""

import logging
from typing import Callable

from bip_utils import Bip39MnemonicValidator, Bip39SeedGenerator

from swapsolver.chains import Chain
from swapsolver.errors import InvalidSecret, Stage
from swapsolver.hdwallet.base import KeyPair, KeyStore
from swapsolver.hdwallet.eth import derive_ethereum_keypair
from swapsolver.hdwallet.solana import derive_solana_keypair

logger = logging.getLogger(__name__)

DERIVERS: dict[Chain, Callable[[bytes], KeyPair]] = {
    Chain.ETHEREUM: derive_ethereum_keypair,
    Chain.SOLANA: derive_solana_keypair,
}


def validate_seed_phrase(seed_phrase: str) -> str:
    """Normalize and validate a BIP-39 phrase.

    Raises:
        InvalidSecret: malformed phrase or bad checksum
    """
    if not isinstance(seed_phrase, str):
        raise InvalidSecret("Seed phrase must be a string", stage=Stage.DERIVE)

    normalized = " ".join(seed_phrase.split())
    if not normalized:
        raise InvalidSecret("Seed phrase is empty", stage=Stage.DERIVE)

    try:
        valid = Bip39MnemonicValidator().IsValid(normalized)
    except (ValueError, TypeError):
        valid = False

    if not valid:
        # never echo the phrase
        raise InvalidSecret("Invalid seed phrase", stage=Stage.DERIVE)
    return normalized


def derive_seed(seed_phrase: str) -> bytes:
    """BIP-39 seed with an empty passphrase."""
    return Bip39SeedGenerator(validate_seed_phrase(seed_phrase)).Generate("")


def derive_keypairs(seed_phrase: str) -> KeyStore:
    """Derive one keypair per supported chain.

    Validation happens before any derivation, so an invalid phrase never
    yields a partial key set.
    """
    seed = derive_seed(seed_phrase)
    pairs = {chain: derive(seed) for chain, derive in DERIVERS.items()}
    store = KeyStore(pairs)
    logger.info(f"Derived chain keys: {store!r}")
    return store

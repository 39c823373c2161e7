"""Solana key derivation.

The ed25519 seed is the first 32 bytes of sha512(bip39_seed). This is not the
BIP44 m/44'/501' path used by most wallets; existing pool and faucet
addresses depend on this exact mapping.
"""

import hashlib

from solders.keypair import Keypair

from swapsolver.chains import Chain
from swapsolver.hdwallet.base import KeyPair

DERIVATION_PATH = "sha512(seed)[:32]"
ED25519_SEED_SIZE = 32


def derive_solana_keypair(seed: bytes) -> KeyPair:
    """Derive the Solana keypair from a BIP-39 seed."""
    ed25519_seed = hashlib.sha512(seed).digest()[:ED25519_SEED_SIZE]
    keypair = Keypair.from_seed(ed25519_seed)
    pubkey = keypair.pubkey()

    return KeyPair(
        chain=Chain.SOLANA,
        public_key=bytes(pubkey),
        # 64 bytes: secret seed followed by the public key
        private_key=bytes(keypair),
        address=str(pubkey),
        derivation_path=DERIVATION_PATH,
    )


def to_solders_keypair(pair: KeyPair) -> Keypair:
    """Rebuild the solders Keypair for signing."""
    return Keypair.from_bytes(pair.private_key)

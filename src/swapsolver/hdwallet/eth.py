"""Ethereum key derivation using BIP44.

Derivation path: m/44'/60'/0'/0/0
Address format: 0x... (EIP-55 checksum encoded)
"""

from bip_utils import Bip44, Bip44Changes, Bip44Coins

from swapsolver.chains import Chain
from swapsolver.hdwallet.base import KeyPair

ACCOUNT_INDEX = 0
ADDRESS_INDEX = 0
DERIVATION_PATH = f"m/44'/60'/{ACCOUNT_INDEX}'/0/{ADDRESS_INDEX}"


def derive_ethereum_keypair(seed: bytes) -> KeyPair:
    """Derive the Ethereum keypair from a BIP-39 seed."""
    bip44 = Bip44.FromSeed(seed, Bip44Coins.ETHEREUM)
    node = (
        bip44.Purpose()
        .Coin()
        .Account(ACCOUNT_INDEX)
        .Change(Bip44Changes.CHAIN_EXT)
        .AddressIndex(ADDRESS_INDEX)
    )

    # ETH addresses hash the uncompressed public key
    public_key = node.PublicKey().RawUncompressed().ToBytes()

    return KeyPair(
        chain=Chain.ETHEREUM,
        public_key=public_key,
        private_key=node.PrivateKey().Raw().ToBytes(),
        address=node.PublicKey().ToAddress(),
        derivation_path=DERIVATION_PATH,
    )

"""Transaction signing for the supported chains.

Signing is pure: it builds the chain's native transaction from an intent,
signs it with the matching derived keypair and serializes it for submission
(0x-hex for Ethereum, base58 for Solana). Nothing here touches the network.
"""

import logging
from dataclasses import dataclass

from bip_utils import Base58Encoder
from eth_account import Account
from eth_utils import to_checksum_address
from solders.hash import Hash
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from swapsolver.chains import Chain
from swapsolver.errors import AddressParseError, SigningKeyMissing, SolverError, Stage
from swapsolver.hdwallet.base import KeyPair, KeyStore
from swapsolver.hdwallet.solana import to_solders_keypair
from swapsolver.swap.models import EthereumParams, SolanaParams, TransactionIntent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignedTransaction:
    """Serialized signed transaction ready for submission."""

    chain: Chain
    raw: str
    tx_hash: str


def _same_address(chain: Chain, a: str, b: str) -> bool:
    if chain == Chain.ETHEREUM:
        return a.lower() == b.lower()
    return a == b


def select_keypair(intent: TransactionIntent, keys: KeyStore) -> KeyPair:
    """The one keypair allowed to sign ``intent``.

    Raises:
        SigningKeyMissing: no key for the chain, or the derived key does not
            control ``intent.from_address``
    """
    pair = keys.get(intent.chain, Stage.SIGN)
    if not _same_address(intent.chain, pair.address, intent.from_address):
        raise SigningKeyMissing(
            f"Derived {intent.chain.value} key ({pair.address}) does not control "
            f"{intent.from_address}",
            chain=intent.chain.value,
            stage=Stage.SIGN,
        )
    return pair


def sign_ethereum(intent: TransactionIntent, pair: KeyPair) -> SignedTransaction:
    """Sign a legacy EIP-155 value transfer."""
    params = intent.chain_params
    if not isinstance(params, EthereumParams):
        raise TypeError(f"Ethereum signing needs EthereumParams, got {type(params).__name__}")

    tx = {
        "nonce": params.nonce,
        "gasPrice": params.gas_price,
        "gas": params.gas_limit,
        "to": to_checksum_address(intent.to_address),
        "value": intent.native_amount,
        "data": b"",
        "chainId": params.chain_id,
    }
    signed = Account.sign_transaction(tx, pair.private_key)

    # eth-account 0.13 renamed rawTransaction to raw_transaction
    raw_tx = getattr(signed, "raw_transaction", None) or signed.rawTransaction
    return SignedTransaction(
        chain=Chain.ETHEREUM,
        raw="0x" + bytes(raw_tx).hex(),
        tx_hash="0x" + bytes(signed.hash).hex(),
    )


def sign_solana(intent: TransactionIntent, pair: KeyPair) -> SignedTransaction:
    """Sign a system-program lamport transfer."""
    params = intent.chain_params
    if not isinstance(params, SolanaParams):
        raise TypeError(f"Solana signing needs SolanaParams, got {type(params).__name__}")

    try:
        from_pubkey = Pubkey.from_string(intent.from_address)
        to_pubkey = Pubkey.from_string(intent.to_address)
    except ValueError as e:
        raise AddressParseError(f"Invalid Solana address: {e}", chain="solana", stage=Stage.SIGN)

    try:
        blockhash = Hash.from_string(params.recent_blockhash)
    except ValueError as e:
        raise SolverError(
            f"Invalid recent blockhash {params.recent_blockhash!r}: {e}",
            chain="solana",
            stage=Stage.SIGN,
        )

    keypair = to_solders_keypair(pair)
    instruction = transfer(
        TransferParams(from_pubkey=from_pubkey, to_pubkey=to_pubkey, lamports=params.lamports)
    )
    message = Message.new_with_blockhash([instruction], keypair.pubkey(), blockhash)
    tx = Transaction([keypair], message, blockhash)

    return SignedTransaction(
        chain=Chain.SOLANA,
        raw=Base58Encoder.Encode(bytes(tx)),
        tx_hash=str(tx.signatures[0]),
    )


_SIGNERS = {
    Chain.ETHEREUM: sign_ethereum,
    Chain.SOLANA: sign_solana,
}


def sign_intent(intent: TransactionIntent, keys: KeyStore) -> SignedTransaction:
    """Sign ``intent`` with the keypair derived for its chain."""
    pair = select_keypair(intent, keys)
    signed = _SIGNERS[intent.chain](intent, pair)
    logger.debug(f"Signed {intent.chain.value} transaction {signed.tx_hash}")
    return signed

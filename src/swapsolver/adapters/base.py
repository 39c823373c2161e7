"""Chain adapter interface.

Each chain hides its RPC shape behind the same capability set. Responses are
parsed into chain-specific typed records right here at the boundary, so
nothing downstream has to dig through dictionaries to work out what it got.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from swapsolver.chains import Chain


@dataclass(frozen=True)
class EthereumFee:
    """Fee parameters for a legacy Ethereum transfer."""

    gas_price: int  # wei


@dataclass(frozen=True)
class SolanaFee:
    """Solana charges a fixed fee per signature; nothing to negotiate."""

    lamports_per_signature: int = 5000


FeeParams = Union[EthereumFee, SolanaFee]


@dataclass(frozen=True)
class Balance:
    """Account balance in whole-coin units."""

    chain: Chain
    address: str
    amount: Decimal
    symbol: str
    native_amount: int

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "amount": str(self.amount),
            "symbol": self.symbol,
            "native_amount": str(self.native_amount),
        }


class TransactionRecord(ABC):
    """A transaction as reported by a chain node."""

    chain: Chain
    tx_hash: str

    @property
    @abstractmethod
    def is_pending(self) -> bool:
        """True while the transaction is not yet in a block."""

    @property
    @abstractmethod
    def failed(self) -> bool:
        """True when the node reports an execution error."""

    @property
    @abstractmethod
    def transferred_amount(self) -> int:
        """Native units moved by the transaction."""

    @abstractmethod
    def to_dict(self) -> dict:
        """JSON-safe representation."""


class ChainAdapter(ABC):
    """Abstract base class for chain adapters.

    Every network call accepts an optional ``timeout`` in seconds that
    overrides the adapter default.
    """

    chain: Chain

    @abstractmethod
    async def get_transaction(
        self, tx_id: str, timeout: Optional[float] = None
    ) -> TransactionRecord:
        """Fetch a transaction by id.

        Raises:
            TransactionNotFound: node does not know the transaction (yet)
            RPCUnavailable: node unreachable
        """

    @abstractmethod
    async def get_nonce_or_blockhash(
        self, address: str, timeout: Optional[float] = None
    ) -> Union[int, str]:
        """Fetch the freshness token a new transaction must carry."""

    @abstractmethod
    async def estimate_fee(self, timeout: Optional[float] = None) -> FeeParams:
        """Fetch current fee parameters."""

    @abstractmethod
    async def submit(self, raw_signed_tx: str, timeout: Optional[float] = None) -> str:
        """Post a signed transaction and return its id.

        Raises:
            SubmissionRejected: node refused it (message kept verbatim)
            RPCUnavailable: node unreachable
        """

    @abstractmethod
    async def get_balance(self, address: str, timeout: Optional[float] = None) -> Balance:
        """Fetch an account balance."""

    @abstractmethod
    def validate_address(self, address: str) -> str:
        """Return the canonical address or raise AddressParseError."""

    async def fetch_outcome(
        self, record: TransactionRecord, timeout: Optional[float] = None
    ) -> TransactionRecord:
        """Return ``record`` with its execution outcome filled in.

        Chains whose transaction lookup already reports success or failure
        return the record unchanged.
        """
        return record

    async def aclose(self) -> None:
        """Release network resources."""

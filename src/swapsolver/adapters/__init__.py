"""Chain adapters: one uniform RPC interface per supported chain."""

from swapsolver.adapters.base import (
    Balance,
    ChainAdapter,
    EthereumFee,
    FeeParams,
    SolanaFee,
    TransactionRecord,
)
from swapsolver.adapters.eth import EthereumAdapter, EthereumTransactionRecord
from swapsolver.adapters.factory import AdapterRegistry, create_adapters
from swapsolver.adapters.solana import SolanaAdapter, SolanaTransactionRecord

__all__ = [
    "AdapterRegistry",
    "Balance",
    "ChainAdapter",
    "EthereumAdapter",
    "EthereumFee",
    "EthereumTransactionRecord",
    "FeeParams",
    "SolanaAdapter",
    "SolanaFee",
    "SolanaTransactionRecord",
    "TransactionRecord",
    "create_adapters",
]

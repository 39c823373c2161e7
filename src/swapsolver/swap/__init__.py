"""Swap execution: models, signing, pipeline and confirmation polling."""

from swapsolver.swap.models import (
    ChainParams,
    EthereumParams,
    InvalidTransition,
    SolanaParams,
    SwapExecution,
    SwapStatus,
    TransactionIntent,
)
from swapsolver.swap.pipeline import TransactionPipeline
from swapsolver.swap.poller import ConfirmationPoller, RetryPolicy
from swapsolver.swap.signer import SignedTransaction, sign_intent

__all__ = [
    "ChainParams",
    "ConfirmationPoller",
    "EthereumParams",
    "InvalidTransition",
    "RetryPolicy",
    "SignedTransaction",
    "SolanaParams",
    "SwapExecution",
    "SwapStatus",
    "TransactionIntent",
    "TransactionPipeline",
    "sign_intent",
]

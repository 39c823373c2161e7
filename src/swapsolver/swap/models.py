"""Swap pipeline data model.

Status transitions are monotonic:

    PENDING -> SUBMITTED -> CONFIRMED
       \\           \\
        +-----------+--> FAILED

CONFIRMED and FAILED are terminal. ``raw_signed_tx`` is recorded together
with the SUBMITTED transition and is never set while PENDING.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from swapsolver.chains import Chain
from swapsolver.errors import SolverError
from swapsolver.quotes.base import SwapQuote


@dataclass(frozen=True)
class EthereumParams:
    """Legacy (EIP-155) transfer parameters."""

    gas_price: int
    gas_limit: int
    nonce: int
    chain_id: int


@dataclass(frozen=True)
class SolanaParams:
    """System-program transfer parameters."""

    recent_blockhash: str
    lamports: int


ChainParams = Union[EthereumParams, SolanaParams]

PARAMS_FOR_CHAIN: dict[Chain, type] = {
    Chain.ETHEREUM: EthereumParams,
    Chain.SOLANA: SolanaParams,
}


@dataclass(frozen=True)
class TransactionIntent:
    """Everything needed to sign a transfer, without the key."""

    chain: Chain
    from_address: str
    to_address: str
    amount: Decimal       # whole-coin units
    native_amount: int    # wei / lamports
    chain_params: ChainParams

    def __post_init__(self):
        expected = PARAMS_FOR_CHAIN.get(self.chain)
        if expected is None or not isinstance(self.chain_params, expected):
            raise TypeError(
                f"{type(self.chain_params).__name__} does not belong to chain {self.chain.value}"
            )

    def to_dict(self) -> dict:
        params = self.chain_params
        data = {
            "chain": self.chain.value,
            "from_address": self.from_address,
            "to_address": self.to_address,
            "amount": str(self.amount),
            "native_amount": str(self.native_amount),
        }
        if isinstance(params, EthereumParams):
            data.update(
                gas_price=str(params.gas_price),
                gas_limit=params.gas_limit,
                nonce=params.nonce,
                chain_id=params.chain_id,
            )
        else:
            data.update(recent_blockhash=params.recent_blockhash, lamports=params.lamports)
        return data


class SwapStatus(str, Enum):
    """Lifecycle of a swap execution."""
    PENDING = "pending"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SwapStatus.CONFIRMED, SwapStatus.FAILED)


_STATUS_ORDER = {
    SwapStatus.PENDING: 0,
    SwapStatus.SUBMITTED: 1,
    SwapStatus.CONFIRMED: 2,
}


class InvalidTransition(ValueError):
    """Status change that would move a swap backwards or out of a terminal state."""


@dataclass
class SwapExecution:
    """One swap moving through prepare -> sign -> submit.

    Owned by the task driving it; only the current stage mutates it.
    """

    quote: SwapQuote
    chain: Chain
    destination_address: str
    intent: Optional[TransactionIntent] = None
    raw_signed_tx: str = ""
    tx_hash: Optional[str] = None
    status: SwapStatus = SwapStatus.PENDING
    error: Optional[SolverError] = None
    history: list[SwapStatus] = field(default_factory=lambda: [SwapStatus.PENDING])
    created_at: float = field(default_factory=time.time)

    def _transition(self, new: SwapStatus) -> None:
        if self.status.is_terminal:
            raise InvalidTransition(f"Swap already {self.status.value}, cannot become {new.value}")
        # one step at a time; FAILED is reachable from any live state
        if new != SwapStatus.FAILED and _STATUS_ORDER[new] != _STATUS_ORDER[self.status] + 1:
            raise InvalidTransition(f"Cannot move from {self.status.value} to {new.value}")
        self.status = new
        self.history.append(new)

    def attach_intent(self, intent: TransactionIntent) -> None:
        if self.status != SwapStatus.PENDING:
            raise InvalidTransition(f"Cannot prepare a swap that is {self.status.value}")
        if intent.chain != self.chain:
            raise ValueError(f"Intent for {intent.chain.value} attached to {self.chain.value} swap")
        self.intent = intent

    def mark_submitted(self, raw_signed_tx: str, tx_hash: str) -> None:
        if not raw_signed_tx:
            raise ValueError("Submitted swap needs a signed transaction")
        self._transition(SwapStatus.SUBMITTED)
        self.raw_signed_tx = raw_signed_tx
        self.tx_hash = tx_hash

    def mark_confirmed(self) -> None:
        self._transition(SwapStatus.CONFIRMED)

    def mark_failed(self, error: SolverError) -> None:
        self._transition(SwapStatus.FAILED)
        self.error = error

    def to_dict(self) -> dict:
        return {
            "tx_hash": self.tx_hash,
            "status": self.status.value,
            "chain": self.chain.value,
            "destination_address": self.destination_address,
            "swap_result": self.quote.to_dict(),
            "tx_to_sign": self.intent.to_dict() if self.intent else None,
            "raw_tx": self.raw_signed_tx or None,
            "error": self.error.to_dict() if self.error else None,
        }

"""Error taxonomy for the swap pipeline.

Every error carries the chain and pipeline stage it came from, so callers can
tell a transient failure (re-run the whole stage) from one that needs fresh
inputs.
"""

from enum import Enum
from typing import Optional


class Stage(str, Enum):
    """Pipeline stage an error was raised in."""
    DERIVE = "derive"
    QUOTE = "quote"
    PREPARE = "prepare"
    SIGN = "sign"
    SUBMIT = "submit"
    LOOKUP = "lookup"
    BALANCE = "balance"
    FAUCET = "faucet"


class SolverError(Exception):
    """Base class for all swap solver errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        chain: Optional[str] = None,
        stage: Optional[Stage] = None,
    ):
        self.message = message
        self.chain = chain
        self.stage = stage
        super().__init__(message)

    def __str__(self) -> str:
        tags = [t for t in (self.chain, self.stage.value if self.stage else None) if t]
        if tags:
            return f"[{'/'.join(tags)}] {self.message}"
        return self.message

    def to_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "chain": self.chain,
            "stage": self.stage.value if self.stage else None,
            "retryable": self.retryable,
        }


class InvalidSecret(SolverError):
    """Seed phrase is malformed or fails the BIP-39 checksum."""


class UnsupportedChain(SolverError):
    """No adapter exists for the requested chain."""


class AddressParseError(SolverError):
    """Address string is not valid for the target chain."""


class RPCUnavailable(SolverError):
    """The chain node could not be reached or timed out."""

    retryable = True


class SigningKeyMissing(SolverError):
    """No derived keypair is available for the intent's chain."""


class SubmissionRejected(SolverError):
    """The node explicitly rejected a signed transaction.

    ``node_message`` holds the node's rejection reason verbatim.
    """

    def __init__(
        self,
        message: str,
        chain: Optional[str] = None,
        stage: Optional[Stage] = Stage.SUBMIT,
        node_message: Optional[str] = None,
    ):
        super().__init__(message, chain, stage)
        self.node_message = node_message if node_message is not None else message


class TransactionNotFound(SolverError):
    """The node does not (yet) know the transaction."""

    retryable = True


class LookupExhausted(SolverError):
    """Retry budget ran out before the transaction became visible."""

    retryable = True

    def __init__(
        self,
        message: str,
        chain: Optional[str] = None,
        stage: Optional[Stage] = Stage.LOOKUP,
        attempts: int = 0,
    ):
        super().__init__(message, chain, stage)
        self.attempts = attempts


class LookupCancelled(SolverError):
    """Caller cancelled a lookup between attempts."""


class AmountOverflow(SolverError):
    """Unit conversion produced a value the chain cannot represent."""


class PoolNotFound(SolverError):
    """No pool address is registered for the chain."""


class QuoteUnavailable(SolverError):
    """The pricing service could not produce a quote."""

    retryable = True

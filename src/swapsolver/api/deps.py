"""Request dependencies and error translation."""

from decimal import Decimal, InvalidOperation

from fastapi import HTTPException, Request, status

from swapsolver.context import AppContext
from swapsolver.errors import (
    AddressParseError,
    AmountOverflow,
    InvalidSecret,
    LookupExhausted,
    PoolNotFound,
    QuoteUnavailable,
    RPCUnavailable,
    SolverError,
    SubmissionRejected,
    TransactionNotFound,
    UnsupportedChain,
)
from swapsolver.services import FaucetService, SwapService
from swapsolver.utils.locks import LockTimeoutError

# Checked in order; first match wins
ERROR_STATUS: list[tuple[type, int]] = [
    (AddressParseError, status.HTTP_400_BAD_REQUEST),
    (UnsupportedChain, status.HTTP_400_BAD_REQUEST),
    (AmountOverflow, status.HTTP_400_BAD_REQUEST),
    (InvalidSecret, status.HTTP_400_BAD_REQUEST),
    (TransactionNotFound, status.HTTP_404_NOT_FOUND),
    (PoolNotFound, status.HTTP_404_NOT_FOUND),
    (SubmissionRejected, status.HTTP_502_BAD_GATEWAY),
    (RPCUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (QuoteUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (LockTimeoutError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (LookupExhausted, status.HTTP_504_GATEWAY_TIMEOUT),
]


def http_error(error: SolverError) -> HTTPException:
    """Translate a pipeline error into an HTTP error."""
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, error_code in ERROR_STATUS:
        if isinstance(error, error_type):
            code = error_code
            break
    return HTTPException(status_code=code, detail=error.to_dict())


def get_context(request: Request) -> AppContext:
    context = request.app.state.context
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting",
        )
    return context


def get_swap_service(request: Request) -> SwapService:
    return SwapService(get_context(request))


def get_faucet_service(request: Request) -> FaucetService:
    return FaucetService(get_context(request))


def parse_amount(value: str, field: str = "amount") -> Decimal:
    """Parse a positive decimal amount from a query parameter."""
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {field} value: {value}",
        )
    if not amount.is_finite() or amount <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{field} must be a positive number",
        )
    return amount

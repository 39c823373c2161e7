"""Quote and swap endpoints."""

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator

from swapsolver.api.deps import get_swap_service, http_error, parse_amount
from swapsolver.chains import TOKEN_CHAINS, Chain, token_for_chain
from swapsolver.errors import SolverError
from swapsolver.services import SwapService

logger = logging.getLogger(__name__)

router = APIRouter()


def _token(value: str) -> str:
    """Accept a token symbol ("SOL") or a chain name ("solana")."""
    value = value.strip()
    if value.lower() in {c.value for c in Chain}:
        return token_for_chain(value)
    return value.upper()


class SwapRequest(BaseModel):
    """Request to execute a swap."""

    from_token: str = Field(..., min_length=2, max_length=20, description="Token paid in")
    to_token: str = Field(..., min_length=2, max_length=20, description="Token paid out")
    amount: Decimal = Field(..., gt=0, description="Amount of from_token")
    destination_address: str = Field(..., min_length=10, max_length=100)

    @field_validator("from_token", "to_token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        """Normalize and check the token settles on a supported chain."""
        token = _token(v)
        if token not in TOKEN_CHAINS:
            raise ValueError(f"Unsupported token: {v}. Supported: {', '.join(sorted(TOKEN_CHAINS))}")
        return token


@router.get("/quote_swap")
async def quote_swap(
    from_chain: str = Query(..., alias="fromChain", min_length=1),
    to_chain: str = Query(..., alias="toChain", min_length=1),
    from_amount: str = Query(..., alias="fromAmount", min_length=1),
    service: SwapService = Depends(get_swap_service),
):
    """Price a swap without executing it."""
    amount = parse_amount(from_amount, "fromAmount")
    try:
        quote = await service.quote(_token(from_chain), _token(to_chain), amount)
    except SolverError as e:
        raise http_error(e)

    data = quote.to_dict()
    return {
        "status": "success",
        "data": {
            "fromChain": from_chain,
            "toChain": to_chain,
            "fromAmount": data["from_amount"],
            "toAmount": data["to_amount"],
            "exchangeRate": data["exchange_rate"],
        },
    }


@router.post("/swap")
async def execute_swap(request: SwapRequest, service: SwapService = Depends(get_swap_service)):
    """Quote and execute a swap, paying out from the pool."""
    try:
        execution = await service.execute_swap(
            request.from_token, request.to_token, request.amount, request.destination_address
        )
    except SolverError as e:
        logger.error(f"Swap {request.from_token}->{request.to_token} failed: {e}")
        raise http_error(e)
    return {"status": "success", "data": execution.to_dict()}

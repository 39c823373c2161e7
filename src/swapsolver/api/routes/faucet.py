"""Faucet endpoint (dev networks only)."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from swapsolver.api.deps import get_context, get_faucet_service, http_error, parse_amount
from swapsolver.context import AppContext
from swapsolver.errors import SolverError
from swapsolver.services import FaucetService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/faucet")
async def faucet(
    chain: str = Query(..., min_length=1),
    address: str = Query(..., min_length=1),
    amount: Optional[str] = Query(None),
    context: AppContext = Depends(get_context),
    service: FaucetService = Depends(get_faucet_service),
):
    """
    Send test coins to an address.

    Without ``amount`` the configured default is sent (1 ETH / 2 SOL).
    Not available in production.
    """
    if context.settings.is_production:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Faucet is not available in production",
        )

    value = parse_amount(amount) if amount is not None else None
    try:
        result = await service.request(chain, address, value)
    except SolverError as e:
        logger.error(f"Faucet request for {address} on {chain} failed: {e}")
        raise http_error(e)
    return {"status": "success", "chain": result.chain.value, "data": result.to_dict()}

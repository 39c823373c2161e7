"""Deposit lookup and deposit-triggered swaps."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from swapsolver.api.deps import get_swap_service, http_error
from swapsolver.errors import SolverError
from swapsolver.services import SwapService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/post_tx_hash")
async def post_tx_hash(
    tx_hash: str = Query(..., alias="txHash", min_length=1),
    chain: str = Query(..., min_length=1),
    to_token: Optional[str] = Query(None, alias="toToken"),
    destination_address: Optional[str] = Query(None, alias="destinationAddress"),
    service: SwapService = Depends(get_swap_service),
):
    """
    Look up a deposit transaction.

    When ``toToken`` and ``destinationAddress`` are both given, the deposited
    amount is swapped and paid out to the destination.
    """
    try:
        result = await service.process_deposit(chain, tx_hash, to_token, destination_address)
    except SolverError as e:
        logger.error(f"Deposit {tx_hash} on {chain} failed: {e}")
        raise http_error(e)
    return result.to_dict()

"""Balance endpoint."""

from fastapi import APIRouter, Depends, Query

from swapsolver.api.deps import get_swap_service, http_error
from swapsolver.chains import parse_chain
from swapsolver.errors import SolverError, Stage
from swapsolver.services import SwapService

router = APIRouter()


@router.get("/fetch_balance")
async def fetch_balance(
    chain: str = Query(..., min_length=1),
    address: str = Query(..., min_length=1),
    service: SwapService = Depends(get_swap_service),
):
    """Native balance of an address."""
    try:
        chain = parse_chain(chain, Stage.BALANCE)
        balance = await service.get_balance(chain, address)
    except SolverError as e:
        raise http_error(e)
    return {"status": "success", "chain": chain.value, "data": balance.to_dict()}

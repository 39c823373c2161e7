"""Pool lookup endpoint."""

from fastapi import APIRouter, Depends, Query

from swapsolver.api.deps import get_swap_service, http_error
from swapsolver.chains import parse_chain
from swapsolver.errors import SolverError
from swapsolver.services import SwapService

router = APIRouter()


@router.get("/get_pool_address")
async def get_pool_address(
    chain: str = Query(..., min_length=1),
    service: SwapService = Depends(get_swap_service),
):
    """Address swaps on ``chain`` are paid out from."""
    try:
        chain = parse_chain(chain)
        address = await service.get_pool_address(chain)
    except SolverError as e:
        raise http_error(e)
    return {"status": "success", "chain": chain.value, "data": {"address": address}}

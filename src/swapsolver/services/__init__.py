"""Services built on the swap pipeline."""

from swapsolver.services.faucet import FaucetResult, FaucetService
from swapsolver.services.swap_service import DepositResult, SwapService

__all__ = [
    "DepositResult",
    "FaucetResult",
    "FaucetService",
    "SwapService",
]

"""Health check endpoints."""

from fastapi import APIRouter, Depends

from swapsolver.api.deps import get_context
from swapsolver.context import AppContext

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "swapsolver"}


@router.get("/health/detailed")
async def detailed_health(context: AppContext = Depends(get_context)):
    """Detailed health check with configuration info."""
    return {
        "status": "healthy",
        "service": "swapsolver",
        "version": "0.1.0",
        "config": context.settings.get_safe_dict(),
        "wallets": {pair.chain.value: pair.address for pair in context.keys},
        "quote_engine": context.quotes.name,
    }

"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swapsolver.config import get_settings
from swapsolver.context import AppContext

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    owned = app.state.context is None
    if owned:
        app.state.context = AppContext.build(get_settings())
    yield
    # Shutdown
    if owned:
        await app.state.context.aclose()
        app.state.context = None


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        context: Prebuilt components; built from settings at startup if omitted
    """
    settings = context.settings if context is not None else get_settings()

    app = FastAPI(
        title="Swap Solver API",
        description="Cross-chain swap execution for Ethereum and Solana",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.context = context

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    from swapsolver.api.routes import balances, faucet, health, pools, swaps, transactions

    app.include_router(health.router, tags=["Health"])
    app.include_router(transactions.router, tags=["Transactions"])
    app.include_router(swaps.router, tags=["Swaps"])
    app.include_router(balances.router, tags=["Balances"])
    app.include_router(pools.router, tags=["Pools"])
    app.include_router(faucet.router, tags=["Faucet"])

    return app

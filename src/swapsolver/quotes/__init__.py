"""Swap quoting."""

from swapsolver.quotes.base import QuoteEngine, SwapQuote
from swapsolver.quotes.fixed import FixedRateQuoteEngine
from swapsolver.quotes.solver import SolverQuoteEngine

__all__ = ["FixedRateQuoteEngine", "QuoteEngine", "SolverQuoteEngine", "SwapQuote"]

"""Off-chain swap quote clients."""
from .jupiter import JupiterQuoteClient, SwapQuote

__all__ = ["JupiterQuoteClient", "SwapQuote"]

"""Jupiter aggregator integration."""
from .payload import EXACT_IN_ROUTES, EXACT_OUT_ROUTES, RouteKind, SwapRoute
from .program import JupiterAggregator

__all__ = ["EXACT_IN_ROUTES", "EXACT_OUT_ROUTES", "JupiterAggregator", "RouteKind", "SwapRoute"]

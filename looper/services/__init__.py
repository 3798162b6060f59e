"""Service modules"""
from .looper import LoopOrchestrator
from .planner import FlowPlan, LoopPlanner
from .positions import PositionMutator
from .refresh import RefreshSequencer
from .swap import PreparedSwap, SwapForwarder

__all__ = [
    "FlowPlan",
    "LoopOrchestrator",
    "LoopPlanner",
    "PositionMutator",
    "PreparedSwap",
    "RefreshSequencer",
    "SwapForwarder",
]

"""Protocol interfaces for the looping core."""
from .aggregator import SwapAggregator
from .host import ProgramHost
from .lending import LendingProgram

__all__ = ["LendingProgram", "ProgramHost", "SwapAggregator"]

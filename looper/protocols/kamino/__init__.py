"""Kamino lending protocol support."""
from .program import KaminoLendingProgram

__all__ = ["KaminoLendingProgram"]

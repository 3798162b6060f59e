"""Solana chain support."""
from .client import SolanaClient

__all__ = ["SolanaClient"]

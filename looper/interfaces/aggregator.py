"""Swap aggregator protocol — one method per route opcode."""
from typing import Protocol, Sequence

from solders.instruction import AccountMeta

from ..authority import ProgramAuthority


class SwapAggregator(Protocol):
    """Abstract interface for the external swap aggregator.

    Every method forwards ``payload`` unmodified; only the account list is
    built locally.
    """

    def route(
        self, accounts: Sequence[AccountMeta], payload: bytes, authority: ProgramAuthority
    ) -> None: ...

    def shared_accounts_route(
        self, accounts: Sequence[AccountMeta], payload: bytes, authority: ProgramAuthority
    ) -> None: ...

    def exact_out_route(
        self, accounts: Sequence[AccountMeta], payload: bytes, authority: ProgramAuthority
    ) -> None: ...

    def shared_accounts_exact_out_route(
        self, accounts: Sequence[AccountMeta], payload: bytes, authority: ProgramAuthority
    ) -> None: ...

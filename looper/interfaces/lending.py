"""Lending program protocol — one method per opcode of the lending program."""
from typing import Protocol, Sequence

from solders.instruction import AccountMeta

from ..authority import ProgramAuthority


class LendingProgram(Protocol):
    """Abstract interface for the external lending program."""

    def refresh_reserve(self, accounts: Sequence[AccountMeta]) -> None: ...

    def refresh_obligation(self, accounts: Sequence[AccountMeta]) -> None: ...

    def deposit_reserve_liquidity_and_obligation_collateral(
        self, accounts: Sequence[AccountMeta], amount: int, authority: ProgramAuthority
    ) -> None: ...

    def borrow_obligation_liquidity(
        self, accounts: Sequence[AccountMeta], amount: int, authority: ProgramAuthority
    ) -> None: ...

    def withdraw_obligation_collateral_and_redeem_reserve_collateral(
        self, accounts: Sequence[AccountMeta], amount: int, authority: ProgramAuthority
    ) -> None: ...

    def repay_obligation_liquidity(
        self, accounts: Sequence[AccountMeta], amount: int, authority: ProgramAuthority
    ) -> None: ...

"""Refresh sequencing — reserve and obligation refreshes ahead of mutations."""
from __future__ import annotations

import logging

from ..interfaces.lending import LendingProgram
from ..models import LendingAccounts, check_flags, has_borrows
from ..protocols.kamino.accounts import refresh_obligation_accounts, refresh_reserve_accounts

logger = logging.getLogger(__name__)


class RefreshSequencer:
    """Issues the unprivileged refresh calls the lending program requires.

    Refreshes are never signed and never skipped: the lending program
    rejects any mutation whose reserves or obligation were not refreshed
    earlier in the same transaction.
    """

    def __init__(self, lending_program: LendingProgram, accounts: LendingAccounts) -> None:
        self._program = lending_program
        self._accounts = accounts

    def refresh_collateral_reserve(self) -> None:
        logger.debug("Refreshing collateral reserve %s", self._accounts.collateral.address)
        self._program.refresh_reserve(
            refresh_reserve_accounts(self._accounts, self._accounts.collateral)
        )

    def refresh_borrow_reserve(self) -> None:
        reserve = self._accounts.borrow
        if reserve is None:
            raise ValueError("No borrow reserve configured")
        logger.debug("Refreshing borrow reserve %s", reserve.address)
        self._program.refresh_reserve(refresh_reserve_accounts(self._accounts, reserve))

    def refresh_obligation(self, flags: int) -> None:
        accounts = refresh_obligation_accounts(self._accounts, check_flags(flags))
        logger.debug(
            "Refreshing obligation %s with %d reserves",
            self._accounts.obligation,
            len(accounts) - 2,
        )
        self._program.refresh_obligation(accounts)

    def refresh_position(self, flags: int) -> None:
        """Collateral reserve, borrow reserve when flagged, then the obligation."""
        self.refresh_collateral_reserve()
        if has_borrows(flags) and self._accounts.borrow is not None:
            self.refresh_borrow_reserve()
        self.refresh_obligation(flags)

"""Position mutations — deposit, borrow, withdraw and repay through the obligation."""
from __future__ import annotations

import logging

from solders.pubkey import Pubkey

from ..authority import ProgramAuthority
from ..interfaces.lending import LendingProgram
from ..models import LendingAccounts
from ..protocols.kamino.accounts import (
    borrow_accounts,
    deposit_accounts,
    repay_accounts,
    withdraw_accounts,
)
from ..wire import U64_MAX

logger = logging.getLogger(__name__)


class PositionMutator:
    """Signed lending calls that move funds between the vaults and the obligation.

    Args:
        lending_program: Lending program capability.
        accounts: Resolved lending accounts.
        authority: Program authority that owns the obligation and vaults.
        collateral_vault: Authority's token account for the collateral asset.
        borrow_vault: Authority's token account for the borrowed asset.
    """

    def __init__(
        self,
        lending_program: LendingProgram,
        accounts: LendingAccounts,
        authority: ProgramAuthority,
        collateral_vault: Pubkey,
        borrow_vault: Pubkey | None = None,
    ) -> None:
        self._program = lending_program
        self._accounts = accounts
        self._authority = authority
        self._collateral_vault = collateral_vault
        self._borrow_vault = borrow_vault

    def deposit(self, amount: int) -> None:
        logger.debug("Depositing %d from %s", amount, self._collateral_vault)
        self._program.deposit_reserve_liquidity_and_obligation_collateral(
            deposit_accounts(self._accounts, self._authority.address, self._collateral_vault),
            amount,
            self._authority,
        )

    def borrow(self, amount: int) -> None:
        vault = self._require_borrow_vault()
        logger.debug("Borrowing %d into %s", amount, vault)
        self._program.borrow_obligation_liquidity(
            borrow_accounts(self._accounts, self._authority.address, vault),
            amount,
            self._authority,
        )

    def withdraw_collateral(self, amount: int) -> None:
        logger.debug("Withdrawing %d collateral into %s", amount, self._collateral_vault)
        self._program.withdraw_obligation_collateral_and_redeem_reserve_collateral(
            withdraw_accounts(self._accounts, self._authority.address, self._collateral_vault),
            amount,
            self._authority,
        )

    def repay(self) -> None:
        """Repay as much debt as the borrow vault holds.

        Always requests the full-balance sentinel; the lending program caps
        it at the outstanding debt and the vault balance.
        """
        vault = self._require_borrow_vault()
        logger.debug("Repaying full balance from %s", vault)
        self._program.repay_obligation_liquidity(
            repay_accounts(self._accounts, self._authority.address, vault),
            U64_MAX,
            self._authority,
        )

    def _require_borrow_vault(self) -> Pubkey:
        if self._borrow_vault is None:
            raise ValueError("No borrow vault configured")
        return self._borrow_vault

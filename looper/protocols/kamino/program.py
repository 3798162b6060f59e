"""Kamino lending program — encodes opcodes and submits them through the host."""
from __future__ import annotations

import logging
from typing import Sequence

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from ...authority import ProgramAuthority
from ...interfaces.host import ProgramHost
from ...wire import with_amount

logger = logging.getLogger(__name__)

REFRESH_RESERVE = bytes([2, 218, 138, 235, 79, 201, 25, 102])
REFRESH_OBLIGATION = bytes([33, 132, 147, 228, 151, 192, 72, 89])
DEPOSIT_RESERVE_LIQUIDITY_AND_OBLIGATION_COLLATERAL_V2 = bytes(
    [216, 224, 191, 27, 204, 151, 102, 175]
)
BORROW_OBLIGATION_LIQUIDITY_V2 = bytes([161, 128, 143, 245, 171, 199, 194, 6])
WITHDRAW_OBLIGATION_COLLATERAL_AND_REDEEM_RESERVE_COLLATERAL_V2 = bytes(
    [235, 52, 119, 152, 149, 197, 20, 7]
)
REPAY_OBLIGATION_LIQUIDITY_V2 = bytes([116, 174, 213, 76, 180, 53, 210, 144])

OPCODE_NAMES: dict[bytes, str] = {
    REFRESH_RESERVE: "refresh_reserve",
    REFRESH_OBLIGATION: "refresh_obligation",
    DEPOSIT_RESERVE_LIQUIDITY_AND_OBLIGATION_COLLATERAL_V2: "deposit",
    BORROW_OBLIGATION_LIQUIDITY_V2: "borrow",
    WITHDRAW_OBLIGATION_COLLATERAL_AND_REDEEM_RESERVE_COLLATERAL_V2: "withdraw_collateral",
    REPAY_OBLIGATION_LIQUIDITY_V2: "repay",
}


def opcode_name(data: bytes) -> str | None:
    """Short name of the lending opcode ``data`` starts with, if any."""
    return OPCODE_NAMES.get(bytes(data[:8]))


class KaminoLendingProgram:
    """Cross-program calls into Kamino lending."""

    def __init__(self, host: ProgramHost, program_id: Pubkey) -> None:
        self._host = host
        self._program_id = program_id

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    def refresh_reserve(self, accounts: Sequence[AccountMeta]) -> None:
        self._invoke(REFRESH_RESERVE, accounts)

    def refresh_obligation(self, accounts: Sequence[AccountMeta]) -> None:
        self._invoke(REFRESH_OBLIGATION, accounts)

    def deposit_reserve_liquidity_and_obligation_collateral(
        self, accounts: Sequence[AccountMeta], amount: int, authority: ProgramAuthority
    ) -> None:
        self._invoke(
            with_amount(DEPOSIT_RESERVE_LIQUIDITY_AND_OBLIGATION_COLLATERAL_V2, amount),
            accounts,
            authority,
        )

    def borrow_obligation_liquidity(
        self, accounts: Sequence[AccountMeta], amount: int, authority: ProgramAuthority
    ) -> None:
        self._invoke(with_amount(BORROW_OBLIGATION_LIQUIDITY_V2, amount), accounts, authority)

    def withdraw_obligation_collateral_and_redeem_reserve_collateral(
        self, accounts: Sequence[AccountMeta], amount: int, authority: ProgramAuthority
    ) -> None:
        self._invoke(
            with_amount(WITHDRAW_OBLIGATION_COLLATERAL_AND_REDEEM_RESERVE_COLLATERAL_V2, amount),
            accounts,
            authority,
        )

    def repay_obligation_liquidity(
        self, accounts: Sequence[AccountMeta], amount: int, authority: ProgramAuthority
    ) -> None:
        self._invoke(with_amount(REPAY_OBLIGATION_LIQUIDITY_V2, amount), accounts, authority)

    def _invoke(
        self,
        data: bytes,
        accounts: Sequence[AccountMeta],
        authority: ProgramAuthority | None = None,
    ) -> None:
        instruction = Instruction(self._program_id, data, list(accounts))
        logger.debug(
            "Kamino %s with %d accounts%s",
            opcode_name(data),
            len(accounts),
            " (signed)" if authority else "",
        )
        self._host.invoke(instruction, authority.signer_seeds if authority else ())

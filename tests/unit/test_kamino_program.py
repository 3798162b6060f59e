"""Unit tests for Kamino instruction encoding."""
from __future__ import annotations

import pytest
from solders.instruction import AccountMeta
from solders.pubkey import Pubkey

from looper.authority import derive_authority
from looper.hosts import RecordingHost
from looper.protocols.kamino import KaminoLendingProgram
from looper.protocols.kamino.program import (
    BORROW_OBLIGATION_LIQUIDITY_V2,
    DEPOSIT_RESERVE_LIQUIDITY_AND_OBLIGATION_COLLATERAL_V2,
    REFRESH_OBLIGATION,
    REFRESH_RESERVE,
    REPAY_OBLIGATION_LIQUIDITY_V2,
    WITHDRAW_OBLIGATION_COLLATERAL_AND_REDEEM_RESERVE_COLLATERAL_V2,
    opcode_name,
)
from looper.wire import U64_MAX


@pytest.fixture()
def kamino() -> tuple[KaminoLendingProgram, RecordingHost]:
    host = RecordingHost()
    return KaminoLendingProgram(host, Pubkey.new_unique()), host


def _metas(n: int = 3) -> list[AccountMeta]:
    return [AccountMeta(Pubkey.new_unique(), is_signer=False, is_writable=True) for _ in range(n)]


class TestOpcodes:
    def test_discriminators(self) -> None:
        assert REFRESH_RESERVE.hex() == "02da8aeb4fc91966"
        assert REFRESH_OBLIGATION.hex() == "218493e497c04859"
        assert DEPOSIT_RESERVE_LIQUIDITY_AND_OBLIGATION_COLLATERAL_V2.hex() == "d8e0bf1bcc9766af"
        assert BORROW_OBLIGATION_LIQUIDITY_V2.hex() == "a1808ff5abc7c206"
        assert (
            WITHDRAW_OBLIGATION_COLLATERAL_AND_REDEEM_RESERVE_COLLATERAL_V2.hex()
            == "eb34779895c51407"
        )
        assert REPAY_OBLIGATION_LIQUIDITY_V2.hex() == "74aed54cb435d290"

    def test_opcode_name(self) -> None:
        assert opcode_name(REPAY_OBLIGATION_LIQUIDITY_V2 + b"\x00" * 8) == "repay"
        assert opcode_name(b"\x00" * 8) is None


class TestKaminoLendingProgram:
    def test_refresh_unsigned_opcode_only(self, kamino) -> None:
        program, host = kamino
        metas = _metas(6)
        program.refresh_reserve(metas)

        (call,) = host.calls
        assert call.program_id == program.program_id
        assert call.data == REFRESH_RESERVE
        assert call.accounts == metas
        assert not call.signed

    def test_refresh_obligation(self, kamino) -> None:
        program, host = kamino
        program.refresh_obligation(_metas(2))
        assert host.calls[0].data == REFRESH_OBLIGATION

    @pytest.mark.parametrize(
        ("method", "opcode"),
        [
            (
                "deposit_reserve_liquidity_and_obligation_collateral",
                DEPOSIT_RESERVE_LIQUIDITY_AND_OBLIGATION_COLLATERAL_V2,
            ),
            ("borrow_obligation_liquidity", BORROW_OBLIGATION_LIQUIDITY_V2),
            (
                "withdraw_obligation_collateral_and_redeem_reserve_collateral",
                WITHDRAW_OBLIGATION_COLLATERAL_AND_REDEEM_RESERVE_COLLATERAL_V2,
            ),
            ("repay_obligation_liquidity", REPAY_OBLIGATION_LIQUIDITY_V2),
        ],
    )
    def test_mutation_encoding(self, kamino, method: str, opcode: bytes) -> None:
        program, host = kamino
        authority = derive_authority(Pubkey.new_unique())
        getattr(program, method)(_metas(), 100, authority)

        (call,) = host.calls
        assert call.data == opcode + bytes([100, 0, 0, 0, 0, 0, 0, 0])
        assert call.signer_seeds == authority.signer_seeds

    def test_max_amount(self, kamino) -> None:
        program, host = kamino
        program.repay_obligation_liquidity(_metas(), U64_MAX, derive_authority(Pubkey.new_unique()))
        assert host.calls[0].data[8:] == b"\xff" * 8

    def test_amount_out_of_range(self, kamino) -> None:
        program, host = kamino
        with pytest.raises(ValueError):
            program.borrow_obligation_liquidity(
                _metas(), U64_MAX + 1, derive_authority(Pubkey.new_unique())
            )
        assert host.calls == ()

"""Ordered account lists for Kamino lending calls — pure functions, no I/O.

Optional accounts the lending program does not need are filled with the
lending program's own id, which the program reads as "not provided".
"""
from __future__ import annotations

from solders.instruction import AccountMeta
from solders.pubkey import Pubkey

from ...models import LendingAccounts, ReserveAccounts, has_borrows, has_collateral


def _writable(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=False, is_writable=True)


def _readonly(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=False, is_writable=False)


def _owner(authority: Pubkey) -> AccountMeta:
    return AccountMeta(authority, is_signer=True, is_writable=True)


def _require_borrow(lending: LendingAccounts) -> ReserveAccounts:
    if lending.borrow is None:
        raise ValueError("No borrow reserve configured")
    return lending.borrow


def _require_collateral(lending: LendingAccounts) -> ReserveAccounts:
    reserve = lending.collateral
    if reserve.collateral_mint is None or reserve.collateral_supply is None:
        raise ValueError("Collateral reserve has no collateral mint or supply configured")
    return reserve


def _farm_accounts(lending: LendingAccounts) -> list[AccountMeta]:
    """Obligation farm user state and reserve farm state, or placeholders."""
    farm_state = lending.collateral.farm_state
    if farm_state is None or lending.obligation_farm_state is None:
        return [_readonly(lending.program_id), _readonly(lending.program_id)]
    return [_writable(lending.obligation_farm_state), _writable(farm_state)]


# ---------------------------------------------------------------------------
# Refresh
# ---------------------------------------------------------------------------


def refresh_reserve_accounts(
    lending: LendingAccounts, reserve: ReserveAccounts
) -> list[AccountMeta]:
    """Six slots: reserve, market, three unused oracle slots, scope oracle."""
    return [
        _writable(reserve.address),
        _readonly(lending.market),
        _readonly(lending.program_id),  # pyth oracle
        _readonly(lending.program_id),  # switchboard price oracle
        _readonly(lending.program_id),  # switchboard twap oracle
        _readonly(lending.scope_oracle),
    ]


def refresh_obligation_accounts(lending: LendingAccounts, flags: int) -> list[AccountMeta]:
    """Market and obligation, then every reserve the obligation references."""
    # Reserves are read here, not written; the lending program accepts them readonly.
    accounts = [_readonly(lending.market), _writable(lending.obligation)]
    if has_collateral(flags):
        accounts.append(_readonly(lending.collateral.address))
    if has_borrows(flags) and lending.borrow is not None:
        accounts.append(_readonly(lending.borrow.address))
    return accounts


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def deposit_accounts(
    lending: LendingAccounts, authority: Pubkey, source_liquidity: Pubkey
) -> list[AccountMeta]:
    reserve = _require_collateral(lending)
    return [
        _owner(authority),
        _writable(lending.obligation),
        _readonly(lending.market),
        _readonly(lending.market_authority),
        _writable(reserve.address),
        _readonly(reserve.liquidity_mint),
        _writable(reserve.liquidity_supply),
        _writable(reserve.collateral_mint),
        _writable(reserve.collateral_supply),
        _writable(source_liquidity),
        _readonly(lending.program_id),  # user destination collateral
        _readonly(lending.token_program),  # collateral token program
        _readonly(lending.token_program),  # liquidity token program
        _readonly(lending.instructions_sysvar),
        *_farm_accounts(lending),
        _readonly(lending.farms_program_id),
    ]


def borrow_accounts(
    lending: LendingAccounts, authority: Pubkey, destination_liquidity: Pubkey
) -> list[AccountMeta]:
    reserve = _require_borrow(lending)
    if reserve.fee_receiver is None:
        raise ValueError("Borrow reserve has no fee receiver configured")
    return [
        _owner(authority),
        _writable(lending.obligation),
        _readonly(lending.market),
        _readonly(lending.market_authority),
        _writable(reserve.address),
        _readonly(reserve.liquidity_mint),
        _writable(reserve.liquidity_supply),
        _writable(reserve.fee_receiver),
        _writable(destination_liquidity),
        _readonly(lending.program_id),  # referrer token state
        _readonly(lending.token_program),
        _readonly(lending.instructions_sysvar),
        _readonly(lending.program_id),  # obligation farm user state
        _readonly(lending.program_id),  # reserve farm state
        _readonly(lending.farms_program_id),
    ]


def withdraw_accounts(
    lending: LendingAccounts, authority: Pubkey, destination_liquidity: Pubkey
) -> list[AccountMeta]:
    reserve = _require_collateral(lending)
    return [
        _owner(authority),
        _writable(lending.obligation),
        _readonly(lending.market),
        _readonly(lending.market_authority),
        _writable(reserve.address),
        _readonly(reserve.liquidity_mint),
        _writable(reserve.collateral_supply),
        _writable(reserve.collateral_mint),
        _writable(reserve.liquidity_supply),
        _writable(destination_liquidity),
        _readonly(lending.program_id),  # user destination collateral
        _readonly(lending.token_program),  # collateral token program
        _readonly(lending.token_program),  # liquidity token program
        _readonly(lending.instructions_sysvar),
        *_farm_accounts(lending),
        _readonly(lending.farms_program_id),
    ]


def repay_accounts(
    lending: LendingAccounts, authority: Pubkey, source_liquidity: Pubkey
) -> list[AccountMeta]:
    reserve = _require_borrow(lending)
    return [
        _owner(authority),
        _writable(lending.obligation),
        _readonly(lending.market),
        _writable(reserve.address),
        _readonly(reserve.liquidity_mint),
        _writable(reserve.liquidity_supply),
        _writable(source_liquidity),
        _readonly(lending.token_program),
        _readonly(lending.instructions_sysvar),
        _readonly(lending.program_id),  # obligation farm user state
        _readonly(lending.program_id),  # reserve farm state
        _readonly(lending.market_authority),
        _readonly(lending.farms_program_id),
    ]

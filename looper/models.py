"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey

# Obligation state bits supplied by the caller. They only select which
# refresh calls are issued; wrong flags surface as a lending-program error.
FLAG_HAS_COLLATERAL = 1 << 0
FLAG_HAS_BORROWS = 1 << 1


def check_flags(flags: int) -> int:
    """Return ``flags`` unchanged if it fits in one byte."""
    if not 0 <= flags <= 0xFF:
        raise ValueError(f"Flags must fit in one byte, got {flags}")
    return flags


def has_collateral(flags: int) -> bool:
    return bool(flags & FLAG_HAS_COLLATERAL)


def has_borrows(flags: int) -> bool:
    return bool(flags & FLAG_HAS_BORROWS)


@dataclass(frozen=True)
class ReserveAccounts:
    """Accounts of one lending reserve (per-asset pool).

    Whether a reserve acts as collateral or borrow side is decided by the
    call it is used in; the collateral-only and borrow-only fields are
    optional here and checked at configuration time.
    """

    address: Pubkey
    liquidity_mint: Pubkey
    liquidity_supply: Pubkey
    collateral_mint: Pubkey | None = None
    collateral_supply: Pubkey | None = None
    fee_receiver: Pubkey | None = None
    farm_state: Pubkey | None = None


@dataclass(frozen=True)
class LendingAccounts:
    """Resolved lending-protocol accounts for one deployment."""

    program_id: Pubkey
    farms_program_id: Pubkey
    market: Pubkey
    market_authority: Pubkey
    obligation: Pubkey
    user_metadata: Pubkey
    scope_oracle: Pubkey
    token_program: Pubkey
    instructions_sysvar: Pubkey
    collateral: ReserveAccounts
    borrow: ReserveAccounts | None = None
    obligation_farm_state: Pubkey | None = None


@dataclass(frozen=True)
class SwapProgramAccounts:
    """Fixed aggregator-side accounts."""

    program_id: Pubkey
    event_authority: Pubkey
    token_program: Pubkey


@dataclass(frozen=True)
class SwapLeg:
    """Direction of one swap: mints and the authority's vaults on each side."""

    input_mint: Pubkey
    input_vault: Pubkey
    output_mint: Pubkey
    output_vault: Pubkey

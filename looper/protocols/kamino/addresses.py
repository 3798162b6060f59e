"""Kamino lending PDAs owned by the program authority."""
from __future__ import annotations

from solders.pubkey import Pubkey

OBLIGATION_TAG = 0
OBLIGATION_ID = 0


def obligation_address(
    lending_program: Pubkey,
    owner: Pubkey,
    market: Pubkey,
    tag: int = OBLIGATION_TAG,
    obligation_id: int = OBLIGATION_ID,
) -> Pubkey:
    """Obligation keyed by (tag, id, owner, market, seed1, seed2).

    Both extra seed accounts are the default (all-zero) key.
    """
    address, _ = Pubkey.find_program_address(
        [
            bytes([tag]),
            bytes([obligation_id]),
            bytes(owner),
            bytes(market),
            bytes(Pubkey.default()),
            bytes(Pubkey.default()),
        ],
        lending_program,
    )
    return address


def user_metadata_address(lending_program: Pubkey, owner: Pubkey) -> Pubkey:
    address, _ = Pubkey.find_program_address(
        [b"user_meta", bytes(owner)], lending_program
    )
    return address


def market_authority_address(lending_program: Pubkey, market: Pubkey) -> Pubkey:
    address, _ = Pubkey.find_program_address([b"lma", bytes(market)], lending_program)
    return address


def obligation_farm_state_address(
    farms_program: Pubkey, reserve_farm_state: Pubkey, obligation: Pubkey
) -> Pubkey:
    address, _ = Pubkey.find_program_address(
        [b"user", bytes(reserve_farm_state), bytes(obligation)], farms_program
    )
    return address

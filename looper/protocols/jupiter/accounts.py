"""Account lists for aggregator route calls, one builder per route kind.

Each builder binds a fixed set of roles and appends the caller's remaining
accounts. Shared-accounts routes take their three aggregator-owned accounts
from the head of the remaining list; the rest pass through untouched except
that they never sign.
"""
from __future__ import annotations

from typing import Callable, Sequence

from solders.instruction import AccountMeta
from solders.pubkey import Pubkey

from ...errors import MissingRouteAccountsError
from ...models import SwapLeg, SwapProgramAccounts
from .payload import RouteKind

EVENT_AUTHORITY_SEED = b"__event_authority"

_FIXED_ACCOUNTS = {
    RouteKind.ROUTE: 9,
    RouteKind.SHARED_ACCOUNTS_ROUTE: 13,
    RouteKind.EXACT_OUT_ROUTE: 11,
    RouteKind.SHARED_ACCOUNTS_EXACT_OUT_ROUTE: 13,
}


def event_authority_address(aggregator_program: Pubkey) -> Pubkey:
    address, _ = Pubkey.find_program_address([EVENT_AUTHORITY_SEED], aggregator_program)
    return address


def _writable(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=False, is_writable=True)


def _readonly(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=False, is_writable=False)


def _passthrough(accounts: Sequence[AccountMeta]) -> list[AccountMeta]:
    return [
        AccountMeta(meta.pubkey, is_signer=False, is_writable=meta.is_writable)
        for meta in accounts
    ]


def _shared_accounts_route(
    swap: SwapProgramAccounts,
    authority: Pubkey,
    leg: SwapLeg,
    remaining: Sequence[AccountMeta],
) -> list[AccountMeta]:
    try:
        program_authority, program_source, program_destination, *route_accounts = remaining
    except ValueError as e:
        raise MissingRouteAccountsError(
            f"Shared-accounts route needs at least 3 remaining accounts, got {len(remaining)}"
        ) from e

    return [
        _readonly(swap.token_program),
        _readonly(program_authority.pubkey),
        AccountMeta(authority, is_signer=True, is_writable=False),
        _writable(leg.input_vault),
        _writable(program_source.pubkey),
        _writable(program_destination.pubkey),
        _writable(leg.output_vault),
        _readonly(leg.input_mint),
        _readonly(leg.output_mint),
        _readonly(swap.program_id),  # platform fee account
        _readonly(swap.program_id),  # token-2022 program
        _readonly(swap.event_authority),
        _readonly(swap.program_id),
        *_passthrough(route_accounts),
    ]


def _exact_out_route(
    swap: SwapProgramAccounts,
    authority: Pubkey,
    leg: SwapLeg,
    remaining: Sequence[AccountMeta],
) -> list[AccountMeta]:
    return [
        _readonly(swap.token_program),
        AccountMeta(authority, is_signer=True, is_writable=False),
        _writable(leg.input_vault),
        _writable(leg.output_vault),
        _readonly(swap.program_id),  # destination token account
        _readonly(leg.input_mint),
        _readonly(leg.output_mint),
        _readonly(swap.program_id),  # platform fee account
        _readonly(swap.program_id),  # token-2022 program
        _readonly(swap.event_authority),
        _readonly(swap.program_id),
        *_passthrough(remaining),
    ]


def _route(
    swap: SwapProgramAccounts,
    authority: Pubkey,
    leg: SwapLeg,
    remaining: Sequence[AccountMeta],
) -> list[AccountMeta]:
    return [
        _readonly(swap.token_program),
        AccountMeta(authority, is_signer=True, is_writable=False),
        _writable(leg.input_vault),
        _writable(leg.output_vault),
        _readonly(swap.program_id),  # destination token account
        _readonly(leg.output_mint),
        _readonly(swap.program_id),  # platform fee account
        _readonly(swap.event_authority),
        _readonly(swap.program_id),
        *_passthrough(remaining),
    ]


_Builder = Callable[
    [SwapProgramAccounts, Pubkey, SwapLeg, Sequence[AccountMeta]], list[AccountMeta]
]

_BUILDERS: dict[RouteKind, _Builder] = {
    RouteKind.ROUTE: _route,
    RouteKind.SHARED_ACCOUNTS_ROUTE: _shared_accounts_route,
    RouteKind.EXACT_OUT_ROUTE: _exact_out_route,
    RouteKind.SHARED_ACCOUNTS_EXACT_OUT_ROUTE: _shared_accounts_route,
}


def build_route_accounts(
    kind: RouteKind,
    swap: SwapProgramAccounts,
    authority: Pubkey,
    leg: SwapLeg,
    remaining: Sequence[AccountMeta],
) -> list[AccountMeta]:
    """Full ordered account list for a ``kind`` route call."""
    return _BUILDERS[kind](swap, authority, leg, remaining)


def remaining_accounts_from(
    kind: RouteKind, accounts: Sequence[AccountMeta]
) -> tuple[AccountMeta, ...]:
    """Recover the caller-supplied slice from a complete route account list.

    This is the inverse of :func:`build_route_accounts` and is used to turn
    the quote service's full instruction into the remaining accounts the
    flows expect.
    """
    fixed = _FIXED_ACCOUNTS[kind]
    if len(accounts) < fixed:
        raise MissingRouteAccountsError(
            f"{kind.name} instruction has {len(accounts)} accounts, expected at least {fixed}"
        )
    if kind.shared_accounts:
        return (accounts[1], accounts[4], accounts[5], *accounts[fixed:])
    return tuple(accounts[fixed:])

"""Swap validation and forwarding to the aggregator."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Collection, Sequence

from solders.instruction import AccountMeta

from ..authority import ProgramAuthority
from ..interfaces.aggregator import SwapAggregator
from ..models import SwapLeg, SwapProgramAccounts
from ..protocols.jupiter.accounts import build_route_accounts
from ..protocols.jupiter.payload import RouteKind, SwapRoute, validate_route

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedSwap:
    """A validated route with its reconstructed account list."""

    route: SwapRoute
    accounts: tuple[AccountMeta, ...]


class SwapForwarder:
    """Validates caller-supplied swap payloads and forwards them, signed.

    Validation and account reconstruction happen in :meth:`prepare`, which
    issues no call; :meth:`forward` issues exactly one.
    """

    def __init__(
        self,
        aggregator: SwapAggregator,
        accounts: SwapProgramAccounts,
        authority: ProgramAuthority,
        slippage_bps: int,
    ) -> None:
        self._aggregator = aggregator
        self._accounts = accounts
        self._authority = authority
        self._slippage_bps = slippage_bps

    @property
    def slippage_bps(self) -> int:
        return self._slippage_bps

    def prepare(
        self,
        payload: bytes,
        *,
        expected_amount: int,
        leg: SwapLeg,
        remaining_accounts: Sequence[AccountMeta],
        allowed: Collection[RouteKind],
    ) -> PreparedSwap:
        route = validate_route(
            payload,
            expected_amount=expected_amount,
            slippage_bps=self._slippage_bps,
            allowed=allowed,
        )
        accounts = build_route_accounts(
            route.kind, self._accounts, self._authority.address, leg, remaining_accounts
        )
        return PreparedSwap(route=route, accounts=tuple(accounts))

    def forward(self, swap: PreparedSwap) -> None:
        route = swap.route
        logger.info(
            "Forwarding %s swap of %d (quoted %d)",
            route.kind.name,
            route.amount,
            route.quoted_amount,
        )
        method = {
            RouteKind.ROUTE: self._aggregator.route,
            RouteKind.SHARED_ACCOUNTS_ROUTE: self._aggregator.shared_accounts_route,
            RouteKind.EXACT_OUT_ROUTE: self._aggregator.exact_out_route,
            RouteKind.SHARED_ACCOUNTS_EXACT_OUT_ROUTE: self._aggregator.shared_accounts_exact_out_route,
        }[route.kind]
        method(swap.accounts, route.payload, self._authority)

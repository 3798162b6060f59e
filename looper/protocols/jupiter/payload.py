"""Swap payload parsing and validation — pure functions, no I/O.

A payload is produced by the off-chain quote service and is never decoded
beyond its leading route opcode and its fixed-size tail::

    [opcode:8][route plan ...][amount:u64][quoted:u64][slippage_bps:u16][platform_fee_bps:u8]

For exact-in routes ``amount`` is the input amount, for exact-out routes it
is the output amount.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Collection

from ...errors import (
    PayloadTooShortError,
    SlippageMismatchError,
    SwapAmountMismatchError,
    UnknownRouteError,
)
from ...wire import read_u16, read_u64

logger = logging.getLogger(__name__)

OPCODE_SIZE = 8
TAIL_SIZE = 8 + 8 + 2 + 1
MIN_PAYLOAD_SIZE = OPCODE_SIZE + TAIL_SIZE


class RouteKind(Enum):
    """Recognized aggregator route opcodes."""

    ROUTE = bytes([229, 23, 203, 151, 122, 227, 173, 42])
    SHARED_ACCOUNTS_ROUTE = bytes([193, 32, 155, 51, 65, 214, 156, 129])
    EXACT_OUT_ROUTE = bytes([208, 51, 239, 151, 123, 43, 237, 92])
    SHARED_ACCOUNTS_EXACT_OUT_ROUTE = bytes([176, 209, 105, 168, 154, 125, 69, 62])

    @property
    def discriminator(self) -> bytes:
        return self.value

    @property
    def exact_out(self) -> bool:
        return self in EXACT_OUT_ROUTES

    @property
    def shared_accounts(self) -> bool:
        return self in (RouteKind.SHARED_ACCOUNTS_ROUTE, RouteKind.SHARED_ACCOUNTS_EXACT_OUT_ROUTE)

    @classmethod
    def from_payload(cls, payload: bytes) -> RouteKind | None:
        return _ROUTES_BY_OPCODE.get(bytes(payload[:OPCODE_SIZE]))


EXACT_IN_ROUTES = frozenset({RouteKind.ROUTE, RouteKind.SHARED_ACCOUNTS_ROUTE})
EXACT_OUT_ROUTES = frozenset(
    {RouteKind.EXACT_OUT_ROUTE, RouteKind.SHARED_ACCOUNTS_EXACT_OUT_ROUTE}
)
ALL_ROUTES = EXACT_IN_ROUTES | EXACT_OUT_ROUTES

_ROUTES_BY_OPCODE: dict[bytes, RouteKind] = {kind.value: kind for kind in RouteKind}


@dataclass(frozen=True)
class SwapRoute:
    """A parsed swap payload. ``payload`` is kept byte-for-byte for forwarding."""

    kind: RouteKind
    payload: bytes
    amount: int
    quoted_amount: int
    slippage_bps: int
    platform_fee_bps: int


def parse_route(
    payload: bytes, allowed: Collection[RouteKind] = ALL_ROUTES
) -> SwapRoute:
    """Decode the opcode, then the fixed tail.

    Raises:
        UnknownRouteError: the opcode is not one of ``allowed``.
        PayloadTooShortError: the payload cannot hold the opcode and tail.
    """
    payload = bytes(payload)
    kind = RouteKind.from_payload(payload)
    if kind is None or kind not in allowed:
        raise UnknownRouteError(
            f"Unrecognized swap route opcode {payload[:OPCODE_SIZE].hex() or '<empty>'}"
        )
    if len(payload) < MIN_PAYLOAD_SIZE:
        raise PayloadTooShortError(
            f"Swap payload is {len(payload)} bytes, need at least {MIN_PAYLOAD_SIZE}"
        )

    tail = len(payload) - TAIL_SIZE
    return SwapRoute(
        kind=kind,
        payload=payload,
        amount=read_u64(payload, tail),
        quoted_amount=read_u64(payload, tail + 8),
        slippage_bps=read_u16(payload, tail + 16),
        platform_fee_bps=payload[tail + 18],
    )


def validate_route(
    payload: bytes,
    *,
    expected_amount: int,
    slippage_bps: int,
    allowed: Collection[RouteKind] = ALL_ROUTES,
) -> SwapRoute:
    """Parse ``payload`` and check its amount and slippage fields.

    Args:
        payload: Raw swap instruction data from the quote service.
        expected_amount: Amount computed by the calling flow; the payload
            must carry exactly this value.
        slippage_bps: The only accepted slippage tolerance.
        allowed: Route kinds accepted for the calling flow.
    """
    try:
        route = parse_route(payload, allowed)
        if route.amount != expected_amount:
            raise SwapAmountMismatchError(expected_amount, route.amount)
        if route.slippage_bps != slippage_bps:
            raise SlippageMismatchError(slippage_bps, route.slippage_bps)
    except (UnknownRouteError, PayloadTooShortError, SwapAmountMismatchError, SlippageMismatchError) as e:
        logger.warning("Rejected swap payload: %s", e)
        raise

    logger.debug(
        "Accepted %s payload: amount=%d quoted=%d slippage=%d bps",
        route.kind.name,
        route.amount,
        route.quoted_amount,
        route.slippage_bps,
    )
    return route

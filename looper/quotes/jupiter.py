"""Jupiter quote API client — fetches swap payloads for the leverage flows."""
from __future__ import annotations

import base64
import logging
import ssl
from dataclasses import dataclass
from typing import Any

import aiohttp
import certifi
from solders.instruction import AccountMeta
from solders.pubkey import Pubkey

from ..config import SwapConfig
from ..errors import UnknownRouteError
from ..protocols.jupiter.accounts import remaining_accounts_from
from ..protocols.jupiter.payload import RouteKind

logger = logging.getLogger(__name__)

EXACT_IN = "ExactIn"
EXACT_OUT = "ExactOut"


@dataclass(frozen=True)
class SwapQuote:
    """A quoted route, ready to be passed to a leverage flow."""

    kind: RouteKind
    payload: bytes
    remaining_accounts: tuple[AccountMeta, ...]
    in_amount: int
    out_amount: int
    slippage_bps: int


def _account_meta(raw: dict[str, Any]) -> AccountMeta:
    return AccountMeta(
        Pubkey.from_string(raw["pubkey"]),
        is_signer=bool(raw.get("isSigner", False)),
        is_writable=bool(raw.get("isWritable", False)),
    )


def parse_swap_instruction(raw: dict[str, Any]) -> tuple[RouteKind, bytes, tuple[AccountMeta, ...]]:
    """Split a ``swapInstruction`` object into route kind, payload and remaining accounts."""
    payload = base64.b64decode(raw["data"])
    kind = RouteKind.from_payload(payload)
    if kind is None:
        raise UnknownRouteError(
            f"Quote service returned unrecognized route opcode {payload[:8].hex()}"
        )
    accounts = [_account_meta(item) for item in raw.get("accounts", [])]
    return kind, payload, remaining_accounts_from(kind, accounts)


class JupiterQuoteClient:
    """Fetch quotes and swap instructions from the Jupiter HTTP API."""

    def __init__(self, config: SwapConfig) -> None:
        self.base_url = config.quote_api_url.rstrip("/")
        self.slippage_bps = config.slippage_bps
        self.timeout = config.quote_timeout

    async def _request(
        self, session: aiohttp.ClientSession, method: str, path: str, **kwargs: Any
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        async with session.request(
            method, url, timeout=aiohttp.ClientTimeout(total=self.timeout), **kwargs
        ) as response:
            if response.status != 200:
                body = await response.text()
                raise RuntimeError(f"Jupiter {path} failed: HTTP {response.status} {body}")
            return await response.json()

    async def get_swap(
        self,
        input_mint: Pubkey,
        output_mint: Pubkey,
        amount: int,
        user: Pubkey,
        swap_mode: str = EXACT_IN,
    ) -> SwapQuote:
        """Quote ``amount`` and fetch the matching swap instruction for ``user``.

        Args:
            input_mint: Mint sold.
            output_mint: Mint bought.
            amount: Input amount for ``ExactIn``, output amount for ``ExactOut``.
            user: Account that signs the swap, the program authority.
            swap_mode: ``ExactIn`` or ``ExactOut``.
        """
        if swap_mode not in (EXACT_IN, EXACT_OUT):
            raise ValueError(f"Unknown swap mode: {swap_mode}")

        params = {
            "inputMint": str(input_mint),
            "outputMint": str(output_mint),
            "amount": str(amount),
            "slippageBps": str(self.slippage_bps),
            "swapMode": swap_mode,
        }

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            quote = await self._request(session, "GET", "/quote", params=params)
            logger.info(
                "Jupiter quote %s: in=%s out=%s",
                swap_mode,
                quote.get("inAmount"),
                quote.get("outAmount"),
            )
            instructions = await self._request(
                session,
                "POST",
                "/swap-instructions",
                json={
                    "quoteResponse": quote,
                    "userPublicKey": str(user),
                    "useSharedAccounts": True,
                    "wrapAndUnwrapSol": False,
                },
            )

        kind, payload, remaining = parse_swap_instruction(instructions["swapInstruction"])
        logger.debug(
            "Jupiter %s payload: %d bytes, %d remaining accounts",
            kind.name,
            len(payload),
            len(remaining),
        )
        return SwapQuote(
            kind=kind,
            payload=payload,
            remaining_accounts=remaining,
            in_amount=int(quote["inAmount"]),
            out_amount=int(quote["outAmount"]),
            slippage_bps=int(quote.get("slippageBps", self.slippage_bps)),
        )

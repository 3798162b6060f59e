"""Jupiter aggregator program — forwards validated route payloads verbatim."""
from __future__ import annotations

import logging
from typing import Sequence

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from ...authority import ProgramAuthority
from ...errors import UnknownRouteError
from ...interfaces.host import ProgramHost
from .payload import RouteKind

logger = logging.getLogger(__name__)


class JupiterAggregator:
    """Cross-program calls into the Jupiter aggregator.

    Route internals are never decoded here; the payload must already carry
    the opcode of the method it is passed to.
    """

    def __init__(self, host: ProgramHost, program_id: Pubkey) -> None:
        self._host = host
        self._program_id = program_id

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    def route(
        self, accounts: Sequence[AccountMeta], payload: bytes, authority: ProgramAuthority
    ) -> None:
        self._forward(RouteKind.ROUTE, accounts, payload, authority)

    def shared_accounts_route(
        self, accounts: Sequence[AccountMeta], payload: bytes, authority: ProgramAuthority
    ) -> None:
        self._forward(RouteKind.SHARED_ACCOUNTS_ROUTE, accounts, payload, authority)

    def exact_out_route(
        self, accounts: Sequence[AccountMeta], payload: bytes, authority: ProgramAuthority
    ) -> None:
        self._forward(RouteKind.EXACT_OUT_ROUTE, accounts, payload, authority)

    def shared_accounts_exact_out_route(
        self, accounts: Sequence[AccountMeta], payload: bytes, authority: ProgramAuthority
    ) -> None:
        self._forward(RouteKind.SHARED_ACCOUNTS_EXACT_OUT_ROUTE, accounts, payload, authority)

    def _forward(
        self,
        kind: RouteKind,
        accounts: Sequence[AccountMeta],
        payload: bytes,
        authority: ProgramAuthority,
    ) -> None:
        if RouteKind.from_payload(payload) is not kind:
            raise UnknownRouteError(f"Payload opcode does not match {kind.name}")
        instruction = Instruction(self._program_id, bytes(payload), list(accounts))
        logger.debug(
            "Jupiter %s: %d bytes, %d accounts", kind.name, len(payload), len(accounts)
        )
        self._host.invoke(instruction, authority.signer_seeds)

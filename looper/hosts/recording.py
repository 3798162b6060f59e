"""In-memory program host that records cross-program calls.

Backs dry-run planning and the test-suite. Calls issued inside
``transaction()`` are buffered and only become visible in ``calls`` once the
block exits cleanly; an exception discards the buffer and restores every
token balance to its value at the start of the block.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Mapping, Sequence

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from ..errors import ExternalProgramError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrossProgramCall:
    """One submitted instruction and the signer proof it carried."""

    instruction: Instruction
    signer_seeds: tuple[bytes, ...] = ()

    @property
    def program_id(self) -> Pubkey:
        return self.instruction.program_id

    @property
    def data(self) -> bytes:
        return bytes(self.instruction.data)

    @property
    def accounts(self) -> list[AccountMeta]:
        return list(self.instruction.accounts)

    @property
    def signed(self) -> bool:
        return bool(self.signer_seeds)


InvokeHook = Callable[[CrossProgramCall, "RecordingHost"], None]


class RecordingHost:
    """Program host backed by an in-memory balance ledger.

    Args:
        balances: Initial raw token balances keyed by token account.
        program_id: Identifier of the calling program. When given, every
            signed call must carry seeds that derive each signer account
            under this id, mirroring the runtime's signature check.
        on_invoke: Optional hook run for every call before it is recorded;
            it may move balances or raise ``ExternalProgramError`` to
            simulate a rejection.
    """

    def __init__(
        self,
        balances: Mapping[Pubkey, int] | None = None,
        program_id: Pubkey | None = None,
        on_invoke: InvokeHook | None = None,
    ) -> None:
        self._balances: dict[Pubkey, int] = dict(balances or {})
        self._program_id = program_id
        self._on_invoke = on_invoke
        self._committed: list[CrossProgramCall] = []
        self._pending: list[CrossProgramCall] | None = None

    @property
    def calls(self) -> tuple[CrossProgramCall, ...]:
        """Committed calls in submission order."""
        return tuple(self._committed)

    @property
    def in_transaction(self) -> bool:
        return self._pending is not None

    # ------------------------------------------------------------------
    # ProgramHost
    # ------------------------------------------------------------------

    def invoke(self, instruction: Instruction, signer_seeds: Sequence[bytes] = ()) -> None:
        call = CrossProgramCall(instruction, tuple(signer_seeds))
        self._check_signers(call)
        if self._on_invoke is not None:
            self._on_invoke(call, self)

        if self._pending is None:
            self._committed.append(call)
        else:
            self._pending.append(call)
        logger.debug(
            "Recorded call to %s (%d bytes, %d accounts)",
            call.program_id,
            len(call.data),
            len(call.accounts),
        )

    def token_balance(self, token_account: Pubkey) -> int:
        return self._balances.get(token_account, 0)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        # Nested blocks join the outermost transaction.
        if self._pending is not None:
            yield
            return

        snapshot = dict(self._balances)
        self._pending = []
        try:
            yield
        except BaseException:
            logger.info(
                "Transaction aborted, discarding %d recorded calls", len(self._pending)
            )
            self._balances = snapshot
            raise
        else:
            self._committed.extend(self._pending)
        finally:
            self._pending = None

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def set_balance(self, token_account: Pubkey, amount: int) -> None:
        self._balances[token_account] = amount

    def credit(self, token_account: Pubkey, amount: int) -> None:
        self._balances[token_account] = self.token_balance(token_account) + amount

    def debit(self, token_account: Pubkey, amount: int) -> None:
        balance = self.token_balance(token_account)
        if amount > balance:
            raise ExternalProgramError(
                f"Insufficient funds in {token_account}: {balance} < {amount}"
            )
        self._balances[token_account] = balance - amount

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _check_signers(self, call: CrossProgramCall) -> None:
        if self._program_id is None:
            return
        signers = [meta.pubkey for meta in call.accounts if meta.is_signer]
        if not signers:
            return
        if not call.signer_seeds:
            raise ExternalProgramError(
                f"Missing signature for {signers[0]}", program_id=call.program_id
            )
        try:
            derived = Pubkey.create_program_address(list(call.signer_seeds), self._program_id)
        except Exception as e:
            raise ExternalProgramError(
                f"Invalid signer seeds: {e}", program_id=call.program_id
            ) from e
        for signer in signers:
            if signer != derived:
                raise ExternalProgramError(
                    f"Missing signature for {signer}", program_id=call.program_id
                )

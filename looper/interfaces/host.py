"""Program host protocol — the runtime that executes cross-program calls."""
from contextlib import AbstractContextManager
from typing import Protocol, Sequence

from solders.instruction import Instruction
from solders.pubkey import Pubkey


class ProgramHost(Protocol):
    """Abstract interface for issuing cross-program calls atomically."""

    def invoke(self, instruction: Instruction, signer_seeds: Sequence[bytes] = ()) -> None: ...

    def token_balance(self, token_account: Pubkey) -> int: ...

    def transaction(self) -> AbstractContextManager[None]: ...

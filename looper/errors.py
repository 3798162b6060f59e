"""Exception hierarchy for the looping core."""
from __future__ import annotations


class LoopingError(Exception):
    """Base class for every error raised by the looping core."""


class MalformedSwapPayloadError(LoopingError, ValueError):
    """The caller-supplied swap payload failed structural validation."""


class UnknownRouteError(MalformedSwapPayloadError):
    """Leading 8 bytes are not a recognized route opcode for this flow."""


class PayloadTooShortError(MalformedSwapPayloadError):
    """Payload is shorter than the opcode plus the fixed tail."""


class SwapAmountMismatchError(MalformedSwapPayloadError):
    """Tail amount differs from the amount computed by the flow."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Swap amount mismatch: expected {expected}, payload has {actual}")
        self.expected = expected
        self.actual = actual


class SlippageMismatchError(MalformedSwapPayloadError):
    """Tail slippage differs from the accepted tolerance."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Slippage mismatch: expected {expected} bps, payload has {actual} bps"
        )
        self.expected = expected
        self.actual = actual


class MissingRouteAccountsError(MalformedSwapPayloadError):
    """Fewer remaining accounts than the matched route variant binds."""


class ExternalProgramError(LoopingError):
    """A cross-program call was rejected by the called program or the host."""

    def __init__(self, message: str, program_id: object | None = None) -> None:
        super().__init__(message)
        self.program_id = program_id


class AuthorityMismatchError(LoopingError):
    """Configured authority bump does not match the derived one."""

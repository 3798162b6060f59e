"""Program authority — the keyless signer for every privileged sub-call."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from solders.pubkey import Pubkey

from .errors import AuthorityMismatchError

logger = logging.getLogger(__name__)

DEFAULT_AUTHORITY_SEED = b"auth"


@dataclass(frozen=True)
class ProgramAuthority:
    """Program-derived address plus the (seed, bump) proof used to sign for it."""

    program_id: Pubkey
    seed: bytes
    bump: int
    address: Pubkey

    @property
    def signer_seeds(self) -> tuple[bytes, bytes]:
        return (self.seed, bytes([self.bump]))


def derive_authority(
    program_id: Pubkey,
    seed: bytes = DEFAULT_AUTHORITY_SEED,
    expected_bump: int | None = None,
) -> ProgramAuthority:
    """Derive the authority for ``program_id`` once.

    Args:
        program_id: Identifier of this program.
        seed: Literal seed the authority is derived from.
        expected_bump: Bump pinned in configuration. When given it must equal
            the derived canonical bump, otherwise every signed call would be
            rejected, so the mismatch is raised here instead.
    """
    address, bump = Pubkey.find_program_address([seed], program_id)
    if expected_bump is not None and expected_bump != bump:
        raise AuthorityMismatchError(
            f"Configured authority bump {expected_bump} does not match derived bump "
            f"{bump} for program {program_id}"
        )
    logger.debug("Derived program authority %s (bump %d)", address, bump)
    return ProgramAuthority(program_id=program_id, seed=seed, bump=bump, address=address)

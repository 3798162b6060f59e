"""Resolve configuration into the fixed accounts of one deployment."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from solders.pubkey import Pubkey

from .authority import ProgramAuthority, derive_authority
from .chains.solana.addresses import (
    INSTRUCTIONS_SYSVAR_ID,
    TOKEN_PROGRAM_ID,
    associated_token_address,
)
from .config import AppConfig, ReserveConfig, parse_pubkey
from .models import LendingAccounts, ReserveAccounts, SwapLeg, SwapProgramAccounts
from .protocols.jupiter.accounts import event_authority_address
from .protocols.kamino.addresses import (
    market_authority_address,
    obligation_address,
    obligation_farm_state_address,
    user_metadata_address,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deployment:
    """Everything the flows need besides the caller's arguments."""

    authority: ProgramAuthority
    lending: LendingAccounts
    swap: SwapProgramAccounts
    collateral_vault: Pubkey
    borrow_vault: Pubkey | None
    slippage_bps: int

    @property
    def leverage_up_leg(self) -> SwapLeg | None:
        """Borrowed asset into the collateral asset."""
        if self.lending.borrow is None or self.borrow_vault is None:
            return None
        return SwapLeg(
            input_mint=self.lending.borrow.liquidity_mint,
            input_vault=self.borrow_vault,
            output_mint=self.lending.collateral.liquidity_mint,
            output_vault=self.collateral_vault,
        )

    @property
    def leverage_down_leg(self) -> SwapLeg | None:
        """Withdrawn collateral asset into the borrowed asset."""
        up = self.leverage_up_leg
        if up is None:
            return None
        return SwapLeg(
            input_mint=up.output_mint,
            input_vault=up.output_vault,
            output_mint=up.input_mint,
            output_vault=up.input_vault,
        )


def _optional(value: str, name: str) -> Pubkey | None:
    return parse_pubkey(value, name) if value else None


def _resolve_reserve(raw: ReserveConfig, prefix: str) -> ReserveAccounts:
    return ReserveAccounts(
        address=parse_pubkey(raw.address, f"{prefix}.address"),
        liquidity_mint=parse_pubkey(raw.liquidity_mint, f"{prefix}.liquidity_mint"),
        liquidity_supply=parse_pubkey(raw.liquidity_supply, f"{prefix}.liquidity_supply"),
        collateral_mint=_optional(raw.collateral_mint, f"{prefix}.collateral_mint"),
        collateral_supply=_optional(raw.collateral_supply, f"{prefix}.collateral_supply"),
        fee_receiver=_optional(raw.fee_receiver, f"{prefix}.fee_receiver"),
        farm_state=_optional(raw.farm_state, f"{prefix}.farm_state"),
    )


def resolve_deployment(config: AppConfig) -> Deployment:
    """Derive every address of the deployment described by ``config``.

    Raises:
        AuthorityMismatchError: the configured bump differs from the derived one.
        ValueError: a configured address is not valid base58.
    """
    program_id = parse_pubkey(config.program.program_id, "program.program_id")
    authority = derive_authority(
        program_id,
        config.program.authority_seed.encode(),
        config.program.authority_bump,
    )

    lending_cfg = config.lending
    lending_program = parse_pubkey(lending_cfg.program_id, "lending.program_id")
    farms_program = parse_pubkey(lending_cfg.farms_program_id, "lending.farms_program_id")
    market = parse_pubkey(lending_cfg.lending_market, "lending.lending_market")

    collateral = _resolve_reserve(lending_cfg.collateral_reserve, "lending.collateral_reserve")
    borrow = (
        _resolve_reserve(lending_cfg.borrow_reserve, "lending.borrow_reserve")
        if lending_cfg.borrow_reserve is not None
        else None
    )

    obligation = obligation_address(lending_program, authority.address, market)
    obligation_farm_state = (
        obligation_farm_state_address(farms_program, collateral.farm_state, obligation)
        if collateral.farm_state is not None
        else None
    )

    lending = LendingAccounts(
        program_id=lending_program,
        farms_program_id=farms_program,
        market=market,
        market_authority=market_authority_address(lending_program, market),
        obligation=obligation,
        user_metadata=user_metadata_address(lending_program, authority.address),
        scope_oracle=parse_pubkey(lending_cfg.scope_oracle, "lending.scope_oracle"),
        token_program=TOKEN_PROGRAM_ID,
        instructions_sysvar=INSTRUCTIONS_SYSVAR_ID,
        collateral=collateral,
        borrow=borrow,
        obligation_farm_state=obligation_farm_state,
    )

    swap_program = parse_pubkey(config.swap.program_id, "swap.program_id")
    swap = SwapProgramAccounts(
        program_id=swap_program,
        event_authority=(
            parse_pubkey(config.swap.event_authority, "swap.event_authority")
            if config.swap.event_authority
            else event_authority_address(swap_program)
        ),
        token_program=TOKEN_PROGRAM_ID,
    )

    deployment = Deployment(
        authority=authority,
        lending=lending,
        swap=swap,
        collateral_vault=associated_token_address(authority.address, collateral.liquidity_mint),
        borrow_vault=(
            associated_token_address(authority.address, borrow.liquidity_mint)
            if borrow is not None
            else None
        ),
        slippage_bps=config.swap.slippage_bps,
    )
    logger.info(
        "Resolved deployment: authority=%s obligation=%s", authority.address, obligation
    )
    return deployment

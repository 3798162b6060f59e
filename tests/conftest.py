"""Shared test fixtures and sample data."""
from __future__ import annotations

import struct
import textwrap
from pathlib import Path
from typing import Callable

import pytest
from solders.instruction import AccountMeta
from solders.pubkey import Pubkey

from looper.config import (
    AppConfig,
    ChainConfig,
    LendingConfig,
    ProgramConfig,
    ReserveConfig,
    SwapConfig,
)
from looper.deployment import Deployment, resolve_deployment
from looper.hosts import RecordingHost
from looper.models import LendingAccounts
from looper.protocols.jupiter.payload import RouteKind
from looper.services import LoopOrchestrator


def _key() -> str:
    return str(Pubkey.new_unique())


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
    )


@pytest.fixture()
def sample_collateral_reserve() -> ReserveConfig:
    return ReserveConfig(
        address=_key(),
        liquidity_mint=_key(),
        liquidity_supply=_key(),
        collateral_mint=_key(),
        collateral_supply=_key(),
        farm_state=_key(),
    )


@pytest.fixture()
def sample_borrow_reserve() -> ReserveConfig:
    return ReserveConfig(
        address=_key(),
        liquidity_mint=_key(),
        liquidity_supply=_key(),
        fee_receiver=_key(),
    )


@pytest.fixture()
def sample_app_config(
    sample_chain_config: ChainConfig,
    sample_collateral_reserve: ReserveConfig,
    sample_borrow_reserve: ReserveConfig,
) -> AppConfig:
    return AppConfig(
        program=ProgramConfig(program_id=_key()),
        lending=LendingConfig(
            lending_market=_key(),
            scope_oracle=_key(),
            collateral_reserve=sample_collateral_reserve,
            borrow_reserve=sample_borrow_reserve,
        ),
        swap=SwapConfig(),
        chains={"solana": sample_chain_config},
    )


# ---------------------------------------------------------------------------
# Deployment fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def deployment(sample_app_config: AppConfig) -> Deployment:
    return resolve_deployment(sample_app_config)


@pytest.fixture()
def lending_accounts(deployment: Deployment) -> LendingAccounts:
    return deployment.lending


@pytest.fixture()
def host(deployment: Deployment) -> RecordingHost:
    return RecordingHost(program_id=deployment.authority.program_id)


@pytest.fixture()
def orchestrator(deployment: Deployment, host: RecordingHost) -> LoopOrchestrator:
    return LoopOrchestrator.from_deployment(deployment, host)


# ---------------------------------------------------------------------------
# Swap payload fixtures
# ---------------------------------------------------------------------------

PayloadFactory = Callable[..., bytes]


@pytest.fixture()
def make_payload() -> PayloadFactory:
    """Build a route payload: opcode, opaque route plan, then the fixed tail."""

    def _make(
        kind: RouteKind = RouteKind.SHARED_ACCOUNTS_ROUTE,
        amount: int = 500,
        quoted: int = 490,
        slippage_bps: int = 50,
        fee_bps: int = 0,
        route_plan: bytes = b"\x01\x00\x00\x00\x11\x64\x00\x01\x02",
    ) -> bytes:
        return (
            kind.discriminator
            + route_plan
            + struct.pack("<QQHB", amount, quoted, slippage_bps, fee_bps)
        )

    return _make


@pytest.fixture()
def route_accounts() -> list[AccountMeta]:
    """Remaining accounts as the quote service returns them.

    The first entry is the aggregator's program authority, the next two its
    shared source/destination accounts, the rest the AMM accounts.
    """
    return [
        AccountMeta(Pubkey.new_unique(), is_signer=False, is_writable=False),
        AccountMeta(Pubkey.new_unique(), is_signer=False, is_writable=True),
        AccountMeta(Pubkey.new_unique(), is_signer=False, is_writable=True),
        AccountMeta(Pubkey.new_unique(), is_signer=False, is_writable=True),
        AccountMeta(Pubkey.new_unique(), is_signer=False, is_writable=False),
        AccountMeta(Pubkey.new_unique(), is_signer=False, is_writable=True),
    ]


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    program:
      program_id: "HZ4pzn7pTpkVRpxpszbvBxxQSS11Pu3oYt2PyWW6iFKU"
      authority_seed: "auth"
    lending:
      lending_market: "7u3HeHxYDLhnCoErrtycNokbQYbWGzLs6JSDqGAv5PfF"
      scope_oracle: "3NJYftD5sjVfxSnUdZ1wVML8f3aC6mp1CXCL6L7TnU8C"
      collateral_reserve:
        address: "37Jk2zkz23vkAYBT66HM2gaqJuNg2nYLsCreQAVt5MWK"
        liquidity_mint: "So11111111111111111111111111111111111111112"
        liquidity_supply: "BcPpdmg4vxXSenvkp12XbVp6XnzwKChnzfNa6cQXLW96"
        collateral_mint: "B3ieCZaTUp8qM9zbPqH2WDhzWpwrvHB2Q2aWB25DW97U"
        collateral_supply: "hY6yiVepYxxv6dpzayYQ9LnhkX7yrFFpep3oxFRKRgi"
        farm_state: "9CinLHLAcMkzs4Ji8pwS2qwyz1LU46A4Ry7BNLGLubxs"
      borrow_reserve:
        address: "D6q6wuQSrifJKZYpR1M8R4YawnLDtDsMmWM1NbBmgJ59"
        liquidity_mint: "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
        liquidity_supply: "Bgq7trRgVMeq33yt235zM2onQ4bRDBsY5EWiTetF4qw6"
        fee_receiver: "BbDUrk1bVtSixgQsPLBJFZEF7mwGstnD5joA1WzYvYFX"
    swap:
      slippage_bps: 50
    chains:
      solana:
        rpc_endpoints: ["https://rpc.example.com"]
        rpc_timeout: 10
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file

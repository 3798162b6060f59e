"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from solders.pubkey import Pubkey

logger = logging.getLogger(__name__)

KAMINO_LENDING_PROGRAM_ID = "KLend2g3cP87fffoy8q1mQqGKjrxjC8boSyAYavgmjD"
KAMINO_FARMS_PROGRAM_ID = "FarmsPZpWu9i7Kky8tPN37rs2TpmMrAZrC7S7vJa91Hr"
JUPITER_PROGRAM_ID = "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4"
JUPITER_QUOTE_API_URL = "https://quote-api.jup.ag/v6"
DEFAULT_SLIPPAGE_BPS = 50

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProgramConfig:
    program_id: str = ""
    authority_seed: str = "auth"
    authority_bump: int | None = None


@dataclass(frozen=True)
class ReserveConfig:
    address: str = ""
    liquidity_mint: str = ""
    liquidity_supply: str = ""
    collateral_mint: str = ""
    collateral_supply: str = ""
    fee_receiver: str = ""
    farm_state: str = ""


@dataclass(frozen=True)
class LendingConfig:
    program_id: str = KAMINO_LENDING_PROGRAM_ID
    farms_program_id: str = KAMINO_FARMS_PROGRAM_ID
    lending_market: str = ""
    scope_oracle: str = ""
    collateral_reserve: ReserveConfig = field(default_factory=ReserveConfig)
    borrow_reserve: ReserveConfig | None = None


@dataclass(frozen=True)
class SwapConfig:
    program_id: str = JUPITER_PROGRAM_ID
    event_authority: str = ""
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS
    quote_api_url: str = JUPITER_QUOTE_API_URL
    quote_timeout: int = 30


@dataclass(frozen=True)
class ChainConfig:
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30


@dataclass(frozen=True)
class AppConfig:
    program: ProgramConfig = field(default_factory=ProgramConfig)
    lending: LendingConfig = field(default_factory=LendingConfig)
    swap: SwapConfig = field(default_factory=SwapConfig)
    chains: dict[str, ChainConfig] = field(default_factory=dict)

    @property
    def solana(self) -> ChainConfig:
        return self.chains["solana"]


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_program(raw: dict[str, Any]) -> ProgramConfig:
    bump = raw.get("authority_bump")
    return ProgramConfig(
        program_id=raw.get("program_id", ""),
        authority_seed=raw.get("authority_seed", "auth"),
        authority_bump=int(bump) if bump not in (None, "") else None,
    )


def _build_reserve(raw: dict[str, Any]) -> ReserveConfig:
    return ReserveConfig(
        address=raw.get("address", ""),
        liquidity_mint=raw.get("liquidity_mint", ""),
        liquidity_supply=raw.get("liquidity_supply", ""),
        collateral_mint=raw.get("collateral_mint", ""),
        collateral_supply=raw.get("collateral_supply", ""),
        fee_receiver=raw.get("fee_receiver", ""),
        farm_state=raw.get("farm_state", ""),
    )


def _build_lending(raw: dict[str, Any]) -> LendingConfig:
    borrow_raw = raw.get("borrow_reserve")
    return LendingConfig(
        program_id=raw.get("program_id", KAMINO_LENDING_PROGRAM_ID),
        farms_program_id=raw.get("farms_program_id", KAMINO_FARMS_PROGRAM_ID),
        lending_market=raw.get("lending_market", ""),
        scope_oracle=raw.get("scope_oracle", ""),
        collateral_reserve=_build_reserve(raw.get("collateral_reserve", {})),
        borrow_reserve=_build_reserve(borrow_raw) if borrow_raw else None,
    )


def _build_swap(raw: dict[str, Any]) -> SwapConfig:
    return SwapConfig(
        program_id=raw.get("program_id", JUPITER_PROGRAM_ID),
        event_authority=raw.get("event_authority", ""),
        slippage_bps=int(raw.get("slippage_bps", DEFAULT_SLIPPAGE_BPS)),
        quote_api_url=raw.get("quote_api_url", JUPITER_QUOTE_API_URL),
        quote_timeout=int(raw.get("quote_timeout", 30)),
    )


def _build_chains(raw: dict[str, Any]) -> dict[str, ChainConfig]:
    chains: dict[str, ChainConfig] = {}
    for name, cfg in raw.items():
        chains[name] = ChainConfig(
            rpc_endpoints=tuple(url for url in cfg.get("rpc_endpoints", []) if url),
            rpc_timeout=int(cfg.get("rpc_timeout", 30)),
        )
    return chains


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_pubkey(value: str, name: str) -> Pubkey:
    """Parse a base58 address, naming the offending setting on failure."""
    try:
        return Pubkey.from_string(value)
    except Exception as e:
        raise ValueError(f"Invalid address for {name}: {value!r}") from e


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        program=_build_program(raw.get("program", {})),
        lending=_build_lending(raw.get("lending", {})),
        swap=_build_swap(raw.get("swap", {})),
        chains=_build_chains(raw.get("chains", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.program.program_id:
        raise ValueError("program.program_id must be configured")
    parse_pubkey(cfg.program.program_id, "program.program_id")

    if cfg.program.authority_bump is not None and not 0 <= cfg.program.authority_bump <= 255:
        raise ValueError("program.authority_bump must be between 0 and 255")

    lending = cfg.lending
    parse_pubkey(lending.program_id, "lending.program_id")
    parse_pubkey(lending.farms_program_id, "lending.farms_program_id")
    if not lending.lending_market:
        raise ValueError("lending.lending_market must be configured")
    parse_pubkey(lending.lending_market, "lending.lending_market")
    if not lending.scope_oracle:
        raise ValueError("lending.scope_oracle must be configured")
    parse_pubkey(lending.scope_oracle, "lending.scope_oracle")

    collateral = lending.collateral_reserve
    if not collateral.address:
        raise ValueError("lending.collateral_reserve must be configured")
    for name in (
        "address",
        "liquidity_mint",
        "liquidity_supply",
        "collateral_mint",
        "collateral_supply",
    ):
        value = getattr(collateral, name)
        if not value:
            raise ValueError(f"lending.collateral_reserve.{name} must be configured")
        parse_pubkey(value, f"lending.collateral_reserve.{name}")
    if collateral.farm_state:
        parse_pubkey(collateral.farm_state, "lending.collateral_reserve.farm_state")

    if lending.borrow_reserve is not None:
        for name in ("address", "liquidity_mint", "liquidity_supply", "fee_receiver"):
            value = getattr(lending.borrow_reserve, name)
            if not value:
                raise ValueError(f"lending.borrow_reserve.{name} must be configured")
            parse_pubkey(value, f"lending.borrow_reserve.{name}")

    parse_pubkey(cfg.swap.program_id, "swap.program_id")
    if cfg.swap.event_authority:
        parse_pubkey(cfg.swap.event_authority, "swap.event_authority")
    if not 0 <= cfg.swap.slippage_bps <= 10_000:
        raise ValueError("swap.slippage_bps must be between 0 and 10000")

    solana = cfg.chains.get("solana")
    if solana is None or not solana.rpc_endpoints:
        raise ValueError("chains.solana must list at least one RPC endpoint")

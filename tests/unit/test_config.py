"""Unit tests for config loading, env interpolation, and validation."""
from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from looper.config import (
    DEFAULT_SLIPPAGE_BPS,
    JUPITER_PROGRAM_ID,
    KAMINO_LENDING_PROGRAM_ID,
    AppConfig,
    ChainConfig,
    ReserveConfig,
    SwapConfig,
    _interpolate_env,
    load_config,
    parse_pubkey,
)
from looper.deployment import resolve_deployment


def _write(tmp_path: Path, raw: dict) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(yaml.safe_dump(raw))
    return cfg_file


@pytest.fixture()
def sample_raw(sample_yaml_path: Path) -> dict:
    return yaml.safe_load(sample_yaml_path.read_text())


class TestInterpolateEnv:
    def test_simple_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _interpolate_env("${MY_VAR}") == "hello"

    def test_missing_var_becomes_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NONEXISTENT_VAR_XYZ", raising=False)
        assert _interpolate_env("${NONEXISTENT_VAR_XYZ}") == ""

    def test_nested_dict(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOK", "secret")
        result = _interpolate_env({"key": "${TOK}", "plain": "text"})
        assert result == {"key": "secret", "plain": "text"}

    def test_nested_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("A", "x")
        assert _interpolate_env(["${A}", "y"]) == ["x", "y"]

    def test_non_string_passthrough(self) -> None:
        assert _interpolate_env(42) == 42
        assert _interpolate_env(True) is True


class TestLoadConfig:
    def test_loads_valid_yaml(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert isinstance(cfg, AppConfig)
        assert cfg.program.program_id == "HZ4pzn7pTpkVRpxpszbvBxxQSS11Pu3oYt2PyWW6iFKU"
        assert cfg.program.authority_bump is None
        assert cfg.lending.program_id == KAMINO_LENDING_PROGRAM_ID
        assert cfg.lending.borrow_reserve is not None
        assert cfg.lending.borrow_reserve.fee_receiver.startswith("BbDU")
        assert cfg.swap.program_id == JUPITER_PROGRAM_ID
        assert cfg.swap.slippage_bps == DEFAULT_SLIPPAGE_BPS
        assert cfg.solana.rpc_timeout == 10

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_env_interpolation_in_yaml(
        self, tmp_path: Path, sample_raw: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_RPC", "https://private.rpc.example.com")
        sample_raw["chains"]["solana"]["rpc_endpoints"] = ["${TEST_RPC}"]
        cfg = load_config(_write(tmp_path, sample_raw))
        assert cfg.solana.rpc_endpoints == ("https://private.rpc.example.com",)

    def test_unset_endpoint_dropped(
        self, tmp_path: Path, sample_raw: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("UNSET_RPC_XYZ", raising=False)
        sample_raw["chains"]["solana"]["rpc_endpoints"] = ["${UNSET_RPC_XYZ}", "https://a.example"]
        cfg = load_config(_write(tmp_path, sample_raw))
        assert cfg.solana.rpc_endpoints == ("https://a.example",)

    def test_bump_and_slippage_parsed(self, tmp_path: Path, sample_raw: dict) -> None:
        sample_raw["program"]["authority_bump"] = "254"
        sample_raw["swap"]["slippage_bps"] = "75"
        cfg = load_config(_write(tmp_path, sample_raw))
        assert cfg.program.authority_bump == 254
        assert cfg.swap.slippage_bps == 75

    def test_borrow_reserve_optional(self, tmp_path: Path, sample_raw: dict) -> None:
        del sample_raw["lending"]["borrow_reserve"]
        cfg = load_config(_write(tmp_path, sample_raw))
        assert cfg.lending.borrow_reserve is None

    def test_collateral_farm_optional(self, tmp_path: Path, sample_raw: dict) -> None:
        del sample_raw["lending"]["collateral_reserve"]["farm_state"]
        cfg = load_config(_write(tmp_path, sample_raw))
        assert cfg.lending.collateral_reserve.farm_state == ""

        deployment = resolve_deployment(cfg)
        assert deployment.lending.collateral.farm_state is None
        assert deployment.lending.obligation_farm_state is None


class TestValidation:
    def test_malformed_farm_state(self, tmp_path: Path, sample_raw: dict) -> None:
        sample_raw["lending"]["collateral_reserve"]["farm_state"] = "not-a-key"
        with pytest.raises(ValueError, match="collateral_reserve.farm_state"):
            load_config(_write(tmp_path, sample_raw))

    def test_missing_program_id(self, tmp_path: Path, sample_raw: dict) -> None:
        del sample_raw["program"]["program_id"]
        with pytest.raises(ValueError, match="program.program_id must be configured"):
            load_config(_write(tmp_path, sample_raw))

    def test_bad_bump(self, tmp_path: Path, sample_raw: dict) -> None:
        sample_raw["program"]["authority_bump"] = 300
        with pytest.raises(ValueError, match="authority_bump"):
            load_config(_write(tmp_path, sample_raw))

    def test_missing_market(self, tmp_path: Path, sample_raw: dict) -> None:
        del sample_raw["lending"]["lending_market"]
        with pytest.raises(ValueError, match="lending_market must be configured"):
            load_config(_write(tmp_path, sample_raw))

    def test_missing_collateral_reserve(self, tmp_path: Path, sample_raw: dict) -> None:
        del sample_raw["lending"]["collateral_reserve"]
        with pytest.raises(ValueError, match="collateral_reserve must be configured"):
            load_config(_write(tmp_path, sample_raw))

    def test_missing_collateral_mint(self, tmp_path: Path, sample_raw: dict) -> None:
        del sample_raw["lending"]["collateral_reserve"]["collateral_mint"]
        with pytest.raises(ValueError, match="collateral_reserve.collateral_mint"):
            load_config(_write(tmp_path, sample_raw))

    def test_missing_fee_receiver(self, tmp_path: Path, sample_raw: dict) -> None:
        del sample_raw["lending"]["borrow_reserve"]["fee_receiver"]
        with pytest.raises(ValueError, match="borrow_reserve.fee_receiver"):
            load_config(_write(tmp_path, sample_raw))

    def test_malformed_address(self, tmp_path: Path, sample_raw: dict) -> None:
        sample_raw["lending"]["scope_oracle"] = "not-a-key"
        with pytest.raises(ValueError, match="Invalid address for lending.scope_oracle"):
            load_config(_write(tmp_path, sample_raw))

    @pytest.mark.parametrize("slippage", [-1, 10_001])
    def test_slippage_range(self, tmp_path: Path, sample_raw: dict, slippage: int) -> None:
        sample_raw["swap"]["slippage_bps"] = slippage
        with pytest.raises(ValueError, match="slippage_bps"):
            load_config(_write(tmp_path, sample_raw))

    def test_no_rpc_endpoint(self, tmp_path: Path, sample_raw: dict) -> None:
        sample_raw["chains"] = {}
        with pytest.raises(ValueError, match="chains.solana"):
            load_config(_write(tmp_path, sample_raw))


class TestParsePubkey:
    def test_valid(self) -> None:
        assert str(parse_pubkey(JUPITER_PROGRAM_ID, "x")) == JUPITER_PROGRAM_ID

    def test_invalid_names_setting(self) -> None:
        with pytest.raises(ValueError, match="swap.program_id"):
            parse_pubkey("0xabc", "swap.program_id")


class TestFrozenConfigs:
    def test_swap_config_immutable(self) -> None:
        s = SwapConfig()
        with pytest.raises(AttributeError):
            s.slippage_bps = 99  # type: ignore[misc]

    def test_chain_config_immutable(self) -> None:
        c = ChainConfig(rpc_endpoints=("a",))
        with pytest.raises(AttributeError):
            c.rpc_timeout = 999  # type: ignore[misc]

    def test_reserve_config_immutable(self) -> None:
        r = ReserveConfig(address="x")
        with pytest.raises(AttributeError):
            r.address = "y"  # type: ignore[misc]

"""Unit tests for program-derived addresses."""
from __future__ import annotations

from solders.pubkey import Pubkey

from looper.chains.solana.addresses import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    associated_token_address,
)
from looper.deployment import Deployment
from looper.protocols.jupiter.accounts import event_authority_address
from looper.protocols.kamino.addresses import (
    market_authority_address,
    obligation_address,
    obligation_farm_state_address,
    user_metadata_address,
)


class TestKaminoAddresses:
    def test_obligation_seeds(self) -> None:
        program, owner, market = (Pubkey.new_unique() for _ in range(3))
        expected, _ = Pubkey.find_program_address(
            [b"\x00", b"\x00", bytes(owner), bytes(market), bytes(32), bytes(32)], program
        )
        assert obligation_address(program, owner, market) == expected

    def test_obligation_depends_on_owner(self) -> None:
        program, market = Pubkey.new_unique(), Pubkey.new_unique()
        a = obligation_address(program, Pubkey.new_unique(), market)
        b = obligation_address(program, Pubkey.new_unique(), market)
        assert a != b

    def test_user_metadata_seeds(self) -> None:
        program, owner = Pubkey.new_unique(), Pubkey.new_unique()
        expected, _ = Pubkey.find_program_address([b"user_meta", bytes(owner)], program)
        assert user_metadata_address(program, owner) == expected

    def test_market_authority_seeds(self) -> None:
        program, market = Pubkey.new_unique(), Pubkey.new_unique()
        expected, _ = Pubkey.find_program_address([b"lma", bytes(market)], program)
        assert market_authority_address(program, market) == expected

    def test_farm_user_state_seeds(self) -> None:
        farms, farm, obligation = (Pubkey.new_unique() for _ in range(3))
        expected, _ = Pubkey.find_program_address(
            [b"user", bytes(farm), bytes(obligation)], farms
        )
        assert obligation_farm_state_address(farms, farm, obligation) == expected


class TestTokenAddresses:
    def test_associated_token_address_seeds(self) -> None:
        owner, mint = Pubkey.new_unique(), Pubkey.new_unique()
        expected, _ = Pubkey.find_program_address(
            [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
            ASSOCIATED_TOKEN_PROGRAM_ID,
        )
        assert associated_token_address(owner, mint) == expected

    def test_event_authority_seeds(self) -> None:
        program = Pubkey.new_unique()
        expected, _ = Pubkey.find_program_address([b"__event_authority"], program)
        assert event_authority_address(program) == expected


class TestDeployment:
    def test_vaults_owned_by_authority(self, deployment: Deployment) -> None:
        authority = deployment.authority.address
        lending = deployment.lending
        assert deployment.collateral_vault == associated_token_address(
            authority, lending.collateral.liquidity_mint
        )
        assert lending.borrow is not None
        assert deployment.borrow_vault == associated_token_address(
            authority, lending.borrow.liquidity_mint
        )

    def test_obligation_owned_by_authority(self, deployment: Deployment) -> None:
        lending = deployment.lending
        assert lending.obligation == obligation_address(
            lending.program_id, deployment.authority.address, lending.market
        )

    def test_legs_are_mirrored(self, deployment: Deployment) -> None:
        up, down = deployment.leverage_up_leg, deployment.leverage_down_leg
        assert up is not None and down is not None
        assert up.input_vault == deployment.borrow_vault
        assert up.output_vault == deployment.collateral_vault
        assert down.input_mint == up.output_mint
        assert down.output_vault == up.input_vault

    def test_default_event_authority(self, deployment: Deployment) -> None:
        assert deployment.swap.event_authority == event_authority_address(
            deployment.swap.program_id
        )

"""Dry-run planning — runs a flow against live balances and a live quote."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from solders.pubkey import Pubkey

from ..chains.solana import SolanaClient
from ..config import AppConfig
from ..deployment import Deployment, resolve_deployment
from ..hosts import CrossProgramCall, RecordingHost
from ..quotes import JupiterQuoteClient, SwapQuote
from ..quotes.jupiter import EXACT_IN, EXACT_OUT
from .looper import LoopOrchestrator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlowPlan:
    """Calls one flow would submit, in order."""

    flow: str
    calls: tuple[CrossProgramCall, ...]
    quote: SwapQuote | None = None
    missing_accounts: tuple[Pubkey, ...] = ()


class LoopPlanner:
    """Plans flows without submitting anything.

    Vault balances come from RPC and swap payloads from the quote service;
    the flow then runs on a :class:`RecordingHost` where the swap call
    credits the quoted output to the output vault.
    """

    def __init__(
        self,
        deployment: Deployment,
        solana: SolanaClient,
        quotes: JupiterQuoteClient,
    ) -> None:
        self._deployment = deployment
        self._solana = solana
        self._quotes = quotes

    @property
    def deployment(self) -> Deployment:
        return self._deployment

    @classmethod
    def from_config(cls, config: AppConfig) -> LoopPlanner:
        return cls(
            resolve_deployment(config),
            SolanaClient(config.solana),
            JupiterQuoteClient(config.swap),
        )

    async def plan_deposit(self, flags: int, amount: int) -> FlowPlan:
        balances, missing = await asyncio.gather(
            self._vault_balances(), self._missing_accounts()
        )
        host = self._host(balances)
        LoopOrchestrator.from_deployment(self._deployment, host).deposit(flags, amount)
        return FlowPlan("deposit", host.calls, missing_accounts=missing)

    async def plan_loop(self, flags: int, amount: int) -> FlowPlan:
        leg = self._deployment.leverage_up_leg
        if leg is None:
            raise ValueError("Leverage flows need a borrow reserve configured")

        balances, missing, quote = await asyncio.gather(
            self._vault_balances(),
            self._missing_accounts(),
            self._quotes.get_swap(
                leg.input_mint,
                leg.output_mint,
                amount,
                self._deployment.authority.address,
                EXACT_IN,
            ),
        )
        host = self._host(balances, credit=(leg.output_vault, quote.out_amount))
        LoopOrchestrator.from_deployment(self._deployment, host).loop(
            flags, quote.payload, amount, quote.remaining_accounts
        )
        return FlowPlan("loop", host.calls, quote, missing)

    async def plan_repay(self, amount: int, swap_amount: int | None = None) -> FlowPlan:
        leg = self._deployment.leverage_down_leg
        if leg is None:
            raise ValueError("Leverage flows need a borrow reserve configured")

        balances, missing, quote = await asyncio.gather(
            self._vault_balances(),
            self._missing_accounts(),
            self._quotes.get_swap(
                leg.input_mint,
                leg.output_mint,
                amount if swap_amount is None else swap_amount,
                self._deployment.authority.address,
                EXACT_OUT,
            ),
        )
        host = self._host(balances, credit=(leg.output_vault, quote.out_amount))
        LoopOrchestrator.from_deployment(self._deployment, host).repay(
            quote.payload, amount, quote.remaining_accounts, swap_amount
        )
        return FlowPlan("repay", host.calls, quote, missing)

    async def _vault_balances(self) -> dict[Pubkey, int]:
        vaults = [self._deployment.collateral_vault]
        if self._deployment.borrow_vault is not None:
            vaults.append(self._deployment.borrow_vault)
        amounts = await asyncio.gather(
            *(self._solana.get_token_account_balance(vault) for vault in vaults)
        )
        balances = dict(zip(vaults, amounts))
        for vault, balance in balances.items():
            logger.info("Vault %s balance: %d", vault, balance)
        return balances

    async def _missing_accounts(self) -> tuple[Pubkey, ...]:
        """Obligation and vaults not yet allocated on chain."""
        accounts = [self._deployment.lending.obligation, self._deployment.collateral_vault]
        if self._deployment.borrow_vault is not None:
            accounts.append(self._deployment.borrow_vault)

        try:
            exists = await asyncio.gather(
                *(self._solana.get_account_exists(account) for account in accounts)
            )
        except Exception as e:
            logger.error("Account existence check failed: %s", e)
            return ()

        missing = tuple(account for account, found in zip(accounts, exists) if not found)
        for account in missing:
            logger.warning("Account %s does not exist yet", account)
        return missing

    def _host(
        self,
        balances: dict[Pubkey, int],
        credit: tuple[Pubkey, int] | None = None,
    ) -> RecordingHost:
        swap_program = self._deployment.swap.program_id

        def simulate_swap(call: CrossProgramCall, host: RecordingHost) -> None:
            if credit is not None and call.program_id == swap_program:
                host.credit(*credit)

        return RecordingHost(
            balances,
            program_id=self._deployment.authority.program_id,
            on_invoke=simulate_swap,
        )

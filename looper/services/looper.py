"""Top-level flows: deposit, leverage-up and leverage-down."""
from __future__ import annotations

import logging
from typing import Sequence

from solders.instruction import AccountMeta

from ..config import AppConfig
from ..deployment import Deployment, resolve_deployment
from ..interfaces.host import ProgramHost
from ..models import FLAG_HAS_BORROWS, FLAG_HAS_COLLATERAL, SwapLeg, check_flags
from ..protocols.jupiter import EXACT_IN_ROUTES, EXACT_OUT_ROUTES, JupiterAggregator
from ..protocols.kamino import KaminoLendingProgram
from ..wire import check_u64
from .positions import PositionMutator
from .refresh import RefreshSequencer
from .swap import SwapForwarder

logger = logging.getLogger(__name__)


class LoopOrchestrator:
    """Runs each flow as one atomic transaction on ``host``.

    Every swap payload is validated, and its account list rebuilt, before
    the transaction issues its first call.
    """

    def __init__(
        self,
        host: ProgramHost,
        refresher: RefreshSequencer,
        mutator: PositionMutator,
        forwarder: SwapForwarder,
        leverage_up_leg: SwapLeg | None = None,
        leverage_down_leg: SwapLeg | None = None,
    ) -> None:
        self._host = host
        self._refresher = refresher
        self._mutator = mutator
        self._forwarder = forwarder
        self._up_leg = leverage_up_leg
        self._down_leg = leverage_down_leg

    @classmethod
    def from_deployment(cls, deployment: Deployment, host: ProgramHost) -> LoopOrchestrator:
        lending_program = KaminoLendingProgram(host, deployment.lending.program_id)
        aggregator = JupiterAggregator(host, deployment.swap.program_id)
        return cls(
            host,
            RefreshSequencer(lending_program, deployment.lending),
            PositionMutator(
                lending_program,
                deployment.lending,
                deployment.authority,
                deployment.collateral_vault,
                deployment.borrow_vault,
            ),
            SwapForwarder(
                aggregator, deployment.swap, deployment.authority, deployment.slippage_bps
            ),
            deployment.leverage_up_leg,
            deployment.leverage_down_leg,
        )

    @classmethod
    def from_config(cls, config: AppConfig, host: ProgramHost) -> LoopOrchestrator:
        return cls.from_deployment(resolve_deployment(config), host)

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def deposit(self, flags: int, amount: int) -> None:
        """Supply ``amount`` of the collateral asset as obligation collateral."""
        check_flags(flags)
        check_u64(amount)
        logger.info("Deposit started: flags=%#04x amount=%d", flags, amount)
        with self._host.transaction():
            self._refresher.refresh_position(flags)
            self._mutator.deposit(amount)
        logger.info("Deposit complete: %d", amount)

    def loop(
        self,
        flags: int,
        swap_payload: bytes,
        amount: int,
        remaining_accounts: Sequence[AccountMeta] = (),
    ) -> int:
        """Borrow ``amount``, swap it into collateral and deposit the proceeds.

        Returns the amount deposited, read from the collateral vault after
        the swap.
        """
        check_flags(flags)
        check_u64(amount)
        leg = self._require_leg(self._up_leg)
        swap = self._forwarder.prepare(
            swap_payload,
            expected_amount=amount,
            leg=leg,
            remaining_accounts=remaining_accounts,
            allowed=EXACT_IN_ROUTES,
        )

        logger.info("Leverage-up started: flags=%#04x amount=%d", flags, amount)
        with self._host.transaction():
            self._refresher.refresh_position(flags)
            self._mutator.borrow(amount)
            self._forwarder.forward(swap)
            self._refresher.refresh_collateral_reserve()
            self._refresher.refresh_borrow_reserve()
            self._refresher.refresh_obligation(FLAG_HAS_COLLATERAL | FLAG_HAS_BORROWS)
            received = self._host.token_balance(leg.output_vault)
            self._mutator.deposit(received)
        logger.info("Leverage-up complete: borrowed %d, deposited %d", amount, received)
        return received

    def repay(
        self,
        swap_payload: bytes,
        amount: int,
        remaining_accounts: Sequence[AccountMeta] = (),
        swap_amount: int | None = None,
    ) -> int:
        """Withdraw ``amount`` of collateral, swap it to the debt asset and repay.

        Args:
            swap_payload: Exact-out route payload.
            amount: Collateral to withdraw.
            remaining_accounts: Route accounts for the payload.
            swap_amount: Amount the payload must carry; defaults to ``amount``.

        Returns the borrow-vault balance available to the repayment.
        """
        check_u64(amount)
        expected = amount if swap_amount is None else check_u64(swap_amount)
        leg = self._require_leg(self._down_leg)
        swap = self._forwarder.prepare(
            swap_payload,
            expected_amount=expected,
            leg=leg,
            remaining_accounts=remaining_accounts,
            allowed=EXACT_OUT_ROUTES,
        )

        logger.info("Leverage-down started: withdraw %d", amount)
        with self._host.transaction():
            self._refresher.refresh_position(FLAG_HAS_COLLATERAL | FLAG_HAS_BORROWS)
            self._mutator.withdraw_collateral(amount)
            self._forwarder.forward(swap)
            available = self._host.token_balance(leg.output_vault)
            logger.info("Repaying debt, %d available in %s", available, leg.output_vault)
            self._mutator.repay()
        logger.info("Leverage-down complete")
        return available

    @staticmethod
    def _require_leg(leg: SwapLeg | None) -> SwapLeg:
        if leg is None:
            raise ValueError("Leverage flows need a borrow reserve configured")
        return leg

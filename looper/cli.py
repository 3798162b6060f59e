"""Command-line interface for the Kamino looper."""
from __future__ import annotations

import argparse
import asyncio
import base64
import binascii
import logging
import sys

from .config import AppConfig, load_config
from .deployment import Deployment, resolve_deployment
from .errors import LoopingError, MalformedSwapPayloadError
from .hosts import CrossProgramCall
from .logging_setup import configure_logging
from .protocols.jupiter.payload import (
    EXACT_IN_ROUTES,
    EXACT_OUT_ROUTES,
    MIN_PAYLOAD_SIZE,
    RouteKind,
    parse_route,
    validate_route,
)
from .protocols.kamino.program import opcode_name
from .services import FlowPlan, LoopPlanner
from .wire import U64_MAX, read_u64

logger = logging.getLogger(__name__)


def _int_auto(value: str) -> int:
    """Parse decimal or 0x-prefixed integers."""
    return int(value, 0)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="kamino-looper",
        description="Leveraged Kamino looping through Jupiter swaps",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("addresses", help="Print every derived address of the deployment")

    check = sub.add_parser("check-swap", help="Validate a base64 swap payload")
    check.add_argument("payload", help="Swap instruction data, base64")
    check.add_argument("--amount", type=int, required=True, help="Expected swap amount")
    check.add_argument(
        "--direction",
        choices=["up", "down"],
        default="up",
        help="Leverage direction the payload is for (default: up)",
    )

    plan = sub.add_parser("plan", help="Dry-run a flow and print its calls")
    flows = plan.add_subparsers(dest="flow")

    plan_deposit = flows.add_parser("deposit", help="Deposit collateral")
    plan_deposit.add_argument("--flags", type=_int_auto, default=0)
    plan_deposit.add_argument("--amount", type=int, required=True)

    plan_loop = flows.add_parser("loop", help="Borrow, swap to collateral, deposit")
    plan_loop.add_argument("--flags", type=_int_auto, default=0)
    plan_loop.add_argument("--amount", type=int, required=True)

    plan_repay = flows.add_parser("repay", help="Withdraw, swap to debt asset, repay")
    plan_repay.add_argument("--amount", type=int, required=True)
    plan_repay.add_argument(
        "--swap-amount",
        type=int,
        default=None,
        help="Exact output of the swap (default: same as --amount)",
    )

    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _print_addresses(deployment: Deployment) -> None:
    authority = deployment.authority
    lending = deployment.lending
    rows = [
        ("program", authority.program_id),
        ("authority", authority.address),
        ("authority bump", authority.bump),
        ("obligation", lending.obligation),
        ("user metadata", lending.user_metadata),
        ("market authority", lending.market_authority),
        ("collateral vault", deployment.collateral_vault),
        ("borrow vault", deployment.borrow_vault or "-"),
        ("obligation farm state", lending.obligation_farm_state or "-"),
        ("swap event authority", deployment.swap.event_authority),
    ]
    width = max(len(label) for label, _ in rows)
    for label, value in rows:
        print(f"{label.ljust(width)}  {value}")


def _check_swap(config: AppConfig, payload_b64: str, amount: int, direction: str) -> int:
    try:
        payload = base64.b64decode(payload_b64, validate=True)
    except binascii.Error as e:
        print(f"Invalid base64 payload: {e}", file=sys.stderr)
        return 1

    try:
        route = validate_route(
            payload,
            expected_amount=amount,
            slippage_bps=config.swap.slippage_bps,
            allowed=EXACT_IN_ROUTES if direction == "up" else EXACT_OUT_ROUTES,
        )
    except MalformedSwapPayloadError as e:
        print(f"Rejected: {e}", file=sys.stderr)
        return 1

    print(
        f"OK {route.kind.name.lower()}: amount={route.amount} quoted={route.quoted_amount} "
        f"slippage={route.slippage_bps}bps fee={route.platform_fee_bps}bps"
    )
    return 0


def describe_call(call: CrossProgramCall, deployment: Deployment) -> str:
    """One-line summary: program, opcode, account count and amount."""
    data = call.data
    amount: int | None = None
    if call.program_id == deployment.lending.program_id:
        program, name = "kamino", opcode_name(data) or data[:8].hex()
        if len(data) >= 16:
            amount = read_u64(data, 8)
    elif call.program_id == deployment.swap.program_id:
        kind = RouteKind.from_payload(data)
        program, name = "jupiter", kind.name.lower() if kind else data[:8].hex()
        if kind is not None and len(data) >= MIN_PAYLOAD_SIZE:
            amount = parse_route(data).amount
    else:
        program, name = str(call.program_id), data[:8].hex()

    line = f"{program:<8} {name:<24} accounts={len(call.accounts)}"
    if amount is not None:
        line += " amount=" + ("MAX" if amount == U64_MAX else str(amount))
    if call.signed:
        line += " signed"
    return line


def _print_plan(plan: FlowPlan, deployment: Deployment) -> None:
    if plan.quote is not None:
        print(
            f"quote: {plan.quote.kind.name.lower()} in={plan.quote.in_amount} "
            f"out={plan.quote.out_amount}"
        )
    for account in plan.missing_accounts:
        print(f"warning: {account} does not exist yet")
    for index, call in enumerate(plan.calls, start=1):
        print(f"{index:>2}. {describe_call(call, deployment)}")


async def _plan(config: AppConfig, args: argparse.Namespace) -> int:
    planner = LoopPlanner.from_config(config)
    if args.flow == "deposit":
        plan = await planner.plan_deposit(args.flags, args.amount)
    elif args.flow == "loop":
        plan = await planner.plan_loop(args.flags, args.amount)
    elif args.flow == "repay":
        plan = await planner.plan_repay(args.amount, args.swap_amount)
    else:
        print("plan needs a flow: deposit, loop or repay", file=sys.stderr)
        return 1
    _print_plan(plan, planner.deployment)
    return 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "addresses":
        _print_addresses(resolve_deployment(config))
        return 0
    if args.command == "check-swap":
        return _check_swap(config, args.payload, args.amount, args.direction)
    if args.command == "plan":
        return await _plan(config, args)

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(asyncio.run(_run(args)))
    except (LoopingError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)

"""Command-line interface for the lending position fetcher."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys

from .config import KNOWN_APPS, load_config
from .logging_setup import configure_logging
from .services import PositionService


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="position-fetcher",
        description="Lending market position fetcher",
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

    positions_parser = sub.add_parser("positions", help="Fetch app-token positions")
    balances_parser = sub.add_parser("balances", help="Fetch a wallet's balances")
    balances_parser.add_argument("wallet", help="Wallet address")

    for p in (positions_parser, balances_parser):
        p.add_argument("--app", choices=KNOWN_APPS, default=None, help="Only this app")
        p.add_argument("--network", default=None, help="Only this network")

    return parser


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command; returns the process exit code."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    service = PositionService(config)

    if args.command == "positions":
        report = await service.fetch_positions(args.app, args.network)
        output = [p.to_dict() for p in report.positions]
    elif args.command == "balances":
        balances, report = await service.fetch_balances(args.wallet, args.app, args.network)
        output = [
            {**b.position.to_dict(), "balance": b.balance, "balanceUSD": b.balance_usd}
            for b in balances
        ]
    else:
        build_parser().print_help()
        return 1

    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 2 if report.market_failures else 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))

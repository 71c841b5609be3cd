"""CLI for inoutflow."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

import requests

from .amount import format_token
from .config import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_RESULTS_CAP,
    DEFAULT_TIMEOUT,
    ChainType,
    load_config,
    normalize_address,
    parse_chain,
)
from .errors import InoutflowError
from .flow import FlowSummary, summarize_flow
from .scan import get_balance, get_list_internal_transactions, get_list_normal_transactions

_LOGGER = logging.getLogger("inoutflow.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inoutflow",
        description=(
            "Compute and print in/out flow of native tokens of EVM-based chains "
            "(BSC, Ethereum, or Polygon) for a wallet/contract address"
        ),
    )
    parser.add_argument("address", help="Wallet or contract address to process")
    parser.add_argument(
        "-c",
        "--chain",
        required=True,
        type=str.lower,
        choices=[chain.value for chain in ChainType],
        help="Which chain to work with",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=DEFAULT_PAGE_SIZE,
        help="Records requested per page",
    )
    parser.add_argument(
        "--results-cap",
        type=int,
        default=DEFAULT_RESULTS_CAP,
        help="Stop paginating past this many records (0 disables the cap)",
    )
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT, help="Request timeout in seconds")
    parser.add_argument(
        "--include-failed",
        action="store_true",
        help="Count transactions flagged as failed in the flow sums",
    )
    parser.add_argument("--json", action="store_true", help="Print as JSON (wei and token amounts)")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (repeat for debug output)",
    )
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _print_section(title: str, summary: FlowSummary, token: str) -> None:
    found = f"Found {summary.count} {title}!"
    if summary.failed:
        found += f" ({summary.failed} failed)"
    print(found)
    print(f"- {token} outflow: {format_token(summary.outflow)} {token}s")
    print(f"- {token} inflow: {format_token(summary.inflow)} {token}s")
    print(f"- {token} balance: {format_token(summary.net)} {token}s")


def _summary_json(summary: FlowSummary) -> dict:
    return {
        "count": summary.count,
        "failed": summary.failed,
        "inflow_wei": str(summary.inflow),
        "outflow_wei": str(summary.outflow),
        "net_wei": str(summary.net),
        "inflow": format_token(summary.inflow),
        "outflow": format_token(summary.outflow),
        "net": format_token(summary.net),
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # --help exits 0; usage errors are fatal like any other.
        return 0 if not exc.code else 1
    _configure_logging(args.verbose)

    try:
        address = normalize_address(args.address)
        config = load_config(
            parse_chain(args.chain),
            page_size=args.page_size,
            results_cap=args.results_cap or None,
            timeout=args.timeout,
        )
        with requests.Session() as session:
            _LOGGER.info("fetching normal transactions for %s on %s", address, config.chain.value)
            normal = summarize_flow(
                get_list_normal_transactions(config, address, session=session),
                address,
                include_failed=args.include_failed,
            )
            _LOGGER.info("fetching internal transactions for %s on %s", address, config.chain.value)
            internal = summarize_flow(
                get_list_internal_transactions(config, address, session=session),
                address,
                include_failed=args.include_failed,
            )
            balance = get_balance(config, address, session=session)
    except InoutflowError as exc:
        _LOGGER.debug("aborted", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    total = normal + internal
    token = config.native_token
    if args.json:
        print(
            json.dumps(
                {
                    "address": address,
                    "chain": config.chain.value,
                    "token": token,
                    "normal": _summary_json(normal),
                    "internal": _summary_json(internal),
                    "total": _summary_json(total),
                    "balance_wei": str(balance),
                    "balance": format_token(balance),
                }
            )
        )
        return 0

    _print_section("transactions", normal, token)
    print("")
    _print_section("internal transactions", internal, token)
    print("")
    print(f"Total balance: {format_token(total.net)} {token}s")
    print(f"On-chain balance: {format_token(balance)} {token}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

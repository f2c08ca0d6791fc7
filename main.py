#!/usr/bin/env python3
"""Command line entrypoint for the SEP-20 resolver.

Import-time side effects are kept to a minimum so this module can be imported
in unit tests. Wiring (dotenv, logging, node client, registry) happens inside
:func:`main`.
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, List, Optional

from dotenv import load_dotenv

from sep20.config import AppConfig, load_config, load_contract_list
from sep20.decoder import decode_receipt
from sep20.errors import InvalidAddress, UnknownContract
from sep20.node import Web3NodeClient
from sep20.queries import balance_of, scaled_balance_of, transfer_history
from sep20.registry import ContractRegistry

logger = logging.getLogger("sep20.main")

EXIT_OK = 0
EXIT_FAIL = 1
EXIT_UNKNOWN_CONTRACT = 2


def _json_dump(data: Any) -> str:
    """Pretty JSON for stdout."""

    try:
        return json.dumps(data, indent=2, sort_keys=True, default=str)
    except TypeError:
        return json.dumps(str(data))


def app_boot() -> AppConfig:
    """Load .env, configure logging and return the active config."""

    load_dotenv()
    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger.info("sep20 resolver booting (rpc=%s)", config.rpc_url)
    return config


def build_registry(config: AppConfig, node: Any, seed: bool = True) -> ContractRegistry:
    registry = ContractRegistry(node, workers=config.seed_workers)
    if seed:
        registry.seed(load_contract_list(config.contracts_source))
    return registry


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sep20", description="SEP-20 contract resolver")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("contracts", help="seed the registry and list known contracts")

    p_probe = sub.add_parser("probe", help="probe an address for SEP-20 metadata")
    p_probe.add_argument("address")

    p_bal = sub.add_parser("balance", help="token balance of an owner")
    p_bal.add_argument("contract")
    p_bal.add_argument("owner")
    p_bal.add_argument("--raw", action="store_true", help="print the unscaled uint256")

    p_hist = sub.add_parser("history", help="Transfer events of a seeded contract")
    p_hist.add_argument("contract")
    p_hist.add_argument("--address", default=None)
    p_hist.add_argument("--from-block", default=None)
    p_hist.add_argument("--to-block", default=None)

    p_rcpt = sub.add_parser("receipt", help="decode the transfer in a transaction receipt")
    p_rcpt.add_argument("tx_hash")
    return parser


def run(args: argparse.Namespace, config: AppConfig, node: Any) -> int:
    if args.command == "contracts":
        registry = build_registry(config, node)
        print(_json_dump([c.to_dict() for c in registry.contracts()]))
        return EXIT_OK

    registry = build_registry(config, node, seed=args.command == "history")

    if args.command == "probe":
        meta = registry.get_or_probe(args.address)
        print(_json_dump(meta.to_dict() if meta else None))
        return EXIT_OK if meta else EXIT_FAIL

    if args.command == "balance":
        if args.raw:
            print(balance_of(node, args.contract, args.owner))
            return EXIT_OK
        value = scaled_balance_of(node, registry, args.contract, args.owner)
        if value is None:
            logger.error("%s is not a SEP-20 contract", args.contract)
            return EXIT_FAIL
        print(value)
        return EXIT_OK

    if args.command == "history":
        try:
            records = transfer_history(
                node,
                registry,
                args.contract,
                address=args.address,
                from_block=args.from_block or config.history_from_block,
                to_block=args.to_block or config.history_to_block,
            )
        except UnknownContract as exc:
            logger.error("%s", exc)
            return EXIT_UNKNOWN_CONTRACT
        print(_json_dump([r.to_dict() for r in records]))
        return EXIT_OK

    if args.command == "receipt":
        receipt = node.get_receipt(args.tx_hash)
        info = decode_receipt(receipt, registry, strict_topic=config.strict_transfer_topic)
        print(_json_dump(info.to_dict() if info else None))
        return EXIT_OK

    return EXIT_FAIL


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point: boot, wire the node client and dispatch the subcommand."""

    args = build_parser().parse_args(argv)
    config = app_boot()
    node = Web3NodeClient(config.rpc_url, timeout=config.request_timeout)
    try:
        return run(args, config, node)
    except InvalidAddress as exc:
        logger.error("%s", exc)
        return EXIT_FAIL


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    import sys as _sys

    raise SystemExit(main(_sys.argv[1:]))

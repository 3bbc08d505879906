"""Courier CLI — command-line interface for the message registry.

Usage:
    python -m courier.cli init
    python -m courier.cli keygen
    python -m courier.cli register --public-key <hex>
    python -m courier.cli deposit --private-key <hex> --flags 100000
    python -m courier.cli events --from 0 --to 10
    python -m courier.cli status
    python -m courier.cli check-invariants
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from courier.crypto.keys import PrivateKey, PublicKey
from courier.service import CourierService, ServiceResult


ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG = ROOT / "config"
DEFAULT_DATA = ROOT / "data"


def _report(result: ServiceResult, success_line: str) -> int:
    if result.success:
        print(success_line)
        return 0
    print(f"Failed: {'; '.join(result.errors)}", file=sys.stderr)
    return 1


def cmd_init(args: argparse.Namespace) -> int:
    service = CourierService.from_data_dir(args.config, args.data_dir)
    result = service.initialize()
    return _report(result, json.dumps(result.data, indent=2))


def cmd_keygen(args: argparse.Namespace) -> int:
    key = PrivateKey.random()
    print(json.dumps(
        {"private_key": key.to_hex(), "public_key": key.public_key().to_hex()},
        indent=2,
    ))
    return 0


def cmd_register(args: argparse.Namespace) -> int:
    service = CourierService.from_data_dir(args.config, args.data_dir)
    try:
        public_key = PublicKey.from_hex(args.public_key)
    except ValueError as e:
        print(f"Failed: invalid public key: {e}", file=sys.stderr)
        return 1
    result = service.register_address(public_key)
    return _report(
        result,
        f"Registered {public_key} at index {result.data.get('index')}",
    )


def cmd_deposit(args: argparse.Namespace) -> int:
    service = CourierService.from_data_dir(args.config, args.data_dir)
    try:
        private_key = PrivateKey.from_hex(args.private_key)
        data = int(args.flags, 2) if args.flags is not None else args.data
    except ValueError as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1
    result = service.deposit_message(private_key, data)
    return _report(
        result,
        f"Deposited message {result.data.get('index')} (flags {result.data.get('flags')})",
    )


def cmd_events(args: argparse.Namespace) -> int:
    service = CourierService.from_data_dir(args.config, args.data_dir)
    result = service.messages(args.from_index, args.to_index)
    return _report(result, json.dumps(result.data.get("events", []), indent=2))


def cmd_status(args: argparse.Namespace) -> int:
    service = CourierService.from_data_dir(args.config, args.data_dir)
    print(json.dumps(service.status(), indent=2))
    return 0


def cmd_check_invariants(args: argparse.Namespace) -> int:
    """Check the off-chain mirrors against the committed roots."""
    service = CourierService.from_data_dir(args.config, args.data_dir)
    result = service.verify_mirror()
    return _report(result, "All invariants hold")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="courier",
        description="Courier — verifiable registry and message log",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help="Path to config directory (default: config/)",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA,
        help="Path to state directory (default: data/)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("init", help="Initialize the commitment store")
    sub.add_parser("keygen", help="Generate a participant key pair")
    sub.add_parser("status", help="Show commitments and mirror counts")
    sub.add_parser("check-invariants", help="Check mirrors against committed roots")

    p_reg = sub.add_parser("register", help="Register an eligible address")
    p_reg.add_argument("--public-key", required=True, help="Public key (hex)")

    p_dep = sub.add_parser("deposit", help="Deposit a message")
    p_dep.add_argument("--private-key", required=True, help="Private key (hex)")
    payload = p_dep.add_mutually_exclusive_group(required=True)
    payload.add_argument("--data", type=int, help="Message data (integer)")
    payload.add_argument("--flags", help="Six flag bits f1..f6, e.g. 100000")

    p_ev = sub.add_parser("events", help="List MessageDeposited events")
    p_ev.add_argument("--from", dest="from_index", type=int, default=0, help="First index")
    p_ev.add_argument("--to", dest="to_index", type=int, help="End index (exclusive)")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "init": cmd_init,
        "keygen": cmd_keygen,
        "register": cmd_register,
        "deposit": cmd_deposit,
        "events": cmd_events,
        "status": cmd_status,
        "check-invariants": cmd_check_invariants,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())

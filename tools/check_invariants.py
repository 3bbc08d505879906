#!/usr/bin/env python3
"""Courier invariant checks against the protocol parameters and stored state.

Usage:
    python3 tools/check_invariants.py
    python3 tools/check_invariants.py path/to/data
"""

import sys
from pathlib import Path

# Add src to path for courier imports
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from courier.crypto.merkle import TREE_CAPACITY
from courier.policy.resolver import PolicyResolver
from courier.service import CourierService


CONFIG_DIR = ROOT / "config"
DEFAULT_DATA = ROOT / "data"


def check_params(errors: list[str]) -> None:
    try:
        resolver = PolicyResolver.from_config_dir(CONFIG_DIR)
    except ValueError as e:
        errors.append(str(e))
        return

    policy = resolver.anchor_policy()
    if policy.gas <= 0:
        errors.append("anchoring.gas must be > 0")
    if policy.chain_id <= 0:
        errors.append("anchoring.chain_id must be > 0")


def check_state(data_dir: Path, errors: list[str]) -> None:
    """Replay the stored mirror and compare it with the stored commitments."""
    if not (data_dir / "commitments.json").exists():
        return
    service = CourierService.from_data_dir(CONFIG_DIR, data_dir)
    errors.extend(service.verify_mirror().errors)

    status = service.status()
    if status["eligible_count"] > status["max_eligible"]:
        errors.append(
            f"{status['eligible_count']} eligible addresses exceed the maximum "
            f"of {status['max_eligible']}"
        )
    if status["message_count"] > TREE_CAPACITY:
        errors.append(
            f"{status['message_count']} messages exceed the tree capacity of {TREE_CAPACITY}"
        )
    if status["used_nullifiers"] != status["message_count"]:
        errors.append(
            f"{status['used_nullifiers']} used nullifiers for "
            f"{status['message_count']} messages"
        )


def check(data_dir: Path = DEFAULT_DATA) -> int:
    errors: list[str] = []

    check_params(errors)
    if not errors:
        check_state(data_dir, errors)

    if errors:
        print("Invariant check FAILED:")
        for error in errors:
            print(f"  - {error}")
        return 1

    print("All invariants hold.")
    return 0


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_DATA
    sys.exit(check(target))

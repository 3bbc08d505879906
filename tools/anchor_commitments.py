#!/usr/bin/env python3
"""Anchor the current Courier commitments on Ethereum Sepolia.

Computes the digest of the commitment snapshot (four roots plus store
version) and embeds it in a transaction, giving public, timestamped
proof that the registry and message log were in exactly this state.
Each anchor is appended to docs/ANCHORS.md.

Usage:
    python3 tools/anchor_commitments.py
    python3 tools/anchor_commitments.py "Description of this checkpoint"

Requires:
    SEPOLIA_RPC_URL and PRIVATE_KEY in a .env file at the project root.
"""

import os
import sys
from pathlib import Path

# Add src to path for courier imports
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from dotenv import load_dotenv
from courier.service import CourierService
from courier.crypto.anchor import anchor_snapshot
from courier.policy.resolver import PolicyResolver

# ------------------------------------------------------------------ #
# Configuration                                                       #
# ------------------------------------------------------------------ #

load_dotenv(ROOT / ".env")

RPC_URL = os.getenv("SEPOLIA_RPC_URL")
PRIVATE_KEY = os.getenv("PRIVATE_KEY") or os.getenv("SEPOLIA_PRIVATE_KEY")

if not RPC_URL or not PRIVATE_KEY:
    print("ERROR: Missing SEPOLIA_RPC_URL and/or PRIVATE_KEY in .env")
    sys.exit(1)

CONFIG_DIR = ROOT / "config"
DATA_DIR = ROOT / "data"
ANCHORS_FILE = ROOT / "docs" / "ANCHORS.md"

description = " ".join(sys.argv[1:]) if len(sys.argv) > 1 else ""

service = CourierService.from_data_dir(CONFIG_DIR, DATA_DIR)
if not service.status()["initialized"]:
    print(f"ERROR: No initialized commitment store in {DATA_DIR}")
    sys.exit(1)

snapshot = service.manager.store.snapshot()
policy = PolicyResolver.from_config_dir(CONFIG_DIR).anchor_policy()

print(f"  Store version:  {snapshot.version}")
print(f"  Digest:         {snapshot.digest()}")
if description:
    print(f"  Description:    {description}")
print()
print(f"Anchoring to chain {policy.chain_id} ...")

record = anchor_snapshot(
    snapshot,
    rpc_url=RPC_URL,
    private_key=PRIVATE_KEY,
    chain_id=policy.chain_id,
    gas=policy.gas,
    gas_price_gwei=policy.gas_price_gwei,
    explorer_tx_url=policy.explorer_tx_url,
)

# ------------------------------------------------------------------ #
# Log the anchor                                                      #
# ------------------------------------------------------------------ #

ANCHORS_FILE.parent.mkdir(parents=True, exist_ok=True)

entry_lines = [
    f"## Store version {record.store_version}",
    "",
    f"- `{record.snapshot_digest}` → [tx {record.tx_hash[:10]}...]({record.explorer_url})",
    f"  Ethereum Block: {record.block_number} | Anchored: {record.timestamp_utc}",
]
if description:
    entry_lines.append(f"  **{description}**")
entry_lines.append("")

with ANCHORS_FILE.open("a", encoding="utf-8") as f:
    f.write("\n".join(entry_lines) + "\n")

print(f"  Tx:             {record.tx_hash}")
print(f"  Eth Block:      {record.block_number}")
print(f"  Explorer:       {record.explorer_url}")
print(f"  Logged:         {ANCHORS_FILE}")

"""Commitment anchoring — publishes a snapshot digest on Ethereum.

The digest of a CommitmentSnapshot (canonical JSON of the four scalars
and the store version) is embedded in the data field of a 0-ETH
self-send transaction. The chain only witnesses that this exact state
existed at that block; no code runs on-chain.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from courier.models.commitment import CommitmentSnapshot


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnchorRecord:
    """A record of a successful anchor transaction."""
    store_version: int
    snapshot_digest: str
    tx_hash: str
    block_number: int
    chain_id: int
    timestamp_utc: str
    explorer_url: str


def build_anchor_transaction(
    snapshot: CommitmentSnapshot,
    sender: str,
    nonce: int,
    chain_id: int,
    gas: int,
    gas_price_wei: int,
) -> dict:
    """The unsigned self-send transaction carrying the snapshot digest."""
    return {
        "to": sender,
        "value": 0,
        "gas": gas,
        "gasPrice": gas_price_wei,
        "nonce": nonce,
        "chainId": chain_id,
        "data": bytes.fromhex(snapshot.digest()),
    }


def anchor_snapshot(
    snapshot: CommitmentSnapshot,
    rpc_url: str,
    private_key: str,
    chain_id: int = 11155111,  # Sepolia
    gas: int = 30_000,
    gas_price_gwei: str = "2",
    explorer_tx_url: str = "https://sepolia.etherscan.io/tx/",
    timeout: int = 300,
) -> AnchorRecord:
    """Anchor ``snapshot`` and wait for one confirmation.

    Args:
        snapshot: The store state to anchor.
        rpc_url: Ethereum RPC endpoint URL.
        private_key: Hex-encoded private key for signing.
        chain_id: Network chain ID (default: 11155111 = Sepolia).
        gas: Gas limit for the transaction.
        gas_price_gwei: Gas price in gwei.
        explorer_tx_url: Prefix for the transaction link in the record.
        timeout: Seconds to wait for the receipt.
    """
    from web3 import Web3, HTTPProvider
    from eth_account import Account

    w3 = Web3(HTTPProvider(rpc_url))
    acct = Account.from_key(private_key)

    tx = build_anchor_transaction(
        snapshot,
        sender=acct.address,
        nonce=w3.eth.get_transaction_count(acct.address),
        chain_id=chain_id,
        gas=gas,
        gas_price_wei=w3.to_wei(gas_price_gwei, "gwei"),
    )
    signed = acct.sign_transaction(tx)
    tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
    logger.info("Sent anchor tx %s for store version %d", tx_hash.hex(), snapshot.version)

    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    logger.info("Anchor confirmed in block %d", receipt.blockNumber)

    return AnchorRecord(
        store_version=snapshot.version,
        snapshot_digest=snapshot.digest(),
        tx_hash=tx_hash.hex(),
        block_number=receipt.blockNumber,
        chain_id=chain_id,
        timestamp_utc=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        explorer_url=f"{explorer_tx_url}{tx_hash.hex()}",
    )

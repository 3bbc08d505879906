"""Courier service — the submitting client over the message manager.

The manager only verifies witnesses; it never builds them. This service
holds the off-chain mirrors (eligibility tree, message tree, nullifier
ledger), builds every witness against them, submits the operation, and
only after the commit succeeds brings the mirrors forward and checks
that the committed roots equal the mirror roots.

All operations return a ServiceResult. Failures carry the error class
name and whether rebuilding witnesses against fresh state could help.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from courier.crypto.field import ZERO, field_from_hex, field_to_hex
from courier.crypto.keys import PrivateKey, PublicKey
from courier.crypto.merkle import EligibilityTree, MessageTree
from courier.crypto.nullifier import Nullifier
from courier.engine.flags import decode_flags
from courier.engine.manager import MessageManager
from courier.errors import CourierError
from courier.ledger.nullifier_ledger import NullifierLedger
from courier.models.commitment import CommitmentField
from courier.models.participant import Address, Message
from courier.persistence.commitment_store import CommitmentStore
from courier.persistence.event_log import EventLog
from courier.persistence.mirror_store import MirrorState, MirrorStore
from courier.policy.resolver import PolicyResolver


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


def _rejected(operation: str, error: CourierError) -> ServiceResult:
    logger.info("%s rejected: %s: %s", operation, type(error).__name__, error)
    return ServiceResult(
        success=False,
        errors=[str(error)],
        data={"error": type(error).__name__, "stale_witness": error.stale_witness},
    )


def _storage_failed(operation: str, error: OSError) -> ServiceResult:
    logger.error("%s failed to persist; nothing was committed: %s", operation, error)
    return ServiceResult(
        success=False,
        errors=[f"Storage failure, nothing was committed: {error}"],
        data={"error": type(error).__name__, "stale_witness": False},
    )


class CourierService:
    """Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        service = CourierService(resolver)
        service.initialize()
        service.register_address(alice.public_key())
        service.deposit_message(alice, data=0b100000)
        service.messages(0)

    Persistence (optional):
        service = CourierService(resolver, store=store, mirror_store=mirror)
        # Mirrors are rebuilt from the mirror store on construction.
        service = CourierService.from_data_dir(config_dir, data_dir)
    """

    def __init__(
        self,
        resolver: PolicyResolver,
        store: Optional[CommitmentStore] = None,
        mirror_store: Optional[MirrorStore] = None,
    ) -> None:
        self._resolver = resolver
        self._store = store if store is not None else CommitmentStore()
        self._mirror_store = mirror_store if mirror_store is not None else MirrorStore()
        self._lock = threading.Lock()

        state = self._mirror_store.load()
        self._eligible: list[PublicKey] = []
        self._eligibility_tree = EligibilityTree()
        for pk_hex in state.eligible_addresses:
            public_key = PublicKey.from_hex(pk_hex)
            self._eligible.append(public_key)
            self._eligibility_tree.add_leaf(Address(public_key).hash())

        self._messages: list[Message] = []
        self._message_tree = MessageTree()
        for pk_hex, data_hex in state.messages:
            message = Message(PublicKey.from_hex(pk_hex), field_from_hex(data_hex))
            self._messages.append(message)
            self._message_tree.add_leaf(message.hash())

        self._ledger = NullifierLedger(field_from_hex(k) for k in state.used_nullifier_keys)
        self._manager = MessageManager(self._store, self._ledger, resolver.max_eligible())

        # Set when a commit succeeded but the mirror could not be saved.
        # In-memory mirrors stay aligned with the store; the file does not.
        self._mirror_degraded = False

    @classmethod
    def from_data_dir(cls, config_dir: Path, data_dir: Path) -> CourierService:
        """A service persisted under ``data_dir`` with parameters from ``config_dir``."""
        data_dir.mkdir(parents=True, exist_ok=True)
        resolver = PolicyResolver.from_config_dir(config_dir)
        store = CommitmentStore(
            storage_path=data_dir / "commitments.json",
            event_log=EventLog(storage_path=data_dir / "events.jsonl"),
        )
        mirror = MirrorStore(storage_path=data_dir / "mirror.json")
        return cls(resolver, store=store, mirror_store=mirror)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> ServiceResult:
        """Deploy-time initialization of the commitment store."""
        try:
            snapshot = self._manager.init(self._resolver.nullifier_message())
        except CourierError as e:
            return _rejected("initialize", e)
        return ServiceResult(success=True, data=snapshot.canonical_fields())

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_address(self, public_key: PublicKey) -> ServiceResult:
        """Append ``public_key`` to the eligible set."""
        with self._lock:
            if public_key in self._eligible:
                return ServiceResult(
                    success=False,
                    errors=[f"Address already registered: {public_key}"],
                )

            address = Address(public_key)
            index = self._eligibility_tree.leaf_count
            if index >= self._eligibility_tree.capacity:
                return ServiceResult(success=False, errors=["Eligibility tree is full"])
            witness = self._eligibility_tree.witness(index)

            try:
                root = self._manager.add_eligible_address(address, witness)
            except CourierError as e:
                return _rejected("register_address", e)
            except OSError as e:
                return _storage_failed("register_address", e)

            self._eligible.append(public_key)
            self._eligibility_tree.add_leaf(address.hash())
            errors = self._sync_mirror()
            if root != self._eligibility_tree.compute_root():
                errors.append("Committed eligibility root differs from the mirror root")

            logger.info("Registered %s at index %d", public_key, index)
            return ServiceResult(
                success=not errors,
                errors=errors,
                data={"index": index, "root": field_to_hex(root)},
            )

    def is_registered(self, public_key: PublicKey) -> bool:
        return public_key in self._eligible

    # ------------------------------------------------------------------
    # Deposits
    # ------------------------------------------------------------------

    def deposit_message(self, private_key: PrivateKey, data: int) -> ServiceResult:
        """Deposit ``data`` on behalf of the holder of ``private_key``."""
        with self._lock:
            public_key = private_key.public_key()
            if public_key not in self._eligible:
                return ServiceResult(
                    success=False,
                    errors=[f"Address is not registered: {public_key}"],
                    data={"error": "AddressNotEligible", "stale_witness": False},
                )

            try:
                message = Message(public_key, data)
            except ValueError as e:
                return ServiceResult(success=False, errors=[str(e)])

            index = self._message_tree.leaf_count
            if index >= self._message_tree.capacity:
                return ServiceResult(success=False, errors=["Message tree is full"])

            address = Address(public_key)
            address_witness = self._eligibility_tree.witness(self._eligible.index(public_key))
            message_witness = self._message_tree.witness(index)
            nullifier = Nullifier.create(
                private_key, self._store.get(CommitmentField.NULLIFIER_MESSAGE),
            )

            try:
                root = self._manager.deposit_message(
                    address, message, address_witness, message_witness, nullifier,
                )
            except CourierError as e:
                return _rejected("deposit_message", e)
            except OSError as e:
                return _storage_failed("deposit_message", e)

            self._messages.append(message)
            self._message_tree.add_leaf(message.hash())
            self._ledger.mark_used(nullifier.key())
            errors = self._sync_mirror()
            if root != self._message_tree.compute_root():
                errors.append("Committed messages root differs from the mirror root")
            if self._manager.nullifier_root != self._ledger.root:
                errors.append("Committed nullifier root differs from the ledger root")

            logger.info("Deposited message %d from %s", index, public_key)
            return ServiceResult(
                success=not errors,
                errors=errors,
                data={
                    "index": index,
                    "root": field_to_hex(root),
                    "flags": decode_flags(data).to_bits(),
                    "nullifier_key": field_to_hex(nullifier.key()),
                },
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def messages(self, from_index: int = 0, to_index: Optional[int] = None) -> ServiceResult:
        """MessageDeposited events in ``[from_index, to_index)``, one page at most."""
        if from_index < 0:
            return ServiceResult(success=False, errors=["from_index must be >= 0"])
        limit = self._resolver.event_page_limit()
        end = from_index + limit if to_index is None else min(to_index, from_index + limit)
        events = self._manager.events(from_index, end)
        return ServiceResult(
            success=True,
            data={
                "events": [
                    {
                        "index": e.index,
                        "data": e.payload["data"],
                        "flags": decode_flags(field_from_hex(e.payload["data"])).to_bits(),
                        "store_version": e.store_version,
                    }
                    for e in events
                ],
            },
        )

    def status(self) -> dict[str, Any]:
        snapshot = self._store.snapshot()
        return {
            "initialized": self._store.initialized,
            "commitments": snapshot.canonical_fields(),
            "eligible_count": len(self._eligible),
            "max_eligible": self._manager.max_eligible,
            "message_count": len(self._messages),
            "used_nullifiers": len(self._ledger.used_keys()),
            "event_count": self._store.event_log.count,
            "mirror_degraded": self._mirror_degraded,
        }

    def verify_mirror(self) -> ServiceResult:
        """Check that the off-chain mirrors reproduce the committed roots."""
        snapshot = self._store.snapshot()
        errors: list[str] = []

        expected = self._eligibility_tree.compute_root() if self._eligible else ZERO
        if snapshot.eligible_addresses_commitment != expected:
            errors.append("Eligibility mirror does not match the committed root")

        expected = self._message_tree.compute_root() if self._messages else ZERO
        if snapshot.messages_commitment != expected:
            errors.append("Message mirror does not match the committed root")

        if self._store.initialized and snapshot.nullifier_root != self._ledger.root:
            errors.append("Nullifier ledger does not match the committed root")

        if self._store.event_log.count != len(self._messages):
            errors.append(
                f"Event log holds {self._store.event_log.count} deposits, "
                f"mirror holds {len(self._messages)}"
            )
        return ServiceResult(success=not errors, errors=errors)

    @property
    def manager(self) -> MessageManager:
        return self._manager

    @property
    def ledger(self) -> NullifierLedger:
        return self._ledger

    # ------------------------------------------------------------------
    # Mirror persistence
    # ------------------------------------------------------------------

    def _sync_mirror(self) -> list[str]:
        state = MirrorState(
            eligible_addresses=[pk.to_hex() for pk in self._eligible],
            messages=[(m.public_key.to_hex(), field_to_hex(m.data)) for m in self._messages],
            used_nullifier_keys=[field_to_hex(k) for k in self._ledger.used_keys()],
        )
        try:
            self._mirror_store.save(state)
        except OSError as e:
            self._mirror_degraded = True
            logger.error("Mirror persistence failed after commit: %s", e)
            return [f"Committed, but the mirror could not be saved: {e}"]
        return []

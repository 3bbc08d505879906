"""Commitment store — versioned storage for the four authoritative scalars.

The store does not interpret values; callers derive them. What it does
enforce is the transaction contract every operation runs under:

- ``read`` pins the value it returns for the rest of the transaction;
- ``write`` and ``emit`` are staged, never visible before commit;
- at commit, every pinned value must still equal current state,
  otherwise the whole transaction fails with PreconditionFailed;
- an exception inside the transaction discards everything;
- an OSError while writing events or state at commit leaves both the
  event log and the state file at the previous version.

Usage:
    store = CommitmentStore()
    store.initialize(nullifier_message)
    with store.transaction() as tx:
        root = tx.read(CommitmentField.NULLIFIER_ROOT)
        tx.write(CommitmentField.NULLIFIER_ROOT, new_root)
        tx.emit(EventKind.MESSAGE_DEPOSITED, {"data": "0x..."})
"""

from __future__ import annotations

import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from courier.crypto.field import ZERO, field_from_hex, field_to_hex, to_field
from courier.crypto.merkle_map import EMPTY_MAP_ROOT
from courier.errors import AlreadyInitialized, PreconditionFailed, StoreNotInitialized
from courier.models.commitment import CommitmentField, CommitmentSnapshot
from courier.persistence.event_log import EventKind, EventLog, EventRecord


logger = logging.getLogger(__name__)


class StoreTransaction:
    """Staged reads, writes and events of one operation."""

    def __init__(self, base: CommitmentSnapshot) -> None:
        self._base = base
        self._pinned: dict[CommitmentField, int] = {}
        self._writes: dict[CommitmentField, int] = {}
        self._events: list[tuple[EventKind, dict[str, Any]]] = []

    def read(self, name: CommitmentField) -> int:
        """Return the committed value of ``name`` and pin it until commit."""
        value = self._base.value(name)
        self._pinned.setdefault(name, value)
        return self._pinned[name]

    def write(self, name: CommitmentField, value: int) -> None:
        self._writes[name] = to_field(value)

    def emit(self, kind: EventKind, payload: dict[str, Any]) -> None:
        self._events.append((kind, dict(payload)))

    @property
    def pinned(self) -> dict[CommitmentField, int]:
        return dict(self._pinned)

    @property
    def writes(self) -> dict[CommitmentField, int]:
        return dict(self._writes)

    @property
    def events(self) -> list[tuple[EventKind, dict[str, Any]]]:
        return list(self._events)


class CommitmentStore:
    """The on-chain state: four scalars plus the event log they emit into.

    Optionally persisted to a JSON file; every commit rewrites the file
    atomically (temp file, then replace).
    """

    def __init__(
        self,
        storage_path: Optional[Path] = None,
        event_log: Optional[EventLog] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._storage_path = storage_path
        self._event_log = event_log if event_log is not None else EventLog()
        self._values: dict[CommitmentField, int] = {f: ZERO for f in CommitmentField}
        self._version = 0
        self._initialized = False

        if storage_path and storage_path.exists():
            self._load_from_file(storage_path)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, nullifier_message: int) -> CommitmentSnapshot:
        """Set the deployment values. Allowed exactly once."""
        with self._lock:
            if self._initialized:
                raise AlreadyInitialized("Commitment store is already initialized")
            self._values = {
                CommitmentField.ELIGIBLE_ADDRESSES: ZERO,
                CommitmentField.MESSAGES: ZERO,
                CommitmentField.NULLIFIER_ROOT: EMPTY_MAP_ROOT,
                CommitmentField.NULLIFIER_MESSAGE: to_field(nullifier_message),
            }
            self._version = 1
            self._initialized = True
            self._persist()
            logger.info("Commitment store initialized at version %d", self._version)
            return self._snapshot_unlocked()

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, name: CommitmentField) -> int:
        """Unpinned read for observers. Operations must use a transaction."""
        with self._lock:
            return self._values[name]

    def snapshot(self) -> CommitmentSnapshot:
        with self._lock:
            return self._snapshot_unlocked()

    @property
    def version(self) -> int:
        return self._version

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Run one all-or-nothing operation against a pinned snapshot."""
        with self._lock:
            if not self._initialized:
                raise StoreNotInitialized("Commitment store has not been initialized")
            base = self._snapshot_unlocked()
        tx = StoreTransaction(base)
        yield tx
        self._commit(tx)

    def _commit(self, tx: StoreTransaction) -> None:
        with self._lock:
            for name, pinned in tx.pinned.items():
                if self._values[name] != pinned:
                    raise PreconditionFailed(
                        f"{name.value} changed since it was read "
                        f"({field_to_hex(pinned)} -> {field_to_hex(self._values[name])})"
                    )

            first_event = self._event_log.count
            records = [
                EventRecord.create(
                    index=first_event + offset,
                    event_kind=kind,
                    store_version=self._version + 1,
                    payload=payload,
                )
                for offset, (kind, payload) in enumerate(tx.events)
            ]
            # Events reach disk before the commitments do; either failure undoes both.
            self._event_log.append_batch(records)

            previous_values = dict(self._values)
            previous_version = self._version
            self._values.update(tx.writes)
            self._version += 1
            try:
                self._persist()
            except OSError:
                self._values = previous_values
                self._version = previous_version
                self._event_log.discard_from(first_event)
                raise

            logger.debug(
                "Committed version %d (writes: %s)",
                self._version, ", ".join(n.value for n in tx.writes) or "none",
            )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _snapshot_unlocked(self) -> CommitmentSnapshot:
        return CommitmentSnapshot(
            version=self._version,
            **{f.value: self._values[f] for f in CommitmentField},
        )

    def _persist(self) -> None:
        if self._storage_path is None:
            return
        record = {
            "initialized": self._initialized,
            "version": self._version,
            "fields": {f.value: field_to_hex(self._values[f]) for f in CommitmentField},
        }
        tmp_path = self._storage_path.with_suffix(self._storage_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(record, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp_path, self._storage_path)

    def _load_from_file(self, path: Path) -> None:
        data = json.loads(path.read_text(encoding="utf-8"))
        self._initialized = bool(data["initialized"])
        self._version = int(data["version"])
        self._values = {
            f: field_from_hex(data["fields"][f.value]) for f in CommitmentField
        }

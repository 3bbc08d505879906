"""Append-only event log — the notifications emitted by committed operations.

Every successful deposit appends one MessageDeposited record. Records are
immutable and strictly ordered by index; external observers read them by
range ``[from_index, to_index)``. The log can be persisted to a JSONL
file (one JSON object per line) and is verified record by record when
loaded back.
"""

from __future__ import annotations

import enum
import hashlib
import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


class EventKind(str, enum.Enum):
    """Classification of emitted events."""
    MESSAGE_DEPOSITED = "message_deposited"


def _canonical_hash(
    index: int,
    event_kind: str,
    store_version: int,
    timestamp_utc: str,
    payload: dict[str, Any],
) -> str:
    canonical = json.dumps(
        {
            "index": index,
            "event_kind": event_kind,
            "store_version": store_version,
            "timestamp_utc": timestamp_utc,
            "payload": payload,
        },
        sort_keys=True,
        ensure_ascii=False,
    ).encode("utf-8")
    return f"sha256:{hashlib.sha256(canonical).hexdigest()}"


@dataclass(frozen=True)
class EventRecord:
    """A single immutable event.

    ``store_version`` is the commitment store version produced by the
    commit that emitted the event.
    """
    index: int
    event_kind: EventKind
    store_version: int
    timestamp_utc: str
    payload: dict[str, Any]
    event_hash: str

    @staticmethod
    def create(
        index: int,
        event_kind: EventKind,
        store_version: int,
        payload: dict[str, Any],
        timestamp_utc: Optional[datetime] = None,
    ) -> EventRecord:
        """Create a new event record with computed hash."""
        ts = timestamp_utc or datetime.now(timezone.utc)
        ts_str = ts.strftime("%Y-%m-%dT%H:%M:%SZ")
        return EventRecord(
            index=index,
            event_kind=event_kind,
            store_version=store_version,
            timestamp_utc=ts_str,
            payload=payload,
            event_hash=_canonical_hash(
                index, event_kind.value, store_version, ts_str, payload,
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "event_kind": self.event_kind.value,
            "store_version": self.store_version,
            "timestamp_utc": self.timestamp_utc,
            "payload": self.payload,
            "event_hash": self.event_hash,
        }


def _to_line(event: EventRecord) -> str:
    return json.dumps(event.to_dict(), sort_keys=True, ensure_ascii=False) + "\n"


class EventLog:
    """Append-only, order-preserving event log with optional file persistence."""

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._events: list[EventRecord] = []
        self._storage_path = storage_path

        if storage_path and storage_path.exists():
            self._load_from_file(storage_path)

    def append(self, event: EventRecord) -> None:
        """Append an event to the log.

        Raises ValueError unless the event carries the next index.
        """
        self.append_batch([event])

    def append_batch(self, events: list[EventRecord]) -> None:
        """Append events as a unit: all of them reach the file, or none do.

        Nothing is added in memory until the file write has succeeded.
        """
        for offset, event in enumerate(events):
            expected = len(self._events) + offset
            if event.index != expected:
                raise ValueError(
                    f"Out-of-order event index {event.index}; expected {expected}"
                )

        if self._storage_path and events:
            self._append_to_file(events)

        self._events.extend(events)

    def discard_from(self, start: int) -> None:
        """Drop every event from index ``start`` on, in memory and on disk.

        Only for undoing a batch whose commit did not complete.
        """
        if start >= len(self._events):
            return
        del self._events[start:]
        if self._storage_path:
            self._rewrite_file()

    def events(self, kind: Optional[EventKind] = None) -> list[EventRecord]:
        """Return events, optionally filtered by kind."""
        if kind is None:
            return list(self._events)
        return [e for e in self._events if e.event_kind == kind]

    def events_range(
        self,
        from_index: int,
        to_index: Optional[int] = None,
        kind: Optional[EventKind] = None,
    ) -> list[EventRecord]:
        """Return events with ``from_index <= index < to_index``."""
        if from_index < 0:
            raise ValueError(f"from_index must be >= 0, got {from_index}")
        end = len(self._events) if to_index is None else to_index
        result = self._events[from_index:max(from_index, end)]
        if kind is not None:
            result = [e for e in result if e.event_kind == kind]
        return result

    @property
    def count(self) -> int:
        return len(self._events)

    @property
    def last_event(self) -> Optional[EventRecord]:
        return self._events[-1] if self._events else None

    def _append_to_file(self, events: list[EventRecord]) -> None:
        """Append events to the JSONL file, truncating back on a failed write."""
        data = "".join(_to_line(e) for e in events).encode("utf-8")
        with self._storage_path.open("ab") as f:
            start = f.tell()
            try:
                f.write(data)
                f.flush()
            except OSError:
                f.truncate(start)
                raise

    def _rewrite_file(self) -> None:
        tmp_path = self._storage_path.with_suffix(self._storage_path.suffix + ".tmp")
        tmp_path.write_text("".join(_to_line(e) for e in self._events), encoding="utf-8")
        os.replace(tmp_path, self._storage_path)

    def _load_from_file(self, path: Path) -> None:
        """Load events from a JSONL file with integrity verification.

        Fail-closed: rejects tampered records (hash mismatch) and records
        whose index breaks the sequence.
        """
        with path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                data = json.loads(line)

                index = data["index"]
                if index != len(self._events):
                    raise ValueError(
                        f"Event sequence broken on recovery (line {line_num}): "
                        f"index {index}, expected {len(self._events)}"
                    )

                expected_hash = _canonical_hash(
                    index,
                    data["event_kind"],
                    data["store_version"],
                    data["timestamp_utc"],
                    data["payload"],
                )
                if data["event_hash"] != expected_hash:
                    raise ValueError(
                        f"Integrity check failed (line {line_num}): event {index} "
                        f"stored hash {data['event_hash']} != computed {expected_hash}"
                    )

                self._events.append(EventRecord(
                    index=index,
                    event_kind=EventKind(data["event_kind"]),
                    store_version=data["store_version"],
                    timestamp_utc=data["timestamp_utc"],
                    payload=data["payload"],
                    event_hash=data["event_hash"],
                ))

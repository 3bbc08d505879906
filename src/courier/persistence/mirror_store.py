"""Mirror store — durable copy of the off-chain data behind the commitments.

Only the raw inputs are stored: eligible public keys and messages in
insertion order, and the used nullifier keys. Trees and the ledger map
are rebuilt from them on load.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class MirrorState:
    eligible_addresses: list[str] = field(default_factory=list)  # public key hex
    messages: list[tuple[str, str]] = field(default_factory=list)  # (public key hex, data hex)
    used_nullifier_keys: list[str] = field(default_factory=list)  # field hex


class MirrorStore:
    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._storage_path = storage_path

    def load(self) -> MirrorState:
        if self._storage_path is None or not self._storage_path.exists():
            return MirrorState()
        data = json.loads(self._storage_path.read_text(encoding="utf-8"))
        return MirrorState(
            eligible_addresses=list(data["eligible_addresses"]),
            messages=[(pk, d) for pk, d in data["messages"]],
            used_nullifier_keys=list(data["used_nullifier_keys"]),
        )

    def save(self, state: MirrorState) -> None:
        if self._storage_path is None:
            return
        record = {
            "eligible_addresses": state.eligible_addresses,
            "messages": [list(m) for m in state.messages],
            "used_nullifier_keys": state.used_nullifier_keys,
        }
        tmp_path = self._storage_path.with_suffix(self._storage_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(record, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp_path, self._storage_path)

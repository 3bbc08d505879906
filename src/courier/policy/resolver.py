"""Policy resolver — typed access to the protocol parameters in config/.

Parameters are validated on load: an inconsistent file is rejected
before any store or service is built on it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from courier.crypto.field import field_from_text
from courier.crypto.merkle import TREE_CAPACITY


PARAMS_FILE = "protocol_params.json"


@dataclass(frozen=True)
class AnchorPolicy:
    chain_id: int
    explorer_tx_url: str
    gas: int
    gas_price_gwei: str


class PolicyResolver:
    """Usage:
        resolver = PolicyResolver.from_config_dir(Path("config"))
        resolver.max_eligible()
        resolver.nullifier_message()
    """

    def __init__(self, params: dict[str, Any]) -> None:
        self._params = params
        errors = self.validate()
        if errors:
            raise ValueError("Invalid protocol parameters: " + "; ".join(errors))

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> PolicyResolver:
        path = config_dir / PARAMS_FILE
        with path.open("r", encoding="utf-8") as handle:
            return cls(json.load(handle))

    def validate(self) -> list[str]:
        """Return every problem with the loaded parameters."""
        errors: list[str] = []
        try:
            max_eligible = self._params["registry"]["max_eligible_addresses"]
            domain = self._params["nullifier"]["domain"]
            page_limit = self._params["events"]["page_limit"]
        except KeyError as e:
            return [f"missing parameter: {e.args[0]}"]

        if not isinstance(max_eligible, int) or not 0 < max_eligible <= TREE_CAPACITY:
            errors.append(
                f"registry.max_eligible_addresses must be in 1..{TREE_CAPACITY}, "
                f"got {max_eligible!r}"
            )
        if not isinstance(domain, str) or not domain.strip():
            errors.append("nullifier.domain must be a non-empty string")
        if not isinstance(page_limit, int) or page_limit <= 0:
            errors.append(f"events.page_limit must be > 0, got {page_limit!r}")
        return errors

    def max_eligible(self) -> int:
        return self._params["registry"]["max_eligible_addresses"]

    def nullifier_domain(self) -> str:
        return self._params["nullifier"]["domain"]

    def nullifier_message(self) -> int:
        """The fixed public domain message nullifiers are derived against."""
        return field_from_text(self.nullifier_domain())

    def event_page_limit(self) -> int:
        return self._params["events"]["page_limit"]

    def anchor_policy(self) -> AnchorPolicy:
        anchoring = self._params.get("anchoring", {})
        return AnchorPolicy(
            chain_id=int(anchoring.get("chain_id", 11155111)),
            explorer_tx_url=anchoring.get("explorer_tx_url", "https://sepolia.etherscan.io/tx/"),
            gas=int(anchoring.get("gas", 30_000)),
            gas_price_gwei=str(anchoring.get("gas_price_gwei", "2")),
        )

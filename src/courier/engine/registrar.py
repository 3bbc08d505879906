"""Eligibility registrar — inserts addresses into the eligibility commitment.

The registrar is a privileged role. It folds the new address up the
supplied witness and writes the resulting root; it does not check that
the witness was built against the currently stored root. The only
invariant enforced at registration time is capacity.
"""

from __future__ import annotations

from courier.crypto.merkle import TREE_CAPACITY, EligibilityWitness
from courier.errors import CapacityExceeded
from courier.models.commitment import CommitmentField
from courier.models.participant import Address
from courier.persistence.commitment_store import CommitmentStore


MAX_ELIGIBLE = 100


class EligibilityRegistrar:
    def __init__(self, store: CommitmentStore, max_eligible: int = MAX_ELIGIBLE) -> None:
        if not 0 < max_eligible <= TREE_CAPACITY:
            raise ValueError(
                f"max_eligible must be in 1..{TREE_CAPACITY}, got {max_eligible}"
            )
        self._store = store
        self._max_eligible = max_eligible

    @property
    def max_eligible(self) -> int:
        return self._max_eligible

    def add_eligible_address(self, address: Address, witness: EligibilityWitness) -> int:
        """Insert ``address`` at the witness's index. Returns the new root."""
        if not isinstance(witness, EligibilityWitness):
            raise TypeError(
                f"Expected EligibilityWitness, got {type(witness).__name__}"
            )

        with self._store.transaction() as tx:
            index = witness.index()
            if index >= self._max_eligible:
                raise CapacityExceeded(
                    f"Eligibility registry is full: index {index} >= {self._max_eligible}"
                )
            new_root = witness.calculate_root(address.hash())
            tx.write(CommitmentField.ELIGIBLE_ADDRESSES, new_root)

        return new_root

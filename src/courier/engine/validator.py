"""Message validator — gates every deposit.

A deposit is accepted only if, against one pinned snapshot of the
store:

1. the nullifier was honestly derived from the submitter's key for the
   stored domain message;
2. the ledger proves the nullifier key unused under the stored
   nullifier root (the key is then marked used);
3. the address witness folds to the stored eligibility root;
4. the message flags satisfy rules R1, R2 and R3.

Only then are the new nullifier root and the new message root written
and MessageDeposited emitted. Any failure aborts the whole transaction.
"""

from __future__ import annotations

from courier.crypto.field import field_to_hex
from courier.crypto.merkle import EligibilityWitness, MessageWitness
from courier.crypto.nullifier import Nullifier
from courier.engine.flags import decode_flags, check_flag_rules
from courier.errors import (
    AddressNotEligible,
    NullifierAlreadyUsed,
    NullifierLedgerMismatch,
    NullifierMalformed,
)
from courier.ledger.nullifier_ledger import UNUSED, USED, NullifierWitnessSource
from courier.models.commitment import CommitmentField
from courier.models.participant import Address, Message
from courier.persistence.commitment_store import CommitmentStore, StoreTransaction
from courier.persistence.event_log import EventKind


class MessageValidator:
    def __init__(self, store: CommitmentStore, ledger: NullifierWitnessSource) -> None:
        self._store = store
        self._ledger = ledger

    def deposit_message(
        self,
        address: Address,
        message: Message,
        address_witness: EligibilityWitness,
        message_witness: MessageWitness,
        nullifier: Nullifier,
    ) -> int:
        """Validate and commit one message. Returns the new messages root."""
        if not isinstance(address_witness, EligibilityWitness):
            raise TypeError(
                f"Expected EligibilityWitness, got {type(address_witness).__name__}"
            )
        if not isinstance(message_witness, MessageWitness):
            raise TypeError(
                f"Expected MessageWitness, got {type(message_witness).__name__}"
            )

        with self._store.transaction() as tx:
            self._consume_nullifier(tx, address, nullifier)

            commitment = tx.read(CommitmentField.ELIGIBLE_ADDRESSES)
            if address_witness.calculate_root(address.hash()) != commitment:
                raise AddressNotEligible(
                    "address is not in the committed Eligible Addresses tree"
                )

            check_flag_rules(decode_flags(message.data))

            new_root = message_witness.calculate_root(message.hash())
            tx.write(CommitmentField.MESSAGES, new_root)
            tx.emit(EventKind.MESSAGE_DEPOSITED, {"data": field_to_hex(message.data)})

        return new_root

    def _consume_nullifier(
        self,
        tx: StoreTransaction,
        address: Address,
        nullifier: Nullifier,
    ) -> None:
        nullifier_root = tx.read(CommitmentField.NULLIFIER_ROOT)
        nullifier_message = tx.read(CommitmentField.NULLIFIER_MESSAGE)

        nullifier.verify(nullifier_message)
        if nullifier.public_key != address.public_key:
            raise NullifierMalformed("Nullifier was derived from a different key than the address")

        key = nullifier.key()
        witness = self._ledger.witness_for(key)
        current_root, witness_key = witness.compute_root_and_key(UNUSED)
        if witness_key != key:
            raise NullifierLedgerMismatch(
                f"Ledger witness is for key {witness_key:#x}, not {key:#x}"
            )
        if current_root != nullifier_root:
            used_root, _ = witness.compute_root_and_key(USED)
            if used_root == nullifier_root:
                raise NullifierAlreadyUsed("Nullifier has already been used")
            raise NullifierLedgerMismatch(
                "Ledger witness does not match the committed nullifier root"
            )

        new_root, _ = witness.compute_root_and_key(USED)
        tx.write(CommitmentField.NULLIFIER_ROOT, new_root)

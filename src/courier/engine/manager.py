"""Message manager — the contract surface over the commitment store.

Composes the registrar and the validator over one store and exposes the
read side observers need: the four scalars and the event range query.
"""

from __future__ import annotations

from typing import Optional

from courier.crypto.merkle import EligibilityWitness, MessageWitness
from courier.crypto.nullifier import Nullifier
from courier.engine.registrar import MAX_ELIGIBLE, EligibilityRegistrar
from courier.engine.validator import MessageValidator
from courier.ledger.nullifier_ledger import NullifierWitnessSource
from courier.models.commitment import CommitmentField, CommitmentSnapshot
from courier.models.participant import Address, Message
from courier.persistence.commitment_store import CommitmentStore
from courier.persistence.event_log import EventKind, EventRecord


class MessageManager:
    """Usage:
        manager = MessageManager(CommitmentStore(), ledger)
        manager.init(nullifier_message)
        manager.add_eligible_address(address, eligibility_witness)
        manager.deposit_message(address, message, eligibility_witness,
                                message_witness, nullifier)
        manager.events(0)
    """

    def __init__(
        self,
        store: CommitmentStore,
        ledger: NullifierWitnessSource,
        max_eligible: int = MAX_ELIGIBLE,
    ) -> None:
        self._store = store
        self._registrar = EligibilityRegistrar(store, max_eligible)
        self._validator = MessageValidator(store, ledger)

    def init(self, nullifier_message: int) -> CommitmentSnapshot:
        return self._store.initialize(nullifier_message)

    def add_eligible_address(self, address: Address, witness: EligibilityWitness) -> int:
        return self._registrar.add_eligible_address(address, witness)

    def deposit_message(
        self,
        address: Address,
        message: Message,
        address_witness: EligibilityWitness,
        message_witness: MessageWitness,
        nullifier: Nullifier,
    ) -> int:
        return self._validator.deposit_message(
            address, message, address_witness, message_witness, nullifier,
        )

    def events(self, from_index: int = 0, to_index: Optional[int] = None) -> list[EventRecord]:
        """MessageDeposited events in ``[from_index, to_index)``."""
        return self._store.event_log.events_range(
            from_index, to_index, kind=EventKind.MESSAGE_DEPOSITED,
        )

    @property
    def eligible_addresses_commitment(self) -> int:
        return self._store.get(CommitmentField.ELIGIBLE_ADDRESSES)

    @property
    def messages_commitment(self) -> int:
        return self._store.get(CommitmentField.MESSAGES)

    @property
    def nullifier_root(self) -> int:
        return self._store.get(CommitmentField.NULLIFIER_ROOT)

    @property
    def nullifier_message(self) -> int:
        return self._store.get(CommitmentField.NULLIFIER_MESSAGE)

    @property
    def store(self) -> CommitmentStore:
        return self._store

    @property
    def max_eligible(self) -> int:
        return self._registrar.max_eligible

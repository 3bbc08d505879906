"""Typed failures raised by the registrar, the validator and the store.

Every failure aborts the whole operation: no commitment moves and no
event is emitted. None of them is retryable as-is. The ``stale_witness``
flag marks the ones that may succeed after the caller rebuilds its
witnesses against fresh state; the others reflect an input that will
never be accepted without changing it.
"""

from __future__ import annotations


class CourierError(Exception):
    """Base class for all state-transition failures."""

    stale_witness: bool = False


class CapacityExceeded(CourierError):
    """Raised when the registry already holds the maximum number of addresses."""


class AddressNotEligible(CourierError):
    """Raised when the address witness does not fold to the pinned eligibility root."""

    stale_witness = True


class NullifierMalformed(CourierError):
    """Raised when a nullifier fails its derivation proof."""


class NullifierAlreadyUsed(CourierError):
    """Raised when the ledger proves the nullifier key is already marked used."""


class NullifierLedgerMismatch(CourierError):
    """Raised when the ledger path proves neither state against the pinned root."""

    stale_witness = True


class FlagRuleViolation(CourierError):
    """Raised when the message flags break one of the implication rules."""

    rule: int = 0


class FlagRule1Violated(FlagRuleViolation):
    rule = 1


class FlagRule2Violated(FlagRuleViolation):
    rule = 2


class FlagRule3Violated(FlagRuleViolation):
    rule = 3


class PreconditionFailed(CourierError):
    """Raised at commit when a pinned value changed after it was read."""

    stale_witness = True


class StoreNotInitialized(CourierError):
    """Raised when an operation runs before the store has been initialized."""


class AlreadyInitialized(CourierError):
    """Raised on a second initialization; commitments are never reset."""

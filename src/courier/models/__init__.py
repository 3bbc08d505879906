"""Core data models for Courier."""

from courier.models.commitment import CommitmentField, CommitmentSnapshot
from courier.models.participant import Address, Message

__all__ = [
    "Address",
    "Message",
    "CommitmentField",
    "CommitmentSnapshot",
]

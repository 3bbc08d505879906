"""Message flag decoding and the three implication rules.

The low six bits of ``Message.data`` are six independent flags, read
most-significant first: f1 is the bit of weight 32, f6 the bit of
weight 1. Rules are checked in order and the first violation is raised:

    R1: f1 -> not (f2 or f3 or f4 or f5 or f6)
    R2: f2 -> f3
    R3: f4 -> not (f5 or f6)
"""

from __future__ import annotations

from typing import NamedTuple

from courier.crypto.field import to_field
from courier.errors import FlagRule1Violated, FlagRule2Violated, FlagRule3Violated


FLAG_COUNT = 6
FLAG_MASK = (1 << FLAG_COUNT) - 1


class MessageFlags(NamedTuple):
    f1: bool
    f2: bool
    f3: bool
    f4: bool
    f5: bool
    f6: bool

    def to_bits(self) -> str:
        return "".join("1" if f else "0" for f in self)


def decode_flags(data: int) -> MessageFlags:
    """Decode f1..f6 from the low six bits of ``data``."""
    low = to_field(data) & FLAG_MASK
    return MessageFlags(*(bool(low >> shift & 1) for shift in range(FLAG_COUNT - 1, -1, -1)))


def encode_flags(flags: MessageFlags, high_bits: int = 0) -> int:
    """Pack flags into a data value, keeping ``high_bits`` above the window."""
    low = 0
    for flag in flags:
        low = (low << 1) | int(flag)
    return to_field((high_bits << FLAG_COUNT) | low)


def check_flag_rules(flags: MessageFlags) -> None:
    """Raise the first violated rule, in order R1, R2, R3."""
    if flags.f1 and (flags.f2 or flags.f3 or flags.f4 or flags.f5 or flags.f6):
        raise FlagRule1Violated(
            f"flag 1 is set but not all other flags are clear ({flags.to_bits()})"
        )
    if flags.f2 and not flags.f3:
        raise FlagRule2Violated(f"flag 2 is set but flag 3 is not ({flags.to_bits()})")
    if flags.f4 and (flags.f5 or flags.f6):
        raise FlagRule3Violated(
            f"flag 4 is set but flag 5 or flag 6 is also set ({flags.to_bits()})"
        )


def validate_message_data(data: int) -> MessageFlags:
    """Decode and check; returns the flags when all rules hold."""
    flags = decode_flags(data)
    check_flag_rules(flags)
    return flags

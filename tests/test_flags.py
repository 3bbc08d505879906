"""Tests for flag decoding and rules R1-R3."""

import pytest

from courier.engine.flags import (
    FLAG_MASK,
    MessageFlags,
    check_flag_rules,
    decode_flags,
    encode_flags,
    validate_message_data,
)
from courier.errors import (
    FlagRule1Violated,
    FlagRule2Violated,
    FlagRule3Violated,
    FlagRuleViolation,
)


class TestDecode:
    def test_f1_is_most_significant(self) -> None:
        assert decode_flags(0b100000) == MessageFlags(True, False, False, False, False, False)

    def test_f6_is_least_significant(self) -> None:
        assert decode_flags(0b000001) == MessageFlags(False, False, False, False, False, True)

    def test_high_bits_ignored(self) -> None:
        assert decode_flags((7 << 6) | 0b001100) == decode_flags(0b001100)

    def test_decode_is_idempotent(self) -> None:
        for data in range(FLAG_MASK + 1):
            assert encode_flags(decode_flags(data)) == data
            assert decode_flags(encode_flags(decode_flags(data))) == decode_flags(data)

    def test_encode_keeps_high_bits(self) -> None:
        flags = decode_flags(0b011000)
        assert encode_flags(flags, high_bits=3) == (3 << 6) | 0b011000

    def test_to_bits(self) -> None:
        assert decode_flags(0b011000).to_bits() == "011000"


class TestRules:
    def test_only_f1_accepted(self) -> None:
        assert validate_message_data(32).f1

    def test_33_violates_r1(self) -> None:
        with pytest.raises(FlagRule1Violated):
            validate_message_data(33)

    def test_16_violates_r2(self) -> None:
        with pytest.raises(FlagRule2Violated):
            validate_message_data(16)

    def test_5_violates_r3(self) -> None:
        with pytest.raises(FlagRule3Violated):
            validate_message_data(5)

    def test_f2_with_f3_accepted(self) -> None:
        validate_message_data(0b011000)

    def test_f4_alone_accepted(self) -> None:
        validate_message_data(0b000100)

    def test_zero_accepted(self) -> None:
        validate_message_data(0)

    def test_r1_reported_before_r2(self) -> None:
        # f1 and f2 without f3 breaks both; R1 wins
        with pytest.raises(FlagRule1Violated):
            validate_message_data(0b110000)

    def test_r2_reported_before_r3(self) -> None:
        with pytest.raises(FlagRule2Violated):
            validate_message_data(0b010101)

    def test_rule_numbers(self) -> None:
        for data, rule in ((33, 1), (16, 2), (5, 3)):
            with pytest.raises(FlagRuleViolation) as info:
                check_flag_rules(decode_flags(data))
            assert info.value.rule == rule

    def test_every_accepted_value_satisfies_all_rules(self) -> None:
        for data in range(FLAG_MASK + 1):
            f = decode_flags(data)
            try:
                check_flag_rules(f)
            except FlagRuleViolation:
                continue
            assert not f.f1 or not any(f[1:])
            assert not f.f2 or f.f3
            assert not f.f4 or not (f.f5 or f.f6)

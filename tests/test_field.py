"""Tests for field elements and H."""

import pytest

from courier.crypto.field import (
    FIELD_MODULUS,
    bytes_to_limbs,
    field_from_hex,
    field_from_text,
    field_to_hex,
    hash_fields,
    is_field_element,
    to_field,
)


class TestFieldElements:
    def test_bounds(self) -> None:
        assert is_field_element(0)
        assert is_field_element(FIELD_MODULUS - 1)
        assert not is_field_element(FIELD_MODULUS)
        assert not is_field_element(-1)

    def test_bool_is_not_a_field_element(self) -> None:
        assert not is_field_element(True)

    def test_to_field_rejects_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            to_field(FIELD_MODULUS)

    def test_hex_form_is_fixed_width(self) -> None:
        text = field_to_hex(5)
        assert text == "0x" + "0" * 63 + "5"
        assert field_from_hex(text) == 5

    def test_limbs(self) -> None:
        data = bytes(range(32))
        hi, lo = bytes_to_limbs(data)
        assert hi == int.from_bytes(data[:16], "big")
        assert lo == int.from_bytes(data[16:], "big")

    def test_limbs_reject_wrong_length(self) -> None:
        with pytest.raises(ValueError):
            bytes_to_limbs(b"\x00" * 31)


class TestHash:
    def test_deterministic(self) -> None:
        assert hash_fields((1, 2, 3)) == hash_fields((1, 2, 3))

    def test_order_matters(self) -> None:
        assert hash_fields((1, 2)) != hash_fields((2, 1))

    def test_output_is_field_element(self) -> None:
        assert is_field_element(hash_fields((FIELD_MODULUS - 1,)))

    def test_rejects_non_field_input(self) -> None:
        with pytest.raises(ValueError):
            hash_fields((FIELD_MODULUS,))

    def test_text_domains_differ(self) -> None:
        assert field_from_text("a") != field_from_text("b")

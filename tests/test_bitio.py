from __future__ import annotations

import pytest

from jzip.core.bitio import BitWriter, bits_to_text, code_to_int, iter_bits, iter_text_bits, pack_bits
from jzip.errors import FormatError


def test_bit_writer_msb_first_with_zero_padding() -> None:
    w = BitWriter()
    w.write(0b101, 3)
    w.write_bit(1)
    w.write(0xABC, 12)
    w.write_code((1, 1))
    assert w.bit_count == 18
    assert w.pad_bits == 6
    assert w.getvalue() == bytes([0b10111010, 0b10111100, 0b11000000])


def test_code_helpers() -> None:
    assert code_to_int((1, 0, 1)) == (5, 3)
    assert pack_bits((1, 0, 1)) == b"\xa0"
    assert bits_to_text((1, 0, 1)) == b"101"
    assert list(iter_text_bits(b"0110")) == [0, 1, 1, 0]


def test_iter_bits_stops_at_bit_count() -> None:
    assert list(iter_bits(b"\xa0", 3)) == [1, 0, 1]
    assert list(iter_bits(b"\x81")) == [1, 0, 0, 0, 0, 0, 0, 1]
    with pytest.raises(FormatError):
        list(iter_bits(b"\x00", 9))

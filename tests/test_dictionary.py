from __future__ import annotations

import io

import pytest

from jzip.core.dictionary import dict_from_bytes, dict_to_bytes, read_dict, write_dict
from jzip.core.huffman_tree import build_codes
from jzip.errors import CapacityError, FormatError, UnsupportedVersion

A = ord("a")


def test_golden_vectors_text_and_packed() -> None:
    mapping = {A: (1, 0, 1)}
    assert dict_to_bytes(mapping, "text") == bytes.fromhex("0331303161" "00")
    assert dict_to_bytes(mapping, "packed") == bytes.fromhex("03a061" "00")
    assert dict_to_bytes(mapping, "chunked") == dict_to_bytes(mapping, "packed")


def test_records_are_in_ascending_symbol_order() -> None:
    mapping = {0x62: (1,), 0x61: (0,)}
    assert dict_to_bytes(mapping, "text") == bytes.fromhex("01306101316200")


@pytest.mark.parametrize("revision", ["text", "packed", "chunked"])
def test_roundtrip_leaves_stream_at_body(revision: str) -> None:
    mapping = build_codes(b"the quick brown fox jumps over the lazy dog")
    sink = io.BytesIO()
    n = write_dict(mapping, sink, revision)
    sink.write(b"BODY")

    src = io.BytesIO(sink.getvalue())
    assert read_dict(src, revision) == mapping
    assert src.tell() == n
    assert src.read() == b"BODY"


def test_dict_from_bytes_returns_index_after_terminator() -> None:
    blob = b"XX" + bytes.fromhex("03a06100") + b"rest"
    mapping, idx = dict_from_bytes(blob, 2, "packed")
    assert mapping == {A: (1, 0, 1)}
    assert blob[idx:] == b"rest"


def test_code_of_255_bits_is_accepted() -> None:
    mapping = {0: (1,) * 254 + (0,), 1: (1,) * 255, 2: (0,)}
    blob = dict_to_bytes(mapping, "packed")
    assert dict_from_bytes(blob, 0, "packed")[0] == mapping


def test_code_longer_than_255_bits_is_capacity_error() -> None:
    with pytest.raises(CapacityError):
        dict_to_bytes({0: (1,) * 256}, "packed")


def test_write_rejects_bad_entries() -> None:
    with pytest.raises(FormatError, match="empty code"):
        dict_to_bytes({A: ()}, "packed")
    with pytest.raises(FormatError, match="byte range"):
        dict_to_bytes({300: (0,)}, "packed")


@pytest.mark.parametrize(
    "hexblob, revision, needle",
    [
        ("", "packed", "length"),
        ("03", "packed", "path"),
        ("0331", "text", "path"),
        ("03a0", "packed", "symbol"),
        ("03a061", "packed", "length"),
    ],
)
def test_truncated_dictionary(hexblob: str, revision: str, needle: str) -> None:
    with pytest.raises(FormatError, match=needle):
        dict_from_bytes(bytes.fromhex(hexblob), 0, revision)


def test_duplicate_symbol_is_rejected() -> None:
    blob = bytes.fromhex("010061" "018061" "00")
    with pytest.raises(FormatError, match="duplicate symbol"):
        dict_from_bytes(blob, 0, "packed")


def test_invalid_bit_token_in_text_path() -> None:
    with pytest.raises(FormatError, match="invalid bit token 0x32"):
        dict_from_bytes(bytes.fromhex("01326100"), 0, "text")


def test_non_zero_padding_in_packed_path() -> None:
    with pytest.raises(FormatError, match="padding"):
        dict_from_bytes(bytes.fromhex("01c06100"), 0, "packed")


def test_unknown_revision() -> None:
    with pytest.raises(UnsupportedVersion):
        dict_to_bytes({A: (0,)}, "zip")

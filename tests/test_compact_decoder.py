from __future__ import annotations

import pytest

from jzip.core.compact_decoder import (
    MAX_ARRAY_DEPTH,
    WIDE_SENTINEL,
    CompactDecoder,
    build_decoder,
    path_index,
    pick_sentinel,
)
from jzip.core.huffman_tree import HuffmanTree, build_codes
from jzip.errors import DecoderIndexError, FormatError, InvalidCode, TruncatedStream

A, B, C, D = 0x41, 0x42, 0x43, 0x44

LONG_C = (1,) * 19 + (0,)
LONG_D = (1,) * 20

# A=0, B=10, C=1^19 0, D=1^20 : prefix-free, two codes of length 20
OVERFLOW_CODES = {A: (0,), B: (1, 0), C: LONG_C, D: LONG_D}


def _bits(*codes: tuple[int, ...]) -> list[int]:
    out: list[int] = []
    for c in codes:
        out.extend(c)
    return out


def test_path_index_recurrence() -> None:
    assert path_index(()) == 0
    assert path_index((0,)) == 1
    assert path_index((1,)) == 2
    assert path_index((0, 0)) == 3
    assert path_index((1, 1)) == 6
    assert path_index((1,) * 13) == 2**14 - 2


def test_array_size_and_depth_follow_longest_code() -> None:
    codes = build_codes(b"aaaabbc")  # lengths 1, 2, 2
    dec = build_decoder(codes)
    assert dec.depth == 2
    assert dec.max_len == 2
    assert len(dec) == 2 ** (2 + 1) - 1
    assert dec.overflow == {}


def test_depth_is_capped() -> None:
    dec = build_decoder(OVERFLOW_CODES)
    assert dec.max_len == 20
    assert dec.depth == MAX_ARRAY_DEPTH
    assert len(dec) == 2 ** (MAX_ARRAY_DEPTH + 1) - 1


def test_sentinel_is_lowest_unused_byte() -> None:
    assert pick_sentinel([1, 2, 3]) == 0
    assert pick_sentinel([0, 1, 2, 5]) == 3
    assert pick_sentinel(range(256)) == WIDE_SENTINEL

    dec = build_decoder({0: (0,), 1: (1, 0), 2: (1, 1)})
    assert dec.sentinel == 3


def test_resolve_hits_and_misses() -> None:
    codes = build_codes(b"aaaabbc")  # a=1 b=01 c=00
    dec = build_decoder(codes)
    assert dec.resolve((1,)) == ord("a")
    assert dec.resolve((0, 1)) == ord("b")
    assert dec[(0, 0)] == ord("c")
    # internal node: not a complete code yet
    assert dec.resolve((0,)) is None
    assert dec.resolve(()) is None


def test_overflow_path_for_length_20_codes() -> None:
    dec = build_decoder(OVERFLOW_CODES)
    assert set(dec.overflow) == {LONG_C, LONG_D}
    assert not dec.in_array(LONG_C)
    assert dec.resolve(LONG_C) == C
    assert dec.resolve(LONG_D) == D
    # inside the array, still an internal node
    assert dec.resolve((1,) * MAX_ARRAY_DEPTH) is None
    # past the array but not a code
    assert dec.resolve((1,) * 15) is None

    bits = _bits((0,), LONG_C, LONG_D, (1, 0), (0,))
    assert dec.decode_bits(bits) == bytes([A, C, D, B, A])


def test_all_256_symbols_use_wide_sentinel() -> None:
    data = bytes(range(256)) * 3 + b"\x00" * 50
    tree = HuffmanTree.from_bytes(data)
    codes = tree.codes()
    dec = build_decoder(codes)
    assert dec.sentinel == WIDE_SENTINEL
    for sym, code in codes.items():
        assert dec.resolve(code) == sym
    bits = _bits(*(codes[b] for b in data))
    assert dec.decode_bits(bits, strict=True) == data


def test_max_length_255_codes_decode() -> None:
    fib = [1, 1]
    while len(fib) < 256:
        fib.append(fib[-1] + fib[-2])
    codes = HuffmanTree.from_freq_table(dict(enumerate(fib))).codes()
    dec = build_decoder(codes)
    assert dec.max_len == 255
    assert len(dec.overflow) == 256 - MAX_ARRAY_DEPTH
    msg = bytes([0, 1, 255, 128, 7])
    assert dec.decode_bits(_bits(*(codes[b] for b in msg)), strict=True) == msg


def test_trailing_partial_code_lenient_and_strict() -> None:
    codes = build_codes(b"aaaabbc")  # a=1 b=01 c=00
    dec = build_decoder(codes)
    bits = [1, 0, 1, 0]  # a b + dangling 0
    assert dec.decode_bits(bits) == b"ab"
    with pytest.raises(TruncatedStream):
        dec.decode_bits(bits, strict=True)


def test_bits_matching_no_code_raise_invalid_code() -> None:
    # incomplete dictionary: only "0" is a code, "1..." can never resolve
    dec = CompactDecoder({(0,): A})
    with pytest.raises(InvalidCode):
        dec.decode_bits([0, 1, 1])


def test_rejects_empty_and_prefix_codes() -> None:
    with pytest.raises(FormatError, match="empty code"):
        CompactDecoder({(): A})
    with pytest.raises(FormatError, match="prefix-free"):
        build_decoder({A: (0,), B: (0, 1)})
    with pytest.raises(FormatError):
        build_decoder({A: (0, 1), B: (0, 1)})


def test_index_outside_array_is_internal_error() -> None:
    dec = build_decoder({A: (0,), B: (1,)})
    with pytest.raises(DecoderIndexError):
        dec._lookup(len(dec))

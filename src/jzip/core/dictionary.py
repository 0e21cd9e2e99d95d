"""Dictionary section: the symbol -> code table stored in front of the body.

Layout, repeated for every symbol in ascending order:

    [ LEN(1) | PATH | SYMBOL(1) ]

closed by a single LEN == 0 byte. PATH depends on the revision:

  - text:           LEN bytes, b"0" or b"1" per bit
  - packed/chunked: ceil(LEN / 8) bytes, bits MSB-first, zero padded

e.g. symbol 'a' with code 101:
  text   -> 03 31 30 31 61
  packed -> 03 a0 61
"""

from __future__ import annotations

import io
from collections.abc import Mapping
from typing import BinaryIO

from jzip.core.bitio import bits_to_text, iter_bits, iter_text_bits, pack_bits
from jzip.core.huffman_tree import Code
from jzip.core.revision import is_packed, revision_id
from jzip.errors import CapacityError, FormatError

DICT_TERMINATOR = 0x00
MAX_CODE_LEN = 0xFF


def _encode_path(code: Code, rev: int) -> bytes:
    if is_packed(rev):
        return pack_bits(code)
    return bits_to_text(code)


def write_dict(mapping: Mapping[int, Code], sink: BinaryIO, revision: int | str = "packed") -> int:
    """Write the dictionary to ``sink``; returns the number of bytes written."""
    blob = dict_to_bytes(mapping, revision)
    sink.write(blob)
    return len(blob)


def dict_to_bytes(mapping: Mapping[int, Code], revision: int | str = "packed") -> bytes:
    rev = revision_id(revision)
    out = bytearray()
    for sym in sorted(mapping):
        code = tuple(mapping[sym])
        if not 0 <= sym <= 0xFF:
            raise FormatError(f"symbol out of byte range: {sym}")
        if not code:
            raise FormatError(f"empty code for symbol {sym}")
        if len(code) > MAX_CODE_LEN:
            raise CapacityError(
                f"code for symbol {sym} is {len(code)} bits (max {MAX_CODE_LEN})"
            )
        out.append(len(code))
        out += _encode_path(code, rev)
        out.append(sym)
    out.append(DICT_TERMINATOR)
    return bytes(out)


def _read_exact(source: BinaryIO, n: int, what: str) -> bytes:
    b = source.read(n)
    if b is None or len(b) != n:
        raise FormatError(f"dictionary truncated ({what})")
    return b


def _decode_path(raw: bytes, length: int, rev: int) -> Code:
    if not is_packed(rev):
        return tuple(iter_text_bits(raw))
    code = tuple(iter_bits(raw, length))
    tail = tuple(iter_bits(raw))[length:]
    if any(tail):
        raise FormatError("dictionary path has non-zero padding bits")
    return code


def read_dict(source: BinaryIO, revision: int | str = "packed") -> dict[int, Code]:
    """
    Read a dictionary from ``source`` up to and including its terminator.

    The stream is left on the first body byte.
    """
    rev = revision_id(revision)
    mapping: dict[int, Code] = {}
    while True:
        length = _read_exact(source, 1, "length")[0]
        if length == DICT_TERMINATOR:
            break

        nbytes = (length + 7) // 8 if is_packed(rev) else length
        raw = _read_exact(source, nbytes, "path")
        code = _decode_path(raw, length, rev)

        sym = _read_exact(source, 1, "symbol")[0]
        if sym in mapping:
            raise FormatError(f"duplicate symbol in dictionary: {sym}")
        mapping[sym] = code
    return mapping


def dict_from_bytes(blob: bytes, idx: int = 0, revision: int | str = "packed") -> tuple[dict[int, Code], int]:
    """Parse a dictionary at ``blob[idx:]``; returns (mapping, index after terminator)."""
    buf = io.BytesIO(blob)
    buf.seek(idx)
    mapping = read_dict(buf, revision)
    return mapping, buf.tell()

"""Huffman body codec: input bytes <-> coded bitstream.

Body layouts:

  text:    ASCII '0'/'1' per bit, no padding
  packed:  [ PAD(1) | BITS... ]           PAD = zero bits appended (0..7)
  chunked: [ PAD(1) | DATA(chunk_size) ]* [ PAD(1) | DATA(<= chunk_size) ]

In the chunked layout a code never crosses a chunk boundary: when the next
code does not fit, the chunk is closed, its unused bits counted in PAD. Chunks
therefore decode on their own, given the shared (read-only) decoder. This
module never starts threads; callers can pass their own ``map_fn``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import BinaryIO

from jzip.core.bitio import BitWriter, bits_to_text, code_to_int, iter_bits, iter_text_bits
from jzip.core.compact_decoder import CompactDecoder, build_decoder
from jzip.core.huffman_tree import Code, build_tree
from jzip.core.revision import REV_CHUNKED, REV_PACKED, REV_TEXT, revision_id
from jzip.errors import FormatError, UsageError

CHUNK_SIZE_DEFAULT = 64 * 1024
# 32 bytes = 256 bits: any code (<= 255 bits) fits, and PAD fits in one byte
CHUNK_SIZE_MIN = 32


@dataclass(frozen=True)
class Chunk:
    pad: int
    data: bytes

    @property
    def nbits(self) -> int:
        return len(self.data) * 8 - self.pad


def check_chunk_size(chunk_size: int) -> int:
    chunk_size = int(chunk_size)
    if chunk_size < CHUNK_SIZE_MIN:
        raise UsageError(f"chunk size must be >= {CHUNK_SIZE_MIN} bytes (got {chunk_size})")
    return chunk_size


def _code_table(mapping: Mapping[int, Code]) -> list[tuple[int, int] | None]:
    table: list[tuple[int, int] | None] = [None] * 256
    for sym, code in mapping.items():
        table[sym] = code_to_int(code)
    return table


def _lookup(table: list[tuple[int, int] | None], b: int) -> tuple[int, int]:
    entry = table[b]
    if entry is None:
        raise FormatError(f"byte 0x{b:02x} has no code in the dictionary")
    return entry


# -------------------
# Encode
# -------------------
def encode_text(data: bytes, mapping: Mapping[int, Code]) -> bytes:
    out = bytearray()
    for b in data:
        code = mapping.get(b)
        if code is None:
            raise FormatError(f"byte 0x{b:02x} has no code in the dictionary")
        out += bits_to_text(code)
    return bytes(out)


def encode_packed(data: bytes, mapping: Mapping[int, Code]) -> bytes:
    table = _code_table(mapping)
    w = BitWriter()
    for b in data:
        value, length = _lookup(table, b)
        w.write(value, length)
    return bytes([w.pad_bits]) + w.getvalue()


def iter_encode_chunks(
    data: bytes, mapping: Mapping[int, Code], chunk_size: int = CHUNK_SIZE_DEFAULT
) -> Iterator[Chunk]:
    chunk_size = check_chunk_size(chunk_size)
    chunk_bits = chunk_size * 8
    table = _code_table(mapping)

    w = BitWriter()
    for b in data:
        value, length = _lookup(table, b)
        if w.bit_count + length > chunk_bits:
            pad = chunk_bits - w.bit_count
            yield Chunk(pad=pad, data=w.getvalue().ljust(chunk_size, b"\x00"))
            w = BitWriter()
        w.write(value, length)

    if w.bit_count:
        yield Chunk(pad=w.pad_bits, data=w.getvalue())


def encode_chunked(
    data: bytes, mapping: Mapping[int, Code], chunk_size: int = CHUNK_SIZE_DEFAULT
) -> bytes:
    out = bytearray()
    for chunk in iter_encode_chunks(data, mapping, chunk_size):
        out.append(chunk.pad)
        out += chunk.data
    return bytes(out)


def encode_body(
    data: bytes,
    mapping: Mapping[int, Code],
    revision: int | str = "packed",
    chunk_size: int = CHUNK_SIZE_DEFAULT,
) -> bytes:
    rev = revision_id(revision)
    if rev == REV_TEXT:
        return encode_text(data, mapping)
    if rev == REV_PACKED:
        return encode_packed(data, mapping)
    return encode_chunked(data, mapping, chunk_size)


def write_body(
    data: bytes,
    mapping: Mapping[int, Code],
    sink: BinaryIO,
    revision: int | str = "packed",
    chunk_size: int = CHUNK_SIZE_DEFAULT,
) -> int:
    """Encode ``data`` into ``sink``; returns the number of bytes written."""
    body = encode_body(data, mapping, revision, chunk_size)
    sink.write(body)
    return len(body)


# -------------------
# Decode
# -------------------
def split_chunks(body: bytes, chunk_size: int = CHUNK_SIZE_DEFAULT) -> list[Chunk]:
    chunk_size = check_chunk_size(chunk_size)
    chunks: list[Chunk] = []
    idx = 0
    while idx < len(body):
        pad = body[idx]
        data = body[idx + 1 : idx + 1 + chunk_size]
        if not data:
            raise FormatError(f"chunk at offset {idx} has no data")
        if pad >= len(data) * 8:
            raise FormatError(f"chunk at offset {idx}: pad {pad} leaves no bits")
        chunks.append(Chunk(pad=pad, data=data))
        idx += 1 + len(data)
    return chunks


def decode_chunk(chunk: Chunk, decoder: CompactDecoder, strict: bool = False) -> bytes:
    return decoder.decode_bits(iter_bits(chunk.data, chunk.nbits), strict=strict)


def decode_chunks(
    chunks: Iterable[Chunk],
    decoder: CompactDecoder,
    strict: bool = False,
    map_fn: Callable[..., Iterable[bytes]] = map,
) -> bytes:
    """Decode chunks in order; ``map_fn`` may be e.g. ``ThreadPoolExecutor.map``."""
    parts = map_fn(lambda c: decode_chunk(c, decoder, strict), list(chunks))
    return b"".join(parts)


def decode_packed(body: bytes, decoder: CompactDecoder, strict: bool = False) -> bytes:
    if not body:
        raise FormatError("packed body is missing its pad byte")
    pad = body[0]
    bits = body[1:]
    if pad > 7 or (pad and not bits):
        raise FormatError(f"packed body: invalid pad count {pad}")
    return decoder.decode_bits(iter_bits(bits, len(bits) * 8 - pad), strict=strict)


def decode_text(body: bytes, decoder: CompactDecoder, strict: bool = False) -> bytes:
    return decoder.decode_bits(iter_text_bits(body), strict=strict)


def decode_body(
    body: bytes,
    decoder: CompactDecoder,
    revision: int | str = "packed",
    chunk_size: int = CHUNK_SIZE_DEFAULT,
    strict: bool = False,
    map_fn: Callable[..., Iterable[bytes]] = map,
) -> bytes:
    rev = revision_id(revision)
    if rev == REV_TEXT:
        return decode_text(body, decoder, strict)
    if rev == REV_PACKED:
        return decode_packed(body, decoder, strict)
    return decode_chunks(split_chunks(body, chunk_size), decoder, strict, map_fn=map_fn)


# -------------------
# Codec
# -------------------
@dataclass
class HuffmanCodec:
    """Whole-buffer codec for one revision: bytes -> (dictionary mapping, body)."""

    revision: int | str = "packed"
    chunk_size: int = CHUNK_SIZE_DEFAULT
    strict: bool = False

    def __post_init__(self) -> None:
        self.revision = revision_id(self.revision)
        if self.revision == REV_CHUNKED:
            self.chunk_size = check_chunk_size(self.chunk_size)

    def compress(self, data: bytes) -> tuple[dict[int, Code], bytes]:
        mapping = build_tree(data).codes()
        return mapping, encode_body(data, mapping, self.revision, self.chunk_size)

    def decompress(
        self,
        mapping: Mapping[int, Code],
        body: bytes,
        map_fn: Callable[..., Iterable[bytes]] = map,
    ) -> bytes:
        decoder = build_decoder(mapping)
        return decode_body(body, decoder, self.revision, self.chunk_size, self.strict, map_fn)

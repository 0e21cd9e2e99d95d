from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from jzip.core.codec_huffman import (
    CHUNK_SIZE_DEFAULT,
    HuffmanCodec,
    check_chunk_size,
    decode_body,
    split_chunks,
)
from jzip.core.compact_decoder import build_decoder
from jzip.core.dictionary import dict_from_bytes, dict_to_bytes
from jzip.core.huffman_tree import Code
from jzip.core.revision import REV_CHUNKED, REVISION_TO_NAME, revision_id
from jzip.errors import BadMagic, FormatError, TruncatedStream, UnsupportedVersion, UsageError

MAGIC = b"JZP"
VERSION_CONTAINER_V1 = 1

# -------------------
# Container v1
# [MAGIC(3)|VER(1)|REV(1)|varint(N)|varint(CHUNK) if REV==chunked|DICTIONARY|BODY]
# -------------------


def _enc_varint(x: int) -> bytes:
    if x < 0:
        raise ValueError("negative varint not supported")
    out = bytearray()
    while True:
        b = x & 0x7F
        x >>= 7
        if x:
            out.append(0x80 | b)
        else:
            out.append(b)
            break
    return bytes(out)


def _dec_varint(buf: bytes, idx: int) -> tuple[int, int]:
    shift = 0
    x = 0
    while True:
        if idx >= len(buf):
            raise FormatError("container header truncated (varint)")
        b = buf[idx]
        idx += 1
        x |= (b & 0x7F) << shift
        if (b & 0x80) == 0:
            break
        shift += 7
        if shift > 63:
            raise FormatError("container header: varint too large")
    return x, idx


@dataclass(frozen=True)
class ContainerHeader:
    revision: int
    n: int  # original length in bytes
    chunk_size: int | None = None
    version: int = VERSION_CONTAINER_V1

    @property
    def revision_name(self) -> str:
        return REVISION_TO_NAME[self.revision]


@dataclass(frozen=True)
class Container:
    header: ContainerHeader
    mapping: dict[int, Code]
    body: bytes
    dict_size: int

    @property
    def header_size(self) -> int:
        return len(_pack_header(self.header))


def _pack_header(h: ContainerHeader) -> bytes:
    out = bytearray()
    out += MAGIC
    out.append(h.version)
    out.append(h.revision)
    out += _enc_varint(h.n)
    if h.revision == REV_CHUNKED:
        out += _enc_varint(int(h.chunk_size or CHUNK_SIZE_DEFAULT))
    return bytes(out)


def is_container(blob: bytes) -> bool:
    return blob[:3] == MAGIC


def make_header(n: int, revision: int | str, chunk_size: int = CHUNK_SIZE_DEFAULT) -> ContainerHeader:
    rev = revision_id(revision)
    if rev == REV_CHUNKED:
        return ContainerHeader(revision=rev, n=n, chunk_size=check_chunk_size(chunk_size))
    return ContainerHeader(revision=rev, n=n)


def assemble_container(header: ContainerHeader, mapping: dict[int, Code], body: bytes) -> bytes:
    return _pack_header(header) + dict_to_bytes(mapping, header.revision) + body


def pack_container(
    data: bytes, revision: int | str = "packed", chunk_size: int = CHUNK_SIZE_DEFAULT
) -> bytes:
    codec = HuffmanCodec(revision=revision, chunk_size=chunk_size)
    mapping, body = codec.compress(data)
    return assemble_container(make_header(len(data), codec.revision, codec.chunk_size), mapping, body)


def unpack_container(blob: bytes) -> Container:
    if len(blob) < 3 or blob[:3] != MAGIC:
        raise BadMagic("not a jzip file (bad magic)")
    if len(blob) < 5:
        raise FormatError("container header truncated")

    idx = 3
    ver = blob[idx]
    idx += 1
    if ver != VERSION_CONTAINER_V1:
        raise UnsupportedVersion(f"unsupported container version: {ver}")

    rev = revision_id(blob[idx])
    idx += 1

    n, idx = _dec_varint(blob, idx)
    chunk_size = None
    if rev == REV_CHUNKED:
        chunk_size, idx = _dec_varint(blob, idx)
        try:
            check_chunk_size(chunk_size)
        except UsageError as e:
            raise FormatError(str(e)) from e

    dict_start = idx
    mapping, idx = dict_from_bytes(blob, idx, rev)
    if n and not mapping:
        raise FormatError("empty dictionary for a non-empty original")

    header = ContainerHeader(revision=rev, n=n, chunk_size=chunk_size, version=ver)
    return Container(header=header, mapping=mapping, body=blob[idx:], dict_size=idx - dict_start)


# -------------------
# Engine
# -------------------
@dataclass
class Engine:
    revision: int | str = "packed"
    chunk_size: int = CHUNK_SIZE_DEFAULT

    def compress(self, input_bytes: bytes) -> bytes:
        return pack_container(input_bytes, self.revision, self.chunk_size)

    def decompress(
        self,
        container_blob: bytes,
        strict: bool = False,
        map_fn: Callable[..., Iterable[bytes]] = map,
    ) -> bytes:
        c = unpack_container(container_blob)
        return decode_container(c, strict=strict, map_fn=map_fn)


def decode_container(
    c: Container, strict: bool = False, map_fn: Callable[..., Iterable[bytes]] = map
) -> bytes:
    h = c.header
    decoder = build_decoder(c.mapping)
    out = decode_body(
        c.body,
        decoder,
        h.revision,
        h.chunk_size or CHUNK_SIZE_DEFAULT,
        strict,
        map_fn,
    )
    if strict and len(out) != h.n:
        raise TruncatedStream(f"decoded {len(out)} bytes, header says {h.n}")
    return out


def container_chunk_count(c: Container) -> int:
    if c.header.revision != REV_CHUNKED:
        return 1
    return len(split_chunks(c.body, c.header.chunk_size or CHUNK_SIZE_DEFAULT))

"""File-level glue: read a file, run the codec, write the result.

The core works on in-memory bytes only; everything touching the filesystem
(and the optional thread pool for chunked decode) lives here.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from jzip.config import CodecSpecV1
from jzip.core.codec_huffman import encode_body, split_chunks
from jzip.core.dictionary import dict_to_bytes
from jzip.core.huffman_tree import build_tree
from jzip.core.revision import REV_CHUNKED
from jzip.engine.container import (
    assemble_container,
    container_chunk_count,
    decode_container,
    make_header,
    unpack_container,
)
from jzip.errors import InputError, VerifyMismatch
from jzip.report import FileStats, PhaseTimer

JZIP_SUFFIX = ".jzip"


def default_output_path(input_path: Path) -> Path:
    return input_path.with_name(input_path.name + JZIP_SUFFIX)


def read_input(path: Path, *, max_bytes: int | None = None) -> bytes:
    if not path.exists():
        raise InputError(f"file not found: {path}")
    if not path.is_file():
        raise InputError(f"not a regular file: {path}")
    size = path.stat().st_size
    if size == 0:
        raise InputError(f"file is empty: {path}")
    if max_bytes is not None and size > max_bytes:
        raise InputError(f"file is too large: {path} ({size} bytes, max {max_bytes})")
    return path.read_bytes()


def compress_bytes_timed(data: bytes, spec: CodecSpecV1, timer: PhaseTimer) -> tuple[bytes, FileStats]:
    tree = build_tree(data)
    timer.mark("huffmanTree")
    mapping = tree.codes()
    timer.mark("getKeys")
    dict_blob = dict_to_bytes(mapping, spec.revision)
    timer.mark("writeDict")
    body = encode_body(data, mapping, spec.revision, spec.chunk_size)
    timer.mark("compress")

    header = make_header(len(data), spec.revision, spec.chunk_size)
    blob = assemble_container(header, mapping, body)
    stats = FileStats(
        original_size=len(data),
        compressed_size=len(blob),
        dict_size=len(dict_blob),
        symbols=len(mapping),
        revision=spec.revision,
        chunks=len(split_chunks(body, spec.chunk_size)) if header.revision == REV_CHUNKED else 1,
    )
    return blob, stats


def compress_file(
    input_path: str | Path,
    output_path: str | Path | None = None,
    spec: CodecSpecV1 | None = None,
) -> FileStats:
    """Compress one file; output defaults to ``<input>.jzip``."""
    spec = spec or CodecSpecV1()
    inp = Path(input_path)
    out = Path(output_path) if output_path is not None else default_output_path(inp)

    timer = PhaseTimer()
    data = read_input(inp, max_bytes=spec.max_input_bytes)
    timer.mark("slurp")

    blob, stats = compress_bytes_timed(data, spec, timer)

    out.write_bytes(blob)
    timer.mark("writeFile")

    stats.timings_us = dict(timer.phases)
    stats.timings_us["cumTime"] = timer.total_us()
    return stats


def decompress_blob(blob: bytes, *, strict: bool = False, jobs: int = 1) -> bytes:
    c = unpack_container(blob)
    if jobs > 1 and container_chunk_count(c) > 1:
        # chunks are decode-independent; ex.map keeps their order
        with ThreadPoolExecutor(max_workers=int(jobs)) as ex:
            return decode_container(c, strict=strict, map_fn=ex.map)
    return decode_container(c, strict=strict)


def decompress_file(
    input_path: str | Path,
    output_path: str | Path,
    *,
    strict: bool = False,
    jobs: int = 1,
) -> int:
    """Decompress one file; returns the number of bytes written."""
    inp = Path(input_path)
    blob = read_input(inp)
    data = decompress_blob(blob, strict=strict, jobs=jobs)
    Path(output_path).write_bytes(data)
    return len(data)


def verify_file(
    input_path: str | Path,
    original_path: str | Path | None = None,
    *,
    jobs: int = 1,
) -> int:
    """
    Strict decode of a jzip file, optionally compared with the original bytes.

    Returns the decoded length.
    """
    blob = read_input(Path(input_path))
    data = decompress_blob(blob, strict=True, jobs=jobs)
    if original_path is not None:
        original = Path(original_path).read_bytes()
        if data != original:
            first = next(
                (i for i, (a, b) in enumerate(zip(data, original)) if a != b),
                min(len(data), len(original)),
            )
            raise VerifyMismatch(
                f"decoded data differs from {original_path} at offset {first} "
                f"(decoded={len(data)} original={len(original)})"
            )
    return len(data)

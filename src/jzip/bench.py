"""Per-phase timing of a full round trip, with an optional zstd size baseline.

Runs: tree -> codes -> dictionary -> encode -> read dictionary -> decoder ->
decode, then checks the decoded bytes against the input.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any

from jzip.config import CodecSpecV1
from jzip.core.codec_huffman import decode_body, write_body
from jzip.core.codec_zstd import CodecZstd
from jzip.core.compact_decoder import build_decoder
from jzip.core.dictionary import read_dict, write_dict
from jzip.core.huffman_tree import build_tree
from jzip.errors import VerifyMismatch
from jzip.report import PhaseTimer


@dataclass
class BenchResult:
    original_size: int
    jzip_size: int
    revision: str
    zstd_size: int | None = None
    timings_us: dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "original_size": self.original_size,
            "jzip_size": self.jzip_size,
            "zstd_size": self.zstd_size,
            "revision": self.revision,
            "timings_us": dict(self.timings_us),
        }


def bench_bytes(data: bytes, spec: CodecSpecV1 | None = None, *, baseline: bool = True) -> BenchResult:
    spec = spec or CodecSpecV1()
    timer = PhaseTimer()

    tree = build_tree(data)
    timer.mark("huffmanTree")
    mapping = tree.codes()
    timer.mark("getKeys")

    sink = io.BytesIO()
    write_dict(mapping, sink, spec.revision)
    timer.mark("writeDict")
    write_body(data, mapping, sink, spec.revision, spec.chunk_size)
    timer.mark("compress")

    source = io.BytesIO(sink.getvalue())
    mapping2 = read_dict(source, spec.revision)
    timer.mark("readDict")
    if mapping2 != mapping:
        raise VerifyMismatch("dictionary read back differs from the one written")

    decoder = build_decoder(mapping2)
    timer.mark("decoder")
    out = decode_body(source.read(), decoder, spec.revision, spec.chunk_size, strict=True)
    timer.mark("interpreter")
    if out != data:
        raise VerifyMismatch(f"round trip failed: {len(out)} bytes decoded, {len(data)} expected")

    res = BenchResult(
        original_size=len(data),
        jzip_size=len(sink.getvalue()),
        revision=spec.revision,
    )

    if baseline:
        res.zstd_size = CodecZstd().baseline_size(data)
        if res.zstd_size is not None:
            timer.mark("zstdBaseline")

    res.timings_us = dict(timer.phases)
    res.timings_us["cumTime"] = timer.total_us()
    return res

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from typing import TextIO


def format_bytes(n: int) -> str:
    """Human readable size, decimal units: 999 B, 1.500 KB, 2.000 MB."""
    if n < 1000:
        return f"{n} B"
    if n < 1000 * 1000:
        return f"{n / 1000:.3f} KB"
    return f"{n / (1000 * 1000):.3f} MB"


class PhaseTimer:
    """Collects elapsed microseconds per named phase (since the previous mark)."""

    def __init__(self) -> None:
        self._start = time.perf_counter()
        self._recent = self._start
        self.phases: dict[str, int] = {}

    def mark(self, name: str) -> int:
        now = time.perf_counter()
        us = int((now - self._recent) * 1_000_000)
        self._recent = now
        self.phases[name] = self.phases.get(name, 0) + us
        return us

    def total_us(self) -> int:
        return int((time.perf_counter() - self._start) * 1_000_000)


@dataclass
class FileStats:
    original_size: int
    compressed_size: int
    dict_size: int = 0
    symbols: int = 0
    revision: str = "packed"
    chunks: int = 1
    timings_us: dict[str, int] = field(default_factory=dict)

    @property
    def ratio(self) -> float:
        if self.original_size == 0:
            return 0.0
        return self.compressed_size / self.original_size

    @property
    def bits_per_symbol(self) -> float:
        if self.original_size == 0:
            return 0.0
        return (self.compressed_size * 8) / self.original_size


def print_stats(stats: FileStats, label: str, *, timings: bool = False, out: TextIO | None = None) -> None:
    fp = out or sys.stdout
    print(f"=== jzip stats ({label}) ===", file=fp)
    print(f"Original size   : {format_bytes(stats.original_size)}", file=fp)
    print(f"Compressed size : {format_bytes(stats.compressed_size)}", file=fp)
    print(f"Dictionary      : {format_bytes(stats.dict_size)} ({stats.symbols} symbols)", file=fp)
    print(f"Revision        : {stats.revision} (chunks={stats.chunks})", file=fp)
    if stats.original_size:
        print(f"Ratio           : {stats.ratio:.3f} (1.0 = no compression)", file=fp)
        print(f"Bits/symbol     : {stats.bits_per_symbol:.3f} (8.0 = uncompressed)", file=fp)
    if timings:
        for name, us in stats.timings_us.items():
            print(f"{name}: {us} microseconds", file=fp)
    print("===============================", file=fp)

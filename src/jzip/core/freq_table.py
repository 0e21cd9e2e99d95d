from __future__ import annotations

from jzip.errors import InputError


def build_freq_table(data: bytes) -> dict[int, int]:
    """
    Byte value -> occurrence count, only for bytes that appear in data.

    The counts always add up to len(data).
    """
    if not data:
        raise InputError("empty input: nothing to count")
    freq = [0] * 256
    for b in data:
        freq[b] += 1
    return {sym: f for sym, f in enumerate(freq) if f > 0}

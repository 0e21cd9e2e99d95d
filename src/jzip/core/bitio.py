from __future__ import annotations

from collections.abc import Iterable, Iterator

from jzip.errors import FormatError

BIT_CHARS = b"01"


class BitWriter:
    """
    MSB-first bit packer.

    Whole bytes are flushed as soon as they are complete; ``getvalue()`` pads
    the last partial byte with zero bits.
    """

    def __init__(self) -> None:
        self._out = bytearray()
        self._acc = 0
        self._nbits = 0  # bits pending in _acc (0..7 between calls)
        self._total = 0

    def write_bit(self, bit: int) -> None:
        self.write(1 if bit else 0, 1)

    def write(self, value: int, length: int) -> None:
        """Append the ``length`` low bits of ``value``, most significant first."""
        if length <= 0:
            return
        self._acc = (self._acc << length) | (value & ((1 << length) - 1))
        self._nbits += length
        self._total += length
        while self._nbits >= 8:
            self._nbits -= 8
            self._out.append((self._acc >> self._nbits) & 0xFF)
        self._acc &= (1 << self._nbits) - 1

    def write_code(self, code: Iterable[int]) -> None:
        for bit in code:
            self.write_bit(bit)

    @property
    def bit_count(self) -> int:
        return self._total

    @property
    def pad_bits(self) -> int:
        """Zero bits getvalue() appends to reach a byte boundary (0..7)."""
        return (8 - self._nbits) % 8

    def getvalue(self) -> bytes:
        if self._nbits == 0:
            return bytes(self._out)
        return bytes(self._out) + bytes([(self._acc << (8 - self._nbits)) & 0xFF])


def code_to_int(code: Iterable[int]) -> tuple[int, int]:
    """(value, length) form of a bit path, ready for BitWriter.write()."""
    value = 0
    length = 0
    for bit in code:
        value = (value << 1) | (1 if bit else 0)
        length += 1
    return value, length


def iter_bits(data: bytes, nbits: int | None = None) -> Iterator[int]:
    """Yield the bits of ``data`` MSB-first, stopping after ``nbits`` bits when given."""
    total = len(data) * 8 if nbits is None else nbits
    if total < 0 or total > len(data) * 8:
        raise FormatError(f"bit count {total} does not fit in {len(data)} bytes")
    full, rest = divmod(total, 8)
    for i in range(full):
        byte = data[i]
        for shift in range(7, -1, -1):
            yield (byte >> shift) & 1
    if rest:
        byte = data[full]
        for shift in range(7, 7 - rest, -1):
            yield (byte >> shift) & 1


def pack_bits(code: Iterable[int]) -> bytes:
    w = BitWriter()
    w.write_code(code)
    return w.getvalue()


# -------------------
# ASCII bit form ('0'/'1' bytes), the text revision
# -------------------
def bits_to_text(code: Iterable[int]) -> bytes:
    return bytes(BIT_CHARS[1] if bit else BIT_CHARS[0] for bit in code)


def iter_text_bits(data: bytes) -> Iterator[int]:
    for pos, ch in enumerate(data):
        if ch == 0x30:
            yield 0
        elif ch == 0x31:
            yield 1
        else:
            raise FormatError(f"invalid bit token 0x{ch:02x} at offset {pos}")

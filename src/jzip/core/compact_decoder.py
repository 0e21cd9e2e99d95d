from __future__ import annotations

from array import array
from collections.abc import Iterable, Mapping

from jzip.core.huffman_tree import Code, invert_codes, is_prefix_free
from jzip.errors import DecoderIndexError, FormatError, InvalidCode, TruncatedStream

# Codes up to this length live in the dense array, longer ones in the overflow map.
# 13 -> 2**14 - 1 slots, a few KB.
MAX_ARRAY_DEPTH = 13

# used when every byte value is a symbol (no free byte left for the sentinel)
WIDE_SENTINEL = 0x100


def child_index(index: int, bit: int) -> int:
    """Array index of the child of ``index`` following ``bit``."""
    return index * 2 + 2 if bit else index * 2 + 1


def path_index(code: Iterable[int]) -> int:
    index = 0
    for bit in code:
        index = child_index(index, bit)
    return index


def pick_sentinel(symbols: Iterable[int]) -> int:
    """Lowest byte value that is not a symbol, WIDE_SENTINEL if all 256 are taken."""
    used = set(symbols)
    for b in range(0x100):
        if b not in used:
            return b
    return WIDE_SENTINEL


class CompactDecoder:
    """
    code -> symbol lookup laid out as a flattened complete binary tree.

    Slot 0 is the empty path; the children of slot i are 2*i+1 (bit 0) and
    2*i+2 (bit 1). A slot holds the symbol whose code ends there, or the
    sentinel when the path is an internal node of the code tree.

    Built once from a finished dictionary, never modified afterwards.
    """

    __slots__ = ("_depth", "_max_len", "_sentinel", "_slots", "_overflow")

    def __init__(self, inverse: Mapping[Code, int]) -> None:
        max_len = 0
        for code in inverse:
            if len(code) == 0:
                raise FormatError("empty code in dictionary")
            max_len = max(max_len, len(code))

        if not is_prefix_free(inverse.keys()):
            raise FormatError("dictionary is not prefix-free: a code is the prefix of another")

        self._max_len = max_len
        self._depth = min(MAX_ARRAY_DEPTH, max_len)
        self._sentinel = pick_sentinel(inverse.values())
        typecode = "H" if self._sentinel == WIDE_SENTINEL else "B"
        # 2**(depth+1) - 2 path slots + the reserved root slot
        size = (1 << (self._depth + 1)) - 1
        self._slots = array(typecode, [self._sentinel]) * size
        self._overflow: dict[Code, int] = {}

        for code, sym in sorted(inverse.items()):
            code = tuple(code)
            if len(code) > self._depth:
                self._overflow[code] = sym
                continue
            index = path_index(code)
            if index >= size:
                raise DecoderIndexError(f"path index {index} outside decoder array ({size})")
            self._slots[index] = sym

    @classmethod
    def from_codes(cls, mapping: Mapping[int, Code]) -> "CompactDecoder":
        return cls(invert_codes(dict(mapping)))

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def max_len(self) -> int:
        return self._max_len

    @property
    def sentinel(self) -> int:
        return self._sentinel

    @property
    def overflow(self) -> Mapping[Code, int]:
        return dict(self._overflow)

    def __len__(self) -> int:
        return len(self._slots)

    def in_array(self, code: Code) -> bool:
        return len(code) <= self._depth

    def resolve(self, code: Code) -> int | None:
        """Symbol for a complete code, None while the path is still an internal node."""
        code = tuple(code)
        if not code:
            return None
        if len(code) > self._depth:
            return self._overflow.get(code)
        return self._lookup(path_index(code))

    def __getitem__(self, code: Code) -> int | None:
        return self.resolve(code)

    def _lookup(self, index: int) -> int | None:
        if index >= len(self._slots):
            raise DecoderIndexError(f"path index {index} outside decoder array ({len(self._slots)})")
        sym = self._slots[index]
        if sym == self._sentinel:
            return None
        return sym

    def decode_bits(self, bits: Iterable[int], *, strict: bool = False) -> bytes:
        """
        Decode a bit source one bit at a time.

        The array index is advanced along with the candidate path, so each bit
        costs O(1) while inside the array. Policy for a candidate left over
        when bits run out: dropped (lenient) or TruncatedStream (strict).
        A candidate longer than every code is always InvalidCode.
        """
        out = bytearray()
        depth = self._depth
        max_len = self._max_len
        path: list[int] = []
        index = 0

        for bit in bits:
            path.append(bit)
            n = len(path)
            if n <= depth:
                index = child_index(index, bit)
                sym = self._lookup(index)
            elif n > max_len:
                raise InvalidCode(
                    f"no code matches bit path of length {n} (longest code is {max_len})"
                )
            else:
                sym = self._overflow.get(tuple(path))
            if sym is not None:
                out.append(sym)
                path.clear()
                index = 0

        if path and strict:
            raise TruncatedStream(f"bit source ended inside a code ({len(path)} dangling bits)")
        return bytes(out)

    decode = decode_bits


def build_decoder(mapping: Mapping[int, Code]) -> CompactDecoder:
    """CompactDecoder from a symbol -> code mapping."""
    return CompactDecoder.from_codes(mapping)

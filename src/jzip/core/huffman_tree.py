from __future__ import annotations

import heapq
import itertools
from collections.abc import Iterable
from dataclasses import dataclass, field

from jzip.core.freq_table import build_freq_table
from jzip.errors import FormatError, InputError

# bit path root -> leaf, 0 = left, 1 = right
Code = tuple[int, ...]

NO_CHILD = -1

# a lone leaf has no parent edge to take a bit from
SINGLE_SYMBOL_CODE: Code = (0,)


# -------------------
# Arena tree
# -------------------
@dataclass
class HuffmanTree:
    """
    Huffman tree stored as an arena: node i is described by freq[i],
    symbol[i] and left[i]/right[i] (child ids, NO_CHILD on leaves).

    Leaves carry a symbol 0-255, branches carry None and always own exactly two
    children. Dropping the tree drops every node at once.

    Tie-break between equal frequencies is NOT part of the format: here ties
    pop in insertion order (leaves by ascending symbol, then branches by
    creation), but any order yields a valid prefix code.
    """

    freq: list[int] = field(default_factory=list)
    symbol: list[int | None] = field(default_factory=list)
    left: list[int] = field(default_factory=list)
    right: list[int] = field(default_factory=list)
    root: int = NO_CHILD

    @classmethod
    def from_freq_table(cls, table: dict[int, int]) -> "HuffmanTree":
        if not table:
            raise InputError("empty frequency table: no symbols, no tree")

        tree = cls()
        heap: list[tuple[int, int, int]] = []
        counter = itertools.count()

        for sym, f in sorted(table.items()):
            if f <= 0:
                continue
            node = tree._add_leaf(sym, f)
            heapq.heappush(heap, (f, next(counter), node))

        if not heap:
            raise InputError("frequency table has no positive counts")

        while len(heap) > 1:
            f1, _, n1 = heapq.heappop(heap)
            f2, _, n2 = heapq.heappop(heap)
            parent = tree._add_branch(n1, n2)
            heapq.heappush(heap, (f1 + f2, next(counter), parent))

        tree.root = heap[0][2]
        return tree

    @classmethod
    def from_bytes(cls, data: bytes) -> "HuffmanTree":
        return cls.from_freq_table(build_freq_table(data))

    def _add_leaf(self, sym: int, f: int) -> int:
        if not 0 <= sym <= 0xFF:
            raise InputError(f"symbol out of byte range: {sym}")
        self.freq.append(int(f))
        self.symbol.append(sym)
        self.left.append(NO_CHILD)
        self.right.append(NO_CHILD)
        return len(self.freq) - 1

    def _add_branch(self, left: int, right: int) -> int:
        self.freq.append(self.freq[left] + self.freq[right])
        self.symbol.append(None)
        self.left.append(left)
        self.right.append(right)
        return len(self.freq) - 1

    def __len__(self) -> int:
        return len(self.freq)

    def is_leaf(self, node: int) -> bool:
        return self.left[node] == NO_CHILD

    @property
    def root_freq(self) -> int:
        return self.freq[self.root]

    def codes(self) -> dict[int, Code]:
        """
        symbol -> code, walking the tree with an explicit stack.

        Every stack entry carries its own path, so nothing is shared between
        siblings and depth never touches the interpreter recursion limit.
        """
        if self.root == NO_CHILD:
            return {}
        if self.is_leaf(self.root):
            return {self.symbol[self.root]: SINGLE_SYMBOL_CODE}  # type: ignore[dict-item]

        out: dict[int, Code] = {}
        stack: list[tuple[int, Code]] = [(self.root, ())]
        while stack:
            node, path = stack.pop()
            if self.is_leaf(node):
                out[self.symbol[node]] = path  # type: ignore[index]
                continue
            # right first so that the left subtree is visited first
            stack.append((self.right[node], path + (1,)))
            stack.append((self.left[node], path + (0,)))
        return dict(sorted(out.items()))

    def code_lengths(self) -> dict[int, int]:
        return {sym: len(code) for sym, code in self.codes().items()}


def build_tree(data: bytes) -> HuffmanTree:
    """Build the Huffman tree of a non-empty byte string."""
    return HuffmanTree.from_bytes(data)


def build_codes(data: bytes) -> dict[int, Code]:
    return build_tree(data).codes()


def invert_codes(mapping: dict[int, Code]) -> dict[Code, int]:
    """symbol -> code  ==>  code -> symbol (codes must be unique)."""
    inverse: dict[Code, int] = {}
    for sym, code in mapping.items():
        code = tuple(code)
        if code in inverse:
            raise FormatError(
                f"code {''.join(map(str, code))} assigned to both {inverse[code]} and {sym}"
            )
        inverse[code] = sym
    return inverse


def is_prefix_free(codes: Iterable[Code]) -> bool:
    """True when no code is a prefix of another one."""
    ordered = sorted(tuple(c) for c in codes)
    for a, b in zip(ordered, ordered[1:]):
        if b[: len(a)] == a:
            return False
    return True

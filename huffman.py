"""
Дерево Хаффмана: таблица частот, построение дерева и таблица кодов.
Частые байты получают короткие коды, маркер конца потока встречается ровно один раз.
"""

import heapq
import itertools
from collections import Counter
from dataclasses import dataclass
from typing import BinaryIO, Dict, List, Optional


CHUNK_SIZE = 64 * 1024


class SymbolKind:
    LITERAL = 0
    END_OF_STREAM = 1


@dataclass(frozen=True, order=True)
class Symbol:
    kind: int
    value: int = 0

    @property
    def is_eof(self) -> bool:
        return self.kind == SymbolKind.END_OF_STREAM

    def __repr__(self):
        if self.is_eof:
            return "EOF"
        return f"LITERAL({self.value:02x})"


LITERALS = tuple(Symbol(SymbolKind.LITERAL, byte) for byte in range(256))
END_OF_STREAM = Symbol(SymbolKind.END_OF_STREAM)

FrequencyTable = Dict[Symbol, int]


class SymbolNotFoundError(ValueError):
    pass


def literal(byte: int) -> Symbol:
    if not 0 <= byte <= 255:
        raise ValueError(f"Not a byte value: {byte}")
    return LITERALS[byte]


def compute_frequencies(stream: BinaryIO) -> FrequencyTable:
    byte_counts = Counter()
    for chunk in iter(lambda: stream.read(CHUNK_SIZE), b''):
        byte_counts.update(chunk)

    frequencies = Counter({LITERALS[byte]: count
                           for byte, count in byte_counts.items()})
    frequencies[END_OF_STREAM] = 1
    return frequencies


class HuffmanNode:
    def __init__(self, symbol: Optional[Symbol] = None, weight: int = 0,
                 zero: Optional['HuffmanNode'] = None,
                 one: Optional['HuffmanNode'] = None):
        self.symbol = symbol
        self.weight = weight
        self.zero = zero
        self.one = one

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None

    def __repr__(self):
        if self.is_leaf:
            return f"Leaf({self.symbol!r}, {self.weight})"
        return f"Internal({self.weight})"


class HuffmanTree:
    def __init__(self):
        self.root: Optional[HuffmanNode] = None
        self.codes: Dict[Symbol, str] = {}

    def build(self, frequencies: FrequencyTable) -> 'HuffmanTree':
        if not frequencies:
            raise ValueError("Cannot build a tree from an empty frequency table")

        # равные веса: раньше вставленный узел извлекается первым
        order = itertools.count()
        heap = [(frequencies[symbol], next(order), HuffmanNode(symbol, frequencies[symbol]))
                for symbol in sorted(frequencies)]
        heapq.heapify(heap)

        while len(heap) > 1:
            _, _, zero = heapq.heappop(heap)
            _, _, one = heapq.heappop(heap)

            parent = HuffmanNode(weight=zero.weight + one.weight, zero=zero, one=one)
            heapq.heappush(heap, (parent.weight, next(order), parent))

        self.root = heap[0][2]
        self._generate_codes()
        return self

    def _generate_codes(self):
        self.codes.clear()

        if self.root is None:
            return

        stack = [(self.root, '')]
        while stack:
            node, code = stack.pop()

            if node.is_leaf:
                self.codes[node.symbol] = code
                continue

            # one кладём первым, чтобы zero обходился раньше
            stack.append((node.one, code + '1'))
            stack.append((node.zero, code + '0'))

    def code_for(self, symbol: Symbol) -> str:
        try:
            return self.codes[symbol]
        except KeyError:
            raise SymbolNotFoundError(f"No leaf for {symbol!r} in encoding tree") from None

    def depth(self) -> int:
        return max((len(code) for code in self.codes.values()), default=0)

    def release(self) -> int:
        if self.root is None:
            return 0

        visited: List[HuffmanNode] = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            visited.append(node)
            if not node.is_leaf:
                stack.append(node.zero)
                stack.append(node.one)

        # обратный порядок обхода: потомки освобождаются раньше родителя
        for node in reversed(visited):
            node.zero = None
            node.one = None

        self.root = None
        self.codes.clear()
        return len(visited)

    def __enter__(self) -> 'HuffmanTree':
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.release()
        return False


def build_encoding_tree(frequencies: FrequencyTable) -> HuffmanTree:
    return HuffmanTree().build(frequencies)

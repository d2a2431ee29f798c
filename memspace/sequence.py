from __future__ import annotations
from typing import Iterable, Iterator, List, Optional
from memspace.block import Block

class BlockSequence:
    """Ordered collection of blocks backed by a list.

    Iteration walks by position and re-reads the length on each step, so the
    caller may change base/length of a yielded block mid-walk. Inserting or
    removing while iterating is not supported: restart the walk afterwards.
    """
    def __init__(self, blocks: Iterable[Block]=()):
        self._items: List[Block] = list(blocks)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[Block]:
        i = 0
        while i < len(self._items):
            yield self._items[i]
            i += 1

    def __str__(self) -> str:
        return ' '.join(str(b) for b in self._items)

    def __repr__(self) -> str:
        return f"BlockSequence({self._items!r})"

    def append(self, block: Block):
        self._items.append(block)

    def insert(self, index: int, block: Block):
        if index < 0 or index > len(self._items):
            raise IndexError(f"index {index} out of range [0, {len(self._items)}]")
        self._items.insert(index, block)

    def get(self, index: int) -> Block:
        if index < 0 or index >= len(self._items):
            raise IndexError(f"index {index} out of range [0, {len(self._items)})")
        return self._items[index]

    def first(self) -> Optional[Block]:
        return self._items[0] if self._items else None

    def last(self) -> Optional[Block]:
        return self._items[-1] if self._items else None

    def index_of(self, block: Block) -> int:
        # identity wins over value so a specific stored block can be targeted
        for i, b in enumerate(self._items):
            if b is block:
                return i
        for i, b in enumerate(self._items):
            if b == block:
                return i
        return -1

    def remove(self, block: Block):
        i = self.index_of(block)
        if i < 0:
            raise ValueError(f"block {block} not in sequence")
        del self._items[i]

    def pop(self, index: int) -> Block:
        self.get(index)
        return self._items.pop(index)

    def replace(self, blocks: Iterable[Block]):
        self._items = list(blocks)

    def total_length(self) -> int:
        return sum(b.length for b in self._items)

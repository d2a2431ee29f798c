from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

@dataclass
class Block:
    """Half-open address range [base, base+length).

    Mutable on purpose: the free registry shrinks and grows blocks in place.
    """
    base: int
    length: int

    @property
    def end(self) -> int:
        return self.base + self.length

    def adjacent_to(self, other: Block) -> bool:
        return self.end == other.base

    def overlaps(self, other: Block) -> bool:
        return self.base < other.end and other.base < self.end

    def as_tuple(self) -> Tuple[int, int]:
        return (self.base, self.length)

    def __str__(self) -> str:
        return f"({self.base} , {self.length})"

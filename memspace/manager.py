from __future__ import annotations
import logging
from dataclasses import replace
from typing import List, Optional, Tuple
from memspace.block import Block
from memspace.errors import InvalidRequest, NothingAllocated, OutOfMemory, UnknownAddress
from memspace.sequence import BlockSequence

logger = logging.getLogger(__name__)

class MemoryManager:
    """First-fit bookkeeping over the address range [0, max_size).

    Two registries partition the range: free blocks and allocated blocks.
    Between public calls their union is exactly [0, max_size) with no
    overlaps. Failing calls raise and leave both registries untouched.
    Not thread-safe; callers serialize access per instance.
    """
    def __init__(self, max_size: int):
        if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size <= 0:
            raise InvalidRequest(f"max_size must be a positive integer, got {max_size!r}")
        self.max_size = max_size
        self._free = BlockSequence([Block(0, max_size)])
        self._allocated = BlockSequence()

    def allocate(self, length: int) -> int:
        """Hand out the front of the first free block with room for `length`.

        Returns the base address of the new allocation.
        """
        if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
            raise InvalidRequest(f"length must be a positive integer, got {length!r}")
        for blk in self._free:
            if blk.length < length:
                continue
            addr = blk.base
            self._allocated.append(Block(addr, length))
            if blk.length == length:
                self._free.remove(blk)
            else:
                blk.base += length
                blk.length -= length
            logger.debug("allocate(%d) -> %d", length, addr)
            return addr
        raise OutOfMemory(length, self.largest_free_block())

    def release(self, address: int):
        if not self._allocated:
            raise NothingAllocated(address)
        for blk in self._allocated:
            if blk.base == address:
                self._allocated.remove(blk)
                self._free.append(blk)
                logger.debug("release(%d) length=%d", address, blk.length)
                return
        raise UnknownAddress(address)

    def defragment(self) -> int:
        """Sort the free registry by base address and merge adjacent runs.

        One sort plus one linear pass; returns the number of merges.
        """
        if len(self._free) < 2:
            return 0
        ordered = sorted(self._free, key=lambda b: b.base)
        merged: List[Block] = [ordered[0]]
        for blk in ordered[1:]:
            cand = merged[-1]
            if cand.adjacent_to(blk):
                cand.length += blk.length
            else:
                merged.append(blk)
        self._free.replace(merged)
        n = len(ordered) - len(merged)
        logger.debug("defragment: %d free blocks -> %d", len(ordered), len(merged))
        return n

    def describe(self) -> str:
        return f"{self._free}\n{self._allocated}"

    def __str__(self) -> str:
        return self.describe()

    @property
    def free_blocks(self) -> Tuple[Block, ...]:
        return tuple(replace(b) for b in self._free)

    @property
    def allocated_blocks(self) -> Tuple[Block, ...]:
        return tuple(replace(b) for b in self._allocated)

    def free_extents(self) -> List[Tuple[int,int]]:
        return [b.as_tuple() for b in self._free]

    def used(self) -> int:
        return self._allocated.total_length()

    def free_bytes(self) -> int:
        return self._free.total_length()

    def largest_free_block(self) -> int:
        return max((b.length for b in self._free), default=0)

    def block_at(self, address: int) -> Optional[Block]:
        for b in self._allocated:
            if b.base == address:
                return replace(b)
        return None

    def is_allocated(self, address: int) -> bool:
        return self.block_at(address) is not None

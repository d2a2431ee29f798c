from __future__ import annotations
from typing import Optional

class AllocatorError(Exception):
    """Base class for every failure reported by MemoryManager."""

class InvalidRequest(AllocatorError, ValueError):
    pass

class OutOfMemory(AllocatorError):
    def __init__(self, requested: int, largest_free: int):
        super().__init__(f"no free block of length {requested} (largest free block: {largest_free})")
        self.requested = requested
        self.largest_free = largest_free

class NothingAllocated(AllocatorError):
    def __init__(self, address: Optional[int]=None):
        msg = "release called with nothing allocated"
        if address is not None:
            msg += f" (address {address})"
        super().__init__(msg)
        self.address = address

class UnknownAddress(AllocatorError):
    def __init__(self, address: int):
        super().__init__(f"no allocated block at address {address}")
        self.address = address

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Tuple
import math

Extent = Tuple[int, int]

@dataclass
class FragMetrics:
    """Fragmentation of a free registry.

    `registry_blocks`/`first_fit_lfe` describe the registry as first-fit
    scans it right now. `hole_count`/`lfe` describe the same free space
    with adjacent entries coalesced, i.e. what a defragment would leave.
    """
    total_free: int
    registry_blocks: int
    first_fit_lfe: int
    hole_count: int
    lfe: int
    external_frag: float
    entropy: float

    @property
    def mergeable(self) -> int:
        return self.registry_blocks - self.hole_count

def coalesce(free_extents: Iterable[Extent]) -> List[Extent]:
    """Sort (base, length) extents and join those that touch."""
    holes: List[List[int]] = []
    for base, length in sorted(e for e in free_extents if e[1] > 0):
        if holes and holes[-1][0] + holes[-1][1] == base:
            holes[-1][1] += length
        else:
            holes.append([base, length])
    return [(b, n) for b, n in holes]

def _entropy(sizes: List[int]) -> float:
    total = sum(sizes)
    if total <= 0:
        return 0.0
    return max(0.0, -sum((s/total)*math.log2(s/total) for s in sizes))

def compute_metrics(free_extents: Iterable[Extent]) -> FragMetrics:
    raw = [e for e in free_extents if e[1] > 0]
    holes = [n for _, n in coalesce(raw)]
    total_free = sum(holes)
    lfe = max(holes, default=0)
    external = 0.0 if total_free == 0 else 1.0 - lfe/total_free
    return FragMetrics(
        total_free=total_free,
        registry_blocks=len(raw),
        first_fit_lfe=max((n for _, n in raw), default=0),
        hole_count=len(holes),
        lfe=lfe,
        external_frag=external,
        entropy=_entropy(holes),
    )

from __future__ import annotations
from memspace.manager import MemoryManager

def render_map(mgr: MemoryManager, width: int=80) -> str:
    cap=mgr.max_size
    buf=['.']*width
    for b in mgr.allocated_blocks:
        s=int((b.base/cap)*width)
        e=int((b.end/cap)*width)
        for i in range(max(0,s), min(width, max(s+1,e))):
            buf[i]='#'
    return ''.join(buf)

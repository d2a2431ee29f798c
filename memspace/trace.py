"""
Trace replay for MemoryManager.

A trace is JSONL, one event per line:
    {"event": "alloc", "id": "a", "size": 40}
    {"event": "free", "id": "a"}
    {"event": "defrag"}

Trace ids are mapped to the base addresses the manager hands out. The
manager never defragments by itself; replay does it only when the trace
asks, every `defrag_every` events, or as a one-shot retry after OutOfMemory.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, Optional

from memspace.errors import OutOfMemory
from memspace.manager import MemoryManager

logger = logging.getLogger(__name__)

EVENT_KINDS = ("alloc", "free", "defrag")


class TraceError(Exception):
    """Malformed trace line or event."""


def load_trace(path: str) -> Iterator[dict]:
    """Yield JSON events from a JSONL file."""
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                ev = json.loads(line)
            except json.JSONDecodeError as e:
                raise TraceError(f"{path}:{lineno}: {e.msg}") from e
            if not isinstance(ev, dict):
                raise TraceError(f"{path}:{lineno}: event must be a JSON object, got {type(ev).__name__}")
            yield ev


@dataclass
class ReplayOptions:
    capacity: int = 800
    defrag_every: int = 0  # 0 disables periodic defragmentation
    retry_after_defrag: bool = False


@dataclass
class ReplayResult:
    manager: MemoryManager
    addresses: Dict[str, int] = field(default_factory=dict)
    stats: Dict[str, int] = field(default_factory=lambda: {
        "events": 0, "alloc_events": 0, "free_events": 0,
        "defrags": 0, "merges": 0,
        "oom": 0, "oom_recovered": 0, "unknown_frees": 0,
    })


def _defrag(result: ReplayResult):
    result.stats["merges"] += result.manager.defragment()
    result.stats["defrags"] += 1


def _alloc(result: ReplayResult, options: ReplayOptions, obj: str, size: int):
    mgr = result.manager
    if obj in result.addresses:
        raise TraceError(f"id {obj!r} allocated twice without free")
    try:
        result.addresses[obj] = mgr.allocate(size)
        return
    except OutOfMemory as e:
        if not options.retry_after_defrag:
            result.stats["oom"] += 1
            logger.info("alloc %s failed: %s", obj, e)
            return
    _defrag(result)
    try:
        result.addresses[obj] = mgr.allocate(size)
        result.stats["oom_recovered"] += 1
    except OutOfMemory as e:
        result.stats["oom"] += 1
        logger.info("alloc %s failed after defragment: %s", obj, e)


def apply_event(result: ReplayResult, options: ReplayOptions, ev: dict):
    if not isinstance(ev, dict):
        raise TraceError(f"event must be a JSON object, got {ev!r}")
    et = ev.get("event")
    if et == "alloc":
        if "id" not in ev or "size" not in ev:
            raise TraceError(f"bad alloc event {ev!r}")
        obj = str(ev["id"]); size = ev["size"]
        # no coercion: allocate() owns the length policy
        if isinstance(size, bool) or not isinstance(size, int):
            raise TraceError(f"alloc size must be an integer, got {size!r}")
        result.stats["alloc_events"] += 1
        _alloc(result, options, obj, size)
    elif et == "free":
        if "id" not in ev:
            raise TraceError(f"bad free event {ev!r}")
        obj = str(ev["id"])
        result.stats["free_events"] += 1
        addr = result.addresses.pop(obj, None)
        if addr is None:
            result.stats["unknown_frees"] += 1
            logger.warning("free of unknown id %r ignored", obj)
            return
        result.manager.release(addr)
    elif et == "defrag":
        _defrag(result)
    else:
        raise TraceError(f"unknown event kind {et!r} (expected one of {', '.join(EVENT_KINDS)})")


def replay(events: Iterable[dict], options: ReplayOptions,
           on_event: Optional[Callable[[ReplayResult, dict], None]] = None) -> ReplayResult:
    result = ReplayResult(MemoryManager(options.capacity))
    for ev in events:
        result.stats["events"] += 1
        apply_event(result, options, ev)
        if options.defrag_every > 0 and result.stats["events"] % options.defrag_every == 0:
            _defrag(result)
        if on_event is not None:
            on_event(result, ev)
    return result

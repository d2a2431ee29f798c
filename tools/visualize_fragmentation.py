"""
Memory Space Simulator: Visualizer

Replays a trace and writes a Matplotlib heatmap of address-space occupancy
over time. Explicit and periodic defragment points are marked as horizontal
lines.

How to run (recommended, from repo root):
    python -m tools.visualize_fragmentation --trace traces/fragmentation_stressor.jsonl --out out_fragmentation.png

Notes:
- Defragmentation only merges free-list entries; it never moves allocations,
  so occupancy changes only on alloc/free. The lines show where merges
  became available to later allocations.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script:
# (python -m tools.visualize_fragmentation already works without this,
#  but this makes `python tools/visualize_fragmentation.py ...` work too.)
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from memspace.fragmentation import compute_metrics
from memspace.manager import MemoryManager
from memspace.trace import ReplayOptions, load_trace, replay


def render_state(mgr: MemoryManager, width: int) -> np.ndarray:
    """
    Return a 1D occupancy array over the managed range, binned to 'width'.
    A bin is 1.0 when any allocated block touches it.
    """
    cap = mgr.max_size
    bins = np.zeros(width, dtype=np.float32)
    scale = cap / width

    for blk in sorted(mgr.allocated_blocks, key=lambda b: b.base):
        a = int(blk.base / scale)
        b = int((blk.end - 1) / scale)
        a = max(0, min(width - 1, a))
        b = max(0, min(width - 1, b))
        bins[a : b + 1] = 1.0

    return bins


def collect_frames(trace_path: str, options: ReplayOptions, width: int, every: int = 1):
    """Replay the trace, returning (frames, defrag_marks, result)."""
    frames: list[np.ndarray] = []
    marks: list[int] = []
    last_defrags = [0]

    def on_event(result, ev):
        n = result.stats["events"]
        if result.stats["defrags"] != last_defrags[0]:
            last_defrags[0] = result.stats["defrags"]
            marks.append(len(frames))
        if every <= 1 or n % every == 0:
            frames.append(render_state(result.manager, width))

    result = replay(load_trace(trace_path), options, on_event=on_event)
    return frames, marks, result


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--trace", required=True, help="Path to JSONL trace")
    ap.add_argument("--out", default="out_fragmentation.png", help="Output image file")
    ap.add_argument("--capacity", type=int, default=800, help="Managed address-space size")
    ap.add_argument("--width", type=int, default=140, help="Heatmap width (bins)")
    ap.add_argument("--every", type=int, default=1, help="Record every N events")
    ap.add_argument("--defrag-every", type=int, default=0)
    ap.add_argument("--retry-defrag", action="store_true")
    args = ap.parse_args(argv)

    trace_path = Path(args.trace)
    if not trace_path.exists():
        raise SystemExit(f"Trace not found: {trace_path}")

    opts = ReplayOptions(
        capacity=args.capacity,
        defrag_every=args.defrag_every,
        retry_after_defrag=args.retry_defrag,
    )
    frames, marks, result = collect_frames(str(trace_path), opts, args.width, args.every)

    if not frames:
        raise SystemExit("No frames captured. Check trace path and --every.")

    H = np.stack(frames, axis=0)  # (time, width)

    fig = plt.figure(figsize=(10.5, 4.6))
    ax = fig.add_subplot(111)
    ax.imshow(H, aspect="auto", interpolation="nearest")
    ax.set_title("Address-Space Occupancy Heatmap (Trace-driven)")
    ax.set_xlabel("address (binned)")
    ax.set_ylabel("time (frames)")

    for t in marks:
        ax.axhline(t, linewidth=1)

    m = compute_metrics(result.manager.free_extents())
    caption = (
        f"Final fragmentation: LFE={m.lfe}, holes={m.hole_count}, "
        f"external_frag={m.external_frag:.3f}, entropy={m.entropy:.3f}, "
        f"oom={result.stats['oom']}"
    )
    fig.text(0.01, 0.01, caption, fontsize=9)

    fig.tight_layout()
    out_path = Path(args.out)
    fig.savefig(str(out_path), dpi=220)
    plt.close(fig)
    print(f"Wrote: {out_path.resolve()}")


if __name__ == "__main__":
    main()

from __future__ import annotations
import argparse, logging, sys
from typing import List, Optional
from memspace.errors import AllocatorError
from memspace.fragmentation import compute_metrics
from memspace.trace import ReplayOptions, TraceError, load_trace, replay
from viz.ascii_map import render_map

def build_parser() -> argparse.ArgumentParser:
    ap=argparse.ArgumentParser(description="Replay an alloc/free trace against a first-fit memory manager.")
    ap.add_argument('--trace', required=True)
    ap.add_argument('--capacity', type=int, default=800)
    ap.add_argument('--defrag-every', type=int, default=0,
                    help="Defragment after every N events (0 = only when the trace asks).")
    ap.add_argument('--retry-defrag', action='store_true',
                    help="On OutOfMemory, defragment once and retry the allocation.")
    ap.add_argument('--show-map', action='store_true')
    ap.add_argument('--describe', action='store_true',
                    help="Print the free and allocated registries at the end.")
    ap.add_argument('--log-level', default='WARNING',
                    choices=['DEBUG','INFO','WARNING','ERROR'])
    return ap

def main(argv: Optional[List[str]]=None) -> int:
    args=build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    opts=ReplayOptions(capacity=args.capacity, defrag_every=args.defrag_every,
                       retry_after_defrag=args.retry_defrag)
    try:
        res=replay(load_trace(args.trace), opts)
    except (AllocatorError, TraceError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except FileNotFoundError:
        print(f"error: trace not found: {args.trace}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"error: cannot read trace {args.trace}: {e}", file=sys.stderr)
        return 1

    mgr=res.manager
    stats=res.stats
    m=compute_metrics(mgr.free_extents())
    print("="*72)
    print("Memory Space Simulator: Summary")
    print("="*72)
    print(f"Capacity: {mgr.max_size}  Used: {mgr.used()}  Free: {mgr.free_bytes()}  Live allocations: {len(res.addresses)}")
    print(f"Events: {stats['events']}  alloc_events: {stats['alloc_events']}  free_events: {stats['free_events']}")
    print(f"Defragments: {stats['defrags']}  Merges: {stats['merges']}  Retry-defrag: {args.retry_defrag}  Defrag-every: {args.defrag_every}")
    print(f"OOM failures: {stats['oom']}  OOM recovered: {stats['oom_recovered']}  Unknown frees: {stats['unknown_frees']}")
    print("-"*72)
    print(f"Fragmentation: LFE={m.lfe} holes={m.hole_count} external_frag={m.external_frag:.3f} entropy={m.entropy:.3f}")
    print(f"Free registry: blocks={m.registry_blocks} first_fit_LFE={m.first_fit_lfe} mergeable={m.mergeable}")
    if args.show_map:
        print("-"*72)
        print("Memory map (ASCII):")
        print(render_map(mgr))
    if args.describe:
        print("-"*72)
        print(mgr.describe())
    print("="*72)
    return 0

if __name__=='__main__':
    sys.exit(main())

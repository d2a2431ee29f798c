from __future__ import annotations
import subprocess
import sys
import re
from pathlib import Path

PY = sys.executable  # respects venv if activated, otherwise uses current python

# (label, extra run_sim flags)
SCENARIOS = [
    ("explicit", []),
    ("retry", ["--retry-defrag"]),
    ("every10", ["--defrag-every", "10"]),
    ("every10+retry", ["--defrag-every", "10", "--retry-defrag"]),
]

TRACE = str(Path("traces") / "fragmentation_stressor.jsonl")

PATTERNS = {
    "oom": re.compile(r"OOM failures:\s+(\d+)"),
    "oom_recovered": re.compile(r"OOM recovered:\s+(\d+)"),
    "defrags": re.compile(r"Defragments:\s+(\d+)"),
    "merges": re.compile(r"Merges:\s+(\d+)"),
    "used": re.compile(r"Used:\s+(\d+)"),
    "lfe": re.compile(r"Fragmentation: LFE=(\d+)"),
    "holes": re.compile(r"holes=(\d+)"),
    "external_frag": re.compile(r"external_frag=([0-9\.]+)"),
}

def run(flags, trace: str=TRACE) -> str:
    cmd = [PY, "run_sim.py", "--trace", trace, *flags]
    out = subprocess.check_output(cmd, stderr=subprocess.STDOUT, text=True)
    return out

def parse(out: str):
    def get(key, default=None):
        m = PATTERNS[key].search(out)
        return m.group(1) if m else default
    return {
        "oom": int(get("oom", 0)),
        "oom_recovered": int(get("oom_recovered", 0)),
        "defrags": int(get("defrags", 0)),
        "merges": int(get("merges", 0)),
        "used": int(get("used", 0)),
        "lfe": int(get("lfe", 0)),
        "holes": int(get("holes", 0)),
        "external_frag": float(get("external_frag", 0.0)),
    }

def main():
    trace = sys.argv[1] if len(sys.argv) > 1 else TRACE
    rows=[]
    for label, flags in SCENARIOS:
        rows.append((label, parse(run(flags, trace))))

    header = ["scenario","oom","recovered","defrags","merges","used","LFE","holes","ext_frag"]
    print("="*96)
    print(f"Memory Space Simulator: Defragment Strategy Table ({trace})")
    print("="*96)
    print("{:<15} {:>6} {:>10} {:>8} {:>7} {:>7} {:>6} {:>6} {:>8}".format(*header))
    for label, m in rows:
        print("{:<15} {:>6} {:>10} {:>8} {:>7} {:>7} {:>6} {:>6} {:>8.3f}".format(
            label, m["oom"], m["oom_recovered"], m["defrags"], m["merges"], m["used"],
            m["lfe"], m["holes"], m["external_frag"]
        ))
    print("="*96)
    print("Tip: add --show-map or --describe to a single run for the block layout.")
    print(f"  python run_sim.py --trace {trace} --retry-defrag --show-map")

if __name__ == "__main__":
    main()

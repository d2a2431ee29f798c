import json

import pytest

import run_sim
from memspace.manager import MemoryManager
from viz.ascii_map import render_map

EVENTS = [
    {"event": "alloc", "id": "a", "size": 10},
    {"event": "alloc", "id": "b", "size": 10},
    {"event": "alloc", "id": "c", "size": 10},
    {"event": "free", "id": "a"},
    {"event": "free", "id": "c"},
    {"event": "free", "id": "b"},
    {"event": "alloc", "id": "d", "size": 30},
]


@pytest.fixture
def trace(tmp_path):
    p = tmp_path / "trace.jsonl"
    p.write_text("\n".join(json.dumps(e) for e in EVENTS), encoding="utf-8")
    return str(p)


class TestRenderMap:
    def test_half_allocated(self):
        mgr = MemoryManager(80)
        mgr.allocate(40)
        assert render_map(mgr) == "#" * 40 + "." * 40

    def test_small_block_gets_a_cell(self):
        mgr = MemoryManager(800)
        mgr.allocate(400)
        mgr.allocate(1)
        out = render_map(mgr, width=8)
        assert out == "#####..."


class TestRunSim:
    def test_summary_without_retry(self, trace, capsys):
        assert run_sim.main(["--trace", trace, "--capacity", "30"]) == 0
        out = capsys.readouterr().out
        assert "OOM failures: 1" in out
        assert "Fragmentation: LFE=30 holes=1" in out
        assert "Free registry: blocks=3 first_fit_LFE=10 mergeable=2" in out

    def test_retry_map_and_describe(self, trace, capsys):
        rc = run_sim.main(["--trace", trace, "--capacity", "30",
                           "--retry-defrag", "--show-map", "--describe"])
        assert rc == 0
        out = capsys.readouterr().out
        assert "OOM recovered: 1" in out
        assert "Used: 30" in out
        assert "#" * 80 in out
        assert "(0 , 30)" in out

    def test_periodic_defrag_flag(self, trace, capsys):
        run_sim.main(["--trace", trace, "--capacity", "30", "--defrag-every", "3"])
        out = capsys.readouterr().out
        assert "Defragments: 2  Merges: 2" in out

    def test_missing_trace(self, tmp_path, capsys):
        rc = run_sim.main(["--trace", str(tmp_path / "nope.jsonl")])
        assert rc == 1
        assert "trace not found" in capsys.readouterr().err

    def test_bad_event_reports_error(self, tmp_path, capsys):
        p = tmp_path / "bad.jsonl"
        p.write_text('{"event": "resize"}\n', encoding="utf-8")
        assert run_sim.main(["--trace", str(p)]) == 1
        assert "unknown event kind" in capsys.readouterr().err

    def test_non_object_event_reports_error(self, tmp_path, capsys):
        p = tmp_path / "list.jsonl"
        p.write_text("[1, 2]\n", encoding="utf-8")
        assert run_sim.main(["--trace", str(p)]) == 1
        assert "must be a JSON object" in capsys.readouterr().err

    def test_directory_as_trace(self, tmp_path, capsys):
        assert run_sim.main(["--trace", str(tmp_path)]) == 1
        assert "error:" in capsys.readouterr().err

    def test_undecodable_trace(self, tmp_path, capsys):
        p = tmp_path / "latin1.jsonl"
        p.write_bytes(b'{"event": "defrag", "note": "\xff\xfe"}\n')
        assert run_sim.main(["--trace", str(p)]) == 1
        assert "cannot read trace" in capsys.readouterr().err

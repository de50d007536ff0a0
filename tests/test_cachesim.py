import pytest

from archlab.cachesim import (
    AccessResult,
    CacheSimulator,
    Summary,
    main,
    parse_trace_line,
)


def test_repeated_access_misses_then_hits():
    sim = CacheSimulator(4, 1, 4)
    assert sim.access(0x100) is AccessResult.MISS
    assert sim.access(0x100) is AccessResult.HIT
    assert sim.summary() == Summary(hits=1, misses=1, evictions=0)


def test_same_block_different_offset_hits():
    sim = CacheSimulator(0, 1, 4)
    assert sim.access(0x10) is AccessResult.MISS
    assert sim.access(0x1F) is AccessResult.HIT
    assert sim.access(0x20) is AccessResult.MISS_EVICTION


def test_lru_evicts_least_recently_used():
    sim = CacheSimulator(0, 2, 0)
    sim.access(1)
    sim.access(2)
    sim.access(1)
    assert sim.access(3) is AccessResult.MISS_EVICTION
    assert sim.access(1) is AccessResult.HIT
    assert sim.access(2) is AccessResult.MISS_EVICTION


def test_different_sets_do_not_conflict():
    sim = CacheSimulator(1, 1, 0)
    results = [sim.access(a) for a in (0, 1, 0, 1)]
    assert results == [
        AccessResult.MISS,
        AccessResult.MISS,
        AccessResult.HIT,
        AccessResult.HIT,
    ]


def test_counts_are_consistent():
    sim = CacheSimulator(2, 2, 2)
    addresses = [(i * 37) % 200 for i in range(500)]
    for a in addresses:
        sim.access(a)
    s = sim.summary()
    assert s.hits + s.misses == len(addresses)
    assert s.evictions <= s.misses


def test_parse_trace_line():
    assert parse_trace_line(" L 10,1") == ("L", 0x10, 1)
    assert parse_trace_line("I 0400d7d4,8") == ("I", 0x0400D7D4, 8)
    assert parse_trace_line("   \n") is None


def test_parse_trace_line_rejects_garbage():
    with pytest.raises(ValueError):
        parse_trace_line("L zz,1")
    with pytest.raises(ValueError):
        parse_trace_line("LOAD")


def test_run_trace_skips_instructions_and_doubles_modify():
    trace = ["I 0400d7d4,8\n", " L 10,1\n", " M 20,1\n", " S 18,1\n"]
    sim = CacheSimulator(4, 1, 4)
    summary = sim.run_trace(trace)

    manual = CacheSimulator(4, 1, 4)
    for a in (0x10, 0x20, 0x20, 0x18):
        manual.access(a)
    assert summary == manual.summary()
    assert summary.hits + summary.misses == 4


def test_summary_string_format():
    sim = CacheSimulator(0, 1, 0)
    sim.access(5)
    sim.access(5)
    assert str(sim.summary()) == "hits:1 misses:1 evictions:0"


def test_zero_lines_rejected():
    with pytest.raises(ValueError):
        CacheSimulator(1, 0, 1)


def test_main_runs_trace(tmp_path, capsys):
    trace = tmp_path / "t.trace"
    trace.write_text(" L 10,1\n M 20,1\n L 22,1\n S 18,1\n")
    code = main(["-s", "4", "-E", "1", "-b", "4", "-t", str(trace)])
    out = capsys.readouterr().out.strip()

    sim = CacheSimulator(4, 1, 4)
    expected = sim.run_trace(trace.read_text().splitlines())
    assert code == 0
    assert out == str(expected)


def test_main_bad_option_returns_error():
    assert main(["-x"]) == 1


def test_main_missing_trace_returns_error():
    assert main(["-s", "1", "-E", "1", "-b", "1"]) == 1
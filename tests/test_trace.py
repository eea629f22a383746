from __future__ import annotations

from pathlib import Path

from xer2 import trace
from xer2.paths import APP_NAME, default_runtime_dir
from xer2.source import Source


def test_trace_is_noop_until_opened(tmp_path: Path) -> None:
    assert trace.trace_path() is None
    trace.trace_event("seed", seed=1)
    assert not (tmp_path / "logs").exists()
    assert trace.close_trace() == 0


def test_format_event_sorts_fields_and_hexes_seeds() -> None:
    line = trace.format_event("custom", {"b": 2, "a": "x\ny", "seed": -1, "flag": True})
    assert line == "custom a=x\\ny b=2 flag=1 seed=0xffffffffffffffff"


def test_format_event_expands_source_cursors() -> None:
    source = Source.from_state(3, [1, 2, 3, 4])
    source.uint64()
    assert trace.format_event("step", {"source": source}) == "step feed=0 gap=3 n=4 tap=1"


def test_open_writes_header_and_counts_events(tmp_path: Path) -> None:
    path = trace.open_trace(base_dir=tmp_path, command="Generate")
    assert path.parent == tmp_path / "logs"
    assert path.name.startswith("xer2-generate-")
    assert path.name.endswith(".log")
    assert trace.trace_path() == path

    trace.trace_event("custom", word=255)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert " open command=generate pid=" in lines[0]
    assert lines[1].endswith(" custom word=0x00000000000000ff")
    assert trace.close_trace() == 2


def test_generator_seeding_and_state_changes_are_traced(tmp_path: Path) -> None:
    path = trace.open_trace(base_dir=tmp_path, command="test")
    source = Source(17, 10, 42)
    words = source.save_state()
    source.set_state(words)
    text = path.read_text(encoding="utf-8")
    assert " seed feed=10 gap=10 n=17 seed=0x000000000000002a tap=0" in text
    assert f" set_state feed=10 first_word=0x{words[0]:016x} gap=10 n=17 tap=0" in text


def test_close_stops_writing(tmp_path: Path) -> None:
    path = trace.open_trace(base_dir=tmp_path, command="test")
    trace.close_trace()
    trace.trace_event("after_close")
    assert "after_close" not in path.read_text(encoding="utf-8")
    assert trace.trace_path() is None


def test_default_runtime_dir_is_named_after_the_app() -> None:
    assert default_runtime_dir().name == APP_NAME

"""Per-process trace file for generator events.

One line per event: `<utc timestamp> <event> key=value ...`. Seeds and state
words are written as 64-bit hex so a trace can be matched against
`xer2 state show` output. Passing `source=` expands to the generator's shape
and cursors.
"""

from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
import os
from pathlib import Path
from threading import Lock

_HEX_FIELDS = frozenset({"seed", "word", "first_word"})
_MASK64 = 0xFFFFFFFFFFFFFFFF


@dataclass(slots=True)
class TraceFile:
    path: Path
    command: str
    events: int = 0


_LOCK = Lock()
_ACTIVE: TraceFile | None = None


def _field_text(key: str, value: object) -> str:
    if key in _HEX_FIELDS and isinstance(value, int) and not isinstance(value, bool):
        return f"0x{value & _MASK64:016x}"
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value).replace("\n", "\\n")


def _source_fields(source: object) -> dict[str, object]:
    return {
        "n": getattr(source, "n"),
        "gap": getattr(source, "gap"),
        "feed": getattr(source, "feed"),
        "tap": getattr(source, "tap"),
    }


def format_event(event: str, fields: dict[str, object]) -> str:
    if fields.get("source") is not None:
        fields = {**_source_fields(fields["source"]), **fields}
        del fields["source"]
    parts = [str(event).strip()]
    parts.extend(f"{key}={_field_text(key, fields[key])}" for key in sorted(fields))
    return " ".join(parts)


def trace_path() -> Path | None:
    with _LOCK:
        return _ACTIVE.path if _ACTIVE is not None else None


def open_trace(*, base_dir: Path, command: str) -> Path:
    name = str(command).strip().lower() or "unknown"
    stamp = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    path = base_dir / "logs" / f"xer2-{name}-{stamp}-pid{os.getpid()}.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    global _ACTIVE
    with _LOCK:
        _ACTIVE = TraceFile(path=path, command=name)
    trace_event("open", command=name, pid=os.getpid())
    return path


def close_trace() -> int:
    """Stop tracing; returns the number of events written."""
    global _ACTIVE
    with _LOCK:
        active, _ACTIVE = _ACTIVE, None
    return active.events if active is not None else 0


def trace_event(event: str, **fields: object) -> None:
    # Unlocked fast path; re-checked under the lock below.
    if _ACTIVE is None:
        return
    stamp = dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds")
    line = f"{stamp} {format_event(event, fields)}\n"
    with _LOCK:
        active = _ACTIVE
        if active is None:
            return
        with active.path.open("a", encoding="utf-8") as handle:
            handle.write(line)
        active.events += 1

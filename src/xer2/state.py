from __future__ import annotations

from pathlib import Path
from typing import Annotated
import zlib

from construct import Array, Const, ConstructError, Int16ul, Int32ul, Int64ul, Struct, Terminated, this
import msgspec

from .trace import trace_event
from .source import GeneratorShapeError, Source, StateValueError

STATE_MAGIC = b"XER2"
STATE_FORMAT_VERSION = 1
JSON_SUFFIX = ".json"

STATE_FILE_STRUCT = Struct(
    "magic" / Const(STATE_MAGIC),
    "version" / Int16ul,
    "reserved" / Int16ul,
    "gap" / Int32ul,
    "count" / Int32ul,
    "words" / Array(this.count, Int64ul),
    # zlib CRC32 over the packed little-endian words.
    "crc32" / Int32ul,
    Terminated,
)

Word = Annotated[int, msgspec.Meta(ge=0)]


class StateCodecError(ValueError):
    pass


class StateSnapshot(msgspec.Struct, forbid_unknown_fields=True):
    version: int = STATE_FORMAT_VERSION
    gap: int = 0
    words: list[Word] = msgspec.field(default_factory=list)


_MSGPACK_DECODER = msgspec.msgpack.Decoder(type=StateSnapshot)
_JSON_DECODER = msgspec.json.Decoder(type=StateSnapshot)


def _words_crc32(words: list[int]) -> int:
    packed = Array(len(words), Int64ul).build(words)
    return zlib.crc32(packed) & 0xFFFFFFFF


def snapshot_from_source(source: Source) -> StateSnapshot:
    return StateSnapshot(
        version=STATE_FORMAT_VERSION,
        gap=int(source.gap),
        words=source.save_state(),
    )


def source_from_snapshot(snapshot: StateSnapshot) -> Source:
    if int(snapshot.version) != STATE_FORMAT_VERSION:
        raise StateCodecError(f"unsupported state version: {snapshot.version}")
    try:
        return Source.from_state(int(snapshot.gap), snapshot.words)
    except (GeneratorShapeError, StateValueError) as exc:
        raise StateCodecError(f"invalid state: {exc}") from exc


def encode_snapshot(source: Source) -> bytes:
    return msgspec.msgpack.encode(snapshot_from_source(source))


def decode_snapshot(blob: bytes) -> Source:
    try:
        snapshot = _MSGPACK_DECODER.decode(blob)
    except msgspec.DecodeError as exc:
        raise StateCodecError(f"malformed state snapshot: {exc}") from exc
    return source_from_snapshot(snapshot)


def dump_state(source: Source) -> bytes:
    words = source.save_state()
    return STATE_FILE_STRUCT.build(
        {
            "version": STATE_FORMAT_VERSION,
            "reserved": 0,
            "gap": int(source.gap),
            "count": len(words),
            "words": words,
            "crc32": _words_crc32(words),
        }
    )


def load_state(data: bytes) -> Source:
    try:
        parsed = STATE_FILE_STRUCT.parse(data)
    except ConstructError as exc:
        raise StateCodecError(f"malformed state file: {exc}") from exc
    words = [int(word) for word in parsed.words]
    crc = _words_crc32(words)
    if crc != int(parsed.crc32):
        raise StateCodecError(f"state checksum mismatch: have=0x{crc:08x} expected=0x{int(parsed.crc32):08x}")
    snapshot = StateSnapshot(version=int(parsed.version), gap=int(parsed.gap), words=words)
    return source_from_snapshot(snapshot)


def save_state_file(path: Path, source: Source) -> None:
    if path.suffix.lower() == JSON_SUFFIX:
        blob = msgspec.json.format(msgspec.json.encode(snapshot_from_source(source)), indent=2)
    else:
        blob = dump_state(source)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(blob)
    trace_event("state_save", source=source, path=path, size=len(blob))


def load_state_file(path: Path) -> Source:
    data = path.read_bytes()
    if path.suffix.lower() == JSON_SUFFIX:
        try:
            snapshot = _JSON_DECODER.decode(data)
        except msgspec.DecodeError as exc:
            raise StateCodecError(f"{path}: malformed state snapshot: {exc}") from exc
        source = source_from_snapshot(snapshot)
    else:
        source = load_state(data)
    trace_event("state_load", source=source, path=path)
    return source

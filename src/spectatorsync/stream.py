"""Spectator stream I/O — JSONL tailing and recording.

The room consumes one JSON object per line. ``tail_jsonl`` reads whatever
complete lines have been appended since the last byte offset, so a live
file can be polled while it grows. ``StreamRecorder`` appends messages in
the same format, which makes a recorded room replayable later.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

import spectatorsync

_SCHEMA_VERSION = "1.0.0"


def tail_jsonl(path: Path, position: int) -> tuple[list, int]:
    """Read new records from a JSONL file starting at byte ``position``.

    A trailing line without a newline is left for the next call, since the
    writer may still be in the middle of it.
    """
    records = []
    try:
        size = path.stat().st_size
        if size <= position:
            return [], position

        with open(path, "rb") as f:
            f.seek(position)
            chunk = f.read()
    except FileNotFoundError:
        return [], position

    consumed = chunk.rfind(b"\n") + 1
    for raw_line in chunk[:consumed].splitlines():
        raw_line = raw_line.strip()
        if not raw_line:
            continue
        try:
            records.append(json.loads(raw_line))
        except json.JSONDecodeError:
            # Complete but invalid line; the room logs it as malformed.
            records.append(raw_line.decode("utf-8", errors="replace"))

    return records, position + consumed


def read_jsonl(path: Path) -> list:
    """Read every complete record of a JSONL file."""
    records, _ = tail_jsonl(path, 0)
    return records


class StreamRecorder:
    """Appends spectator messages to a JSONL file."""

    def __init__(self, path: Path, room_id: str) -> None:
        self._path = Path(path)
        self._room_id = room_id
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def file_path(self) -> Path:
        return self._path

    def record(self, data: dict) -> None:
        record = dict(data)
        record.setdefault("room_id", self._room_id)
        record["schema_version"] = _SCHEMA_VERSION
        record["recorded_at"] = datetime.now(timezone.utc).isoformat()
        record["engine_version"] = spectatorsync.__version__
        with open(self._path, "a") as f:
            f.write(json.dumps(record, default=str) + "\n")

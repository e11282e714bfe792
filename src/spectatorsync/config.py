"""Spectator configuration loader."""

import yaml
from dataclasses import dataclass, field
from pathlib import Path

from spectatorsync.core.beatmap import BeatmapDifficulty


@dataclass
class BeatmapConfig:
    md5: str
    od: float
    cs: float
    ar: float
    title: str = ""

    @property
    def difficulty(self) -> BeatmapDifficulty:
        return BeatmapDifficulty(od=self.od, cs=self.cs, ar=self.ar)


@dataclass
class DisplayConfig:
    refresh_rate_s: float = 0.5
    hit_error_window_ms: int = 3000


@dataclass
class SpectatorConfig:
    room_id: str
    stream_path: Path | None = None
    record_path: Path | None = None  # re-record accepted messages as JSONL
    log_level: str = "INFO"
    display: DisplayConfig = field(default_factory=DisplayConfig)
    beatmaps: dict[str, BeatmapConfig] = field(default_factory=dict)


def load_config(path: Path) -> SpectatorConfig:
    """Load spectator config from YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f)

    s = raw["spectator"]
    d = raw.get("display") or {}

    beatmaps = {}
    for md5, b in (raw.get("beatmaps") or {}).items():
        md5 = str(md5)
        beatmaps[md5] = BeatmapConfig(
            md5=md5,
            od=b["od"],
            cs=b["cs"],
            ar=b["ar"],
            title=b.get("title", ""),
        )

    stream = s.get("stream")
    record = s.get("record")

    return SpectatorConfig(
        room_id=str(s["room_id"]),
        stream_path=Path(stream) if stream else None,
        record_path=Path(record) if record else None,
        log_level=str(s.get("log_level", "INFO")).upper(),
        display=DisplayConfig(
            refresh_rate_s=d.get("refresh_rate_s", 0.5),
            hit_error_window_ms=d.get("hit_error_window_ms", 3000),
        ),
        beatmaps=beatmaps,
    )

"""Beatmap types shared between the room and the beatmap collaborator.

The room only ever sees a reference to the picked beatmap and, once the
collaborator has fetched and parsed it, the difficulty values gameplay
parameters are derived from. Raw beatmap files never reach the core.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class BeatmapStatus(Enum):
    NONE = "none"            # no beatmap picked in room
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"  # mirror miss or acquisition failure


@dataclass(frozen=True)
class BeatmapRef:
    """The beatmap picked in the room. Identity is the .osu file MD5."""

    md5: str
    beatmapset_id: int | None = field(default=None, compare=False)
    artist: str = field(default="", compare=False)
    title: str = field(default="", compare=False)
    creator: str = field(default="", compare=False)
    version: str = field(default="", compare=False)

    @property
    def display_title(self) -> str:
        if not (self.artist or self.title):
            return self.md5
        return f"{self.artist} - {self.title} ({self.creator}) [{self.version}]"


@dataclass(frozen=True)
class BeatmapDifficulty:
    """Base difficulty settings reported by the beatmap collaborator."""

    od: float
    cs: float
    ar: float

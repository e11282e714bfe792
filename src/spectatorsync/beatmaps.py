"""StaticBeatmapProvider — beatmap collaborator backed by configuration.

Answers the room's beatmap requests from the ``beatmaps:`` section of the
config instead of downloading anything. A reference whose MD5 is not
configured is reported as unavailable.
"""

from __future__ import annotations

import logging

from spectatorsync.config import BeatmapConfig
from spectatorsync.core.beatmap import BeatmapRef
from spectatorsync.core.room import RoomState

logger = logging.getLogger(__name__)


class StaticBeatmapProvider:
    def __init__(self, beatmaps: dict[str, BeatmapConfig]) -> None:
        self._beatmaps = dict(beatmaps)
        self._room: RoomState | None = None

    def attach(self, room: RoomState) -> None:
        self._room = room

    def request(self, beatmap: BeatmapRef) -> None:
        """Resolve ``beatmap`` and signal the attached room."""
        if self._room is None:
            raise RuntimeError("StaticBeatmapProvider is not attached to a room")

        entry = self._beatmaps.get(beatmap.md5)
        if entry is None:
            logger.info("No configured difficulty for beatmap %s", beatmap.md5)
            self._room.beatmap_unavailable(beatmap, "not configured")
            return
        self._room.beatmap_ready(beatmap, entry.difficulty)

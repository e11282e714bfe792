"""SpectatorDataManager — everything the room knows about one player.

Owns the player's cursor groups, judgement timeline and the three
checkpointed stat tracks, plus the gameplay parameters derived from the
player's mods. ``snapshot`` consolidates all of it into one immutable view
of the player at a given time. Nothing is interpolated: each field is the
last value known at or before the requested time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from spectatorsync.core.beatmap import BeatmapDifficulty
from spectatorsync.core.event_manager import SpectatorEventManager
from spectatorsync.core.events import (
    CursorSample,
    HitResult,
    JudgementEvent,
    Position,
    StatCheckpoint,
    StatDelta,
    StatKind,
)
from spectatorsync.core.mods import GameplayParameters, derive_parameters
from spectatorsync.core.stat_track import CheckpointedStatTrack

CURSOR = "cursor"
JUDGEMENT = "judgement"


@dataclass(frozen=True)
class PlayerSnapshot:
    """What was true for one player at ``time``."""

    uid: int
    username: str
    time: int
    cursors: Mapping[int, Position | None] = field(
        default_factory=lambda: MappingProxyType({})
    )
    last_judgement: HitResult | None = None
    score: float | None = None
    combo: float | None = None
    accuracy: float | None = None
    parameters: GameplayParameters = field(default_factory=GameplayParameters)


class SpectatorDataManager:
    """Per-player event categories and derived gameplay parameters."""

    def __init__(
        self,
        uid: int,
        username: str = "",
        team: str | None = None,
        difficulty: BeatmapDifficulty | None = None,
    ) -> None:
        self.uid = uid
        self.username = username or str(uid)
        self.team = team
        self._mods: tuple[str, ...] = ()
        self._force_cs: float | None = None
        self._force_ar: float | None = None
        self._difficulty = difficulty
        self._parameters = derive_parameters((), difficulty)

        self._cursors: dict[int, SpectatorEventManager[CursorSample]] = {}
        self._judgements: SpectatorEventManager[JudgementEvent] = SpectatorEventManager()
        self._stats: dict[StatKind, CheckpointedStatTrack] = {
            kind: CheckpointedStatTrack(kind) for kind in StatKind
        }

    # ------------------------------------------------------------------
    # Derived parameters
    # ------------------------------------------------------------------

    @property
    def mods(self) -> tuple[str, ...]:
        return self._parameters.mods

    @property
    def parameters(self) -> GameplayParameters:
        return self._parameters

    def apply_mods(
        self,
        mods,
        force_cs: float | None = None,
        force_ar: float | None = None,
    ) -> None:
        """Replace the player's mods and overrides, then re-derive."""
        self._mods = tuple(mods)
        self._force_cs = force_cs
        self._force_ar = force_ar
        self._rederive()

    def apply_difficulty(self, difficulty: BeatmapDifficulty | None) -> None:
        self._difficulty = difficulty
        self._rederive()

    def _rederive(self) -> None:
        self._parameters = derive_parameters(
            self._mods, self._difficulty, self._force_cs, self._force_ar
        )

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def add_cursor(self, group_id: int, sample: CursorSample) -> None:
        manager = self._cursors.get(group_id)
        if manager is None:
            manager = SpectatorEventManager()
            self._cursors[group_id] = manager
        manager.add(sample)

    def add_judgement(self, event: JudgementEvent) -> None:
        self._judgements.add(event)

    def add_stat_delta(self, delta: StatDelta) -> None:
        self._stats[delta.kind].add_delta(delta)

    def add_stat_checkpoint(self, checkpoint: StatCheckpoint) -> None:
        self._stats[checkpoint.kind].add_checkpoint(checkpoint)

    def clear(self) -> None:
        """Empty every category. Cursor groups stay registered."""
        for manager in self._cursors.values():
            manager.clear()
        self._judgements.clear()
        for track in self._stats.values():
            track.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def cursor_groups(self) -> list[int]:
        return sorted(self._cursors)

    @property
    def is_empty(self) -> bool:
        return self.latest_time is None

    @property
    def latest_time(self) -> int | None:
        times = [m.latest_time for m in self._cursors.values()]
        times.append(self._judgements.latest_time)
        times.extend(t.latest_time for t in self._stats.values())
        known = [t for t in times if t is not None]
        return max(known) if known else None

    def event_at(self, category: str, time: int, group_id: int = 0):
        """Raw latest event of a cursor group or the judgement timeline."""
        if category == CURSOR:
            manager = self._cursors.get(group_id)
            return manager.event_at(time) if manager is not None else None
        if category == JUDGEMENT:
            return self._judgements.event_at(time)
        raise ValueError(f"Unknown event category: {category!r}")

    def stat_at(self, kind: StatKind, time: int) -> float | None:
        return self._stats[kind].value_at(time)

    def cursor_position_at(self, group_id: int, time: int) -> Position | None:
        """Cursor position, or None when absent or lifted at ``time``."""
        sample = self.event_at(CURSOR, time, group_id)
        if sample is None or sample.is_lifted:
            return None
        return sample.position

    def hit_errors(self, time: int, window_ms: int) -> list[float]:
        """Accuracy offsets of non-miss hits in ``(time - window_ms, time]``."""
        return [
            e.accuracy_offset_ms
            for e in self._judgements.events_between(time - window_ms, time)
            if e.result is not HitResult.MISS
        ]

    def snapshot(self, time: int) -> PlayerSnapshot:
        judgement = self._judgements.event_at(time)
        return PlayerSnapshot(
            uid=self.uid,
            username=self.username,
            time=time,
            cursors=MappingProxyType({
                group_id: self.cursor_position_at(group_id, time)
                for group_id in self.cursor_groups
            }),
            last_judgement=judgement.result if judgement is not None else None,
            score=self.stat_at(StatKind.SCORE, time),
            combo=self.stat_at(StatKind.COMBO, time),
            accuracy=self.stat_at(StatKind.ACCURACY, time),
            parameters=self._parameters,
        )

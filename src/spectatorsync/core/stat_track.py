"""CheckpointedStatTrack — cumulative statistic rebuilt from checkpoints.

Checkpoints are authoritative at their own timestamp. The value at T is the
latest checkpoint at or before T plus every delta strictly after that
checkpoint and at or before T. Deltas that predate the checkpoint are kept
for replay but never counted.
"""

from __future__ import annotations

from spectatorsync.core.events import StatCheckpoint, StatDelta, StatKind
from spectatorsync.core.timeline import Timeline


class CheckpointedStatTrack:
    """Score, combo or accuracy of one player over time."""

    def __init__(self, kind: StatKind) -> None:
        self.kind = kind
        self._checkpoints: Timeline[StatCheckpoint] = Timeline()
        self._deltas: Timeline[StatDelta] = Timeline()

    @property
    def checkpoints(self) -> list[StatCheckpoint]:
        return list(self._checkpoints)

    @property
    def deltas(self) -> list[StatDelta]:
        return list(self._deltas)

    @property
    def latest_time(self) -> int | None:
        times = [
            t for t in (self._checkpoints.last_time, self._deltas.last_time)
            if t is not None
        ]
        return max(times) if times else None

    def add_delta(self, delta: StatDelta) -> None:
        self._deltas.insert(delta)

    def add_checkpoint(self, checkpoint: StatCheckpoint) -> None:
        self._checkpoints.insert(checkpoint)

    def value_at(self, time: int) -> float | None:
        base = self._checkpoints.event_at(time)
        if base is None:
            return None
        return base.value + sum(
            d.value for d in self._deltas.events_between(base.time, time)
        )

    def clear(self) -> None:
        self._checkpoints.clear()
        self._deltas.clear()

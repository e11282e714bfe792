"""SpectatorEventManager — one category of one player's events."""

from __future__ import annotations

from typing import Generic

from spectatorsync.core.timeline import E, Timeline


class SpectatorEventManager(Generic[E]):
    """Uniform add / event_at / clear over a single Timeline.

    Used for cursor groups and hit judgements, where there is no
    checkpoint/delta split.
    """

    def __init__(self) -> None:
        self._timeline: Timeline[E] = Timeline()

    def __len__(self) -> int:
        return len(self._timeline)

    @property
    def latest_time(self) -> int | None:
        return self._timeline.last_time

    def add(self, event: E) -> None:
        self._timeline.insert(event)

    def event_at(self, time: int) -> E | None:
        return self._timeline.event_at(time)

    def events_between(self, start: int, end: int) -> list[E]:
        return self._timeline.events_between(start, end)

    def clear(self) -> None:
        self._timeline.clear()

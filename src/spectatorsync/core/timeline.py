"""Timeline — ordered, append-mostly store of time-stamped events.

Events are kept sorted by ``time`` at insert. In-order arrival is a plain
append; a late event is placed with a binary search so queries stay
correct without a separate sort pass. Events sharing a timestamp keep
their arrival order, so the last one received wins a point query.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import Generic, Iterator, Protocol, TypeVar


class Timed(Protocol):
    time: int


E = TypeVar("E", bound=Timed)


class Timeline(Generic[E]):
    """Sorted event store answering "latest event at or before T"."""

    def __init__(self) -> None:
        self._times: list[int] = []
        self._events: list[E] = []

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[E]:
        return iter(list(self._events))

    @property
    def first_time(self) -> int | None:
        return self._times[0] if self._times else None

    @property
    def last_time(self) -> int | None:
        return self._times[-1] if self._times else None

    def insert(self, event: E) -> None:
        if not self._times or event.time >= self._times[-1]:
            self._times.append(event.time)
            self._events.append(event)
            return

        idx = bisect_right(self._times, event.time)
        self._times.insert(idx, event.time)
        self._events.insert(idx, event)

    def event_at(self, time: int) -> E | None:
        """Return the event with the greatest time <= ``time``, or None."""
        idx = bisect_right(self._times, time) - 1
        if idx < 0:
            return None
        return self._events[idx]

    def events_between(self, start: int, end: int) -> list[E]:
        """Return events with ``start < time <= end`` in time order."""
        if end <= start:
            return []
        lo = bisect_right(self._times, start)
        hi = bisect_right(self._times, end)
        return self._events[lo:hi]

    def clear(self) -> None:
        self._times.clear()
        self._events.clear()

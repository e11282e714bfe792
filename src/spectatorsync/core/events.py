"""Spectator event value types.

Every event carries an integer ``time`` in milliseconds relative to the
start of gameplay. Events are frozen; a Timeline never mutates what it
stores.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MovementKind(Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"


class HitResult(Enum):
    MISS = "miss"
    MEH = "meh"
    OK = "ok"
    GOOD = "good"
    GREAT = "great"
    PERFECT = "perfect"


class StatKind(Enum):
    SCORE = "score"
    COMBO = "combo"
    ACCURACY = "accuracy"


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class CursorSample:
    """One cursor sample of a single cursor group."""

    time: int
    position: Position
    kind: MovementKind

    @property
    def is_lifted(self) -> bool:
        return self.kind is MovementKind.UP


@dataclass(frozen=True)
class JudgementEvent:
    """Scoring outcome of one hit attempt."""

    time: int
    result: HitResult
    accuracy_offset_ms: float


@dataclass(frozen=True)
class StatDelta:
    """Exact incremental change to a cumulative statistic."""

    time: int
    kind: StatKind
    value: float


@dataclass(frozen=True)
class StatCheckpoint:
    """Authoritative value of a cumulative statistic at ``time``."""

    time: int
    kind: StatKind
    value: float

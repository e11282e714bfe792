"""Inbound spectator messages and their decoder.

Each line of the spectator stream is a JSON object discriminated by its
``state`` field. ``MessageDecoder`` checks the discriminator against the
closed set of known kinds, validates the payload against that kind's JSON
Schema, and builds the matching frozen message. Failures come back as a
``DecodeResult`` with an error string; decoding never raises on bad input.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

import jsonschema

from spectatorsync.core.beatmap import BeatmapRef
from spectatorsync.core.events import (
    CursorSample,
    HitResult,
    JudgementEvent,
    MovementKind,
    Position,
    StatCheckpoint,
    StatDelta,
    StatKind,
)
from spectatorsync.core.schemas import MESSAGE_SCHEMA_PATH, load_schema


class MessageKind(Enum):
    PLAYER_JOINED = "player_joined"
    PLAYER_LEFT = "player_left"
    BEATMAP_CHANGED = "beatmap_changed"
    MODS_CHANGED = "mods_changed"
    CURSOR = "cursor"
    OBJECT_DATA = "object_data"
    STAT_DELTA = "stat_delta"
    STAT_CHECKPOINT = "stat_checkpoint"
    GAMEPLAY_STARTED = "gameplay_started"
    GAMEPLAY_ENDED = "gameplay_ended"
    TEAM_MODE_CHANGED = "team_mode_changed"


class TeamMode(Enum):
    HEAD_TO_HEAD = "head_to_head"
    TEAM_VS = "team_vs"


@dataclass(frozen=True)
class PlayerJoined:
    uid: int
    username: str = ""
    team: str | None = None


@dataclass(frozen=True)
class PlayerLeft:
    uid: int


@dataclass(frozen=True)
class BeatmapChanged:
    beatmap: BeatmapRef | None


@dataclass(frozen=True)
class ModsChanged:
    uid: int
    mods: tuple[str, ...]
    force_cs: float | None = None
    force_ar: float | None = None


@dataclass(frozen=True)
class CursorMessage:
    uid: int
    group_id: int
    sample: CursorSample


@dataclass(frozen=True)
class ObjectDataMessage:
    uid: int
    judgement: JudgementEvent


@dataclass(frozen=True)
class StatDeltaMessage:
    uid: int
    delta: StatDelta


@dataclass(frozen=True)
class StatCheckpointMessage:
    uid: int
    checkpoint: StatCheckpoint


@dataclass(frozen=True)
class GameplayStarted:
    pass


@dataclass(frozen=True)
class GameplayEnded:
    pass


@dataclass(frozen=True)
class TeamModeChanged:
    team_mode: TeamMode


Message = Union[
    PlayerJoined,
    PlayerLeft,
    BeatmapChanged,
    ModsChanged,
    CursorMessage,
    ObjectDataMessage,
    StatDeltaMessage,
    StatCheckpointMessage,
    GameplayStarted,
    GameplayEnded,
    TeamModeChanged,
]

# Messages that address a single player's session.
PLAYER_MESSAGES = (
    ModsChanged,
    CursorMessage,
    ObjectDataMessage,
    StatDeltaMessage,
    StatCheckpointMessage,
)


@dataclass(frozen=True)
class DecodeResult:
    """Result of decoding one raw stream record."""

    success: bool
    message: Message | None
    kind: str | None
    error: str | None


def _beatmap_ref(raw: dict | None) -> BeatmapRef | None:
    if raw is None:
        return None
    return BeatmapRef(
        md5=raw["md5"],
        beatmapset_id=raw.get("beatmapSetId"),
        artist=raw.get("artist", ""),
        title=raw.get("title", ""),
        creator=raw.get("creator", ""),
        version=raw.get("version", ""),
    )


def _build(kind: MessageKind, data: dict) -> Message:
    if kind is MessageKind.PLAYER_JOINED:
        return PlayerJoined(
            uid=data["uid"],
            username=data.get("username", ""),
            team=data.get("team"),
        )
    if kind is MessageKind.PLAYER_LEFT:
        return PlayerLeft(uid=data["uid"])
    if kind is MessageKind.BEATMAP_CHANGED:
        return BeatmapChanged(beatmap=_beatmap_ref(data["beatmap"]))
    if kind is MessageKind.MODS_CHANGED:
        return ModsChanged(
            uid=data["uid"],
            mods=tuple(data["mods"]),
            force_cs=data.get("forceCS"),
            force_ar=data.get("forceAR"),
        )
    if kind is MessageKind.CURSOR:
        pos = data["position"]
        return CursorMessage(
            uid=data["uid"],
            group_id=int(data["groupId"]),
            sample=CursorSample(
                time=int(data["time"]),
                position=Position(x=pos["x"], y=pos["y"]),
                kind=MovementKind(data["kind"]),
            ),
        )
    if kind is MessageKind.OBJECT_DATA:
        return ObjectDataMessage(
            uid=data["uid"],
            judgement=JudgementEvent(
                time=int(data["time"]),
                result=HitResult(data["result"]),
                accuracy_offset_ms=data["accuracyOffsetMs"],
            ),
        )
    if kind is MessageKind.STAT_DELTA:
        return StatDeltaMessage(
            uid=data["uid"],
            delta=StatDelta(
                time=int(data["time"]),
                kind=StatKind(data["statKind"]),
                value=data["value"],
            ),
        )
    if kind is MessageKind.STAT_CHECKPOINT:
        return StatCheckpointMessage(
            uid=data["uid"],
            checkpoint=StatCheckpoint(
                time=int(data["time"]),
                kind=StatKind(data["statKind"]),
                value=data["value"],
            ),
        )
    if kind is MessageKind.GAMEPLAY_STARTED:
        return GameplayStarted()
    if kind is MessageKind.GAMEPLAY_ENDED:
        return GameplayEnded()
    if kind is MessageKind.TEAM_MODE_CHANGED:
        return TeamModeChanged(team_mode=TeamMode(data["teamMode"]))
    raise AssertionError(f"Unhandled message kind: {kind}")


class MessageDecoder:
    """Validate raw stream records and turn them into messages."""

    def __init__(self, schema: dict | None = None) -> None:
        if schema is None:
            schema = load_schema(MESSAGE_SCHEMA_PATH)
        self._schemas: dict[str, dict] = schema["messages"]

    def decode(self, data) -> DecodeResult:
        if not isinstance(data, dict):
            return DecodeResult(
                success=False, message=None, kind=None,
                error="Message is not a JSON object",
            )

        state = data.get("state")
        try:
            kind = MessageKind(state)
        except ValueError:
            return DecodeResult(
                success=False, message=None, kind=None,
                error=f"Unknown message kind: {state!r}",
            )

        try:
            jsonschema.validate(data, self._schemas[kind.value])
        except jsonschema.ValidationError as e:
            return DecodeResult(
                success=False, message=None, kind=kind.value,
                error=f"Schema validation: {e.message}",
            )

        return DecodeResult(
            success=True, message=_build(kind, data), kind=kind.value, error=None,
        )

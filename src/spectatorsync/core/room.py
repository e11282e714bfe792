"""RoomState — lifecycle and routing for one spectated multiplayer room.

One RoomState per room connection. It owns every player's
SpectatorDataManager, routes decoded messages to them, and resets all of
them at once when the picked beatmap changes so no timeline ever mixes data
from two beatmaps.

Phases:
    EMPTY → AWAITING_BEATMAP → BEATMAP_READY → IN_GAMEPLAY → GAMEPLAY_ENDED

Beatmap acquisition happens outside the room. The room announces the
beatmap it needs through ``on_beatmap_request`` and learns the outcome
through ``beatmap_ready`` / ``beatmap_unavailable``.
"""

from __future__ import annotations

import logging
import time as _time
from enum import Enum
from typing import Callable

from spectatorsync.core.beatmap import BeatmapDifficulty, BeatmapRef, BeatmapStatus
from spectatorsync.core.data_manager import PlayerSnapshot, SpectatorDataManager
from spectatorsync.core.messages import (
    PLAYER_MESSAGES,
    BeatmapChanged,
    CursorMessage,
    GameplayEnded,
    GameplayStarted,
    Message,
    MessageDecoder,
    ModsChanged,
    ObjectDataMessage,
    PlayerJoined,
    PlayerLeft,
    StatCheckpointMessage,
    StatDeltaMessage,
    TeamMode,
    TeamModeChanged,
)

logger = logging.getLogger(__name__)


class RoomPhase(Enum):
    EMPTY = "empty"
    AWAITING_BEATMAP = "awaiting_beatmap"
    BEATMAP_READY = "beatmap_ready"
    IN_GAMEPLAY = "in_gameplay"
    GAMEPLAY_ENDED = "gameplay_ended"


class RoomState:
    """Tracks room lifecycle and owns all player sessions."""

    def __init__(
        self,
        room_id: str = "",
        *,
        on_beatmap_request: Callable[[BeatmapRef], None] | None = None,
        decoder: MessageDecoder | None = None,
        clock: Callable[[], float] = _time.monotonic,
    ) -> None:
        self.room_id = room_id
        self._on_beatmap_request = on_beatmap_request
        self._decoder = decoder or MessageDecoder()
        self._clock = clock

        self._sessions: dict[int, SpectatorDataManager] = {}
        self._phase = RoomPhase.EMPTY
        self._beatmap: BeatmapRef | None = None
        self._beatmap_status = BeatmapStatus.NONE
        self._difficulty: BeatmapDifficulty | None = None
        self._team_mode = TeamMode.HEAD_TO_HEAD
        self._gameplay_started_at: float | None = None

        self._handlers: dict[type, Callable] = {
            PlayerJoined: self._on_player_joined,
            PlayerLeft: self._on_player_left,
            BeatmapChanged: self._on_beatmap_changed,
            ModsChanged: self._on_mods_changed,
            CursorMessage: self._on_cursor,
            ObjectDataMessage: self._on_object_data,
            StatDeltaMessage: self._on_stat_delta,
            StatCheckpointMessage: self._on_stat_checkpoint,
            GameplayStarted: self._on_gameplay_started,
            GameplayEnded: self._on_gameplay_ended,
            TeamModeChanged: self._on_team_mode_changed,
        }

    # ------------------------------------------------------------------
    # Read-only room properties
    # ------------------------------------------------------------------

    @property
    def phase(self) -> RoomPhase:
        return self._phase

    @property
    def beatmap(self) -> BeatmapRef | None:
        return self._beatmap

    @property
    def beatmap_status(self) -> BeatmapStatus:
        return self._beatmap_status

    @property
    def difficulty(self) -> BeatmapDifficulty | None:
        return self._difficulty

    @property
    def team_mode(self) -> TeamMode:
        return self._team_mode

    @property
    def uids(self) -> list[int]:
        return sorted(self._sessions)

    @property
    def player_count(self) -> int:
        return len(self._sessions)

    def has_player(self, uid: int) -> bool:
        return uid in self._sessions

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def handle_raw(self, data) -> bool:
        """Decode and apply one raw stream record. Returns True if applied."""
        result = self._decoder.decode(data)
        if not result.success:
            logger.warning("Ignoring malformed message: %s", result.error)
            return False
        return self.handle(result.message)

    def handle(self, message: Message) -> bool:
        """Apply one decoded message. Returns True if it changed the room."""
        handler = self._handlers.get(type(message))
        if handler is None:
            logger.warning("Ignoring unsupported message type: %s", type(message).__name__)
            return False

        if isinstance(message, PLAYER_MESSAGES):
            session = self._sessions.get(message.uid)
            if session is None:
                logger.warning(
                    "Ignoring %s for unknown player uid=%s",
                    type(message).__name__, message.uid,
                )
                return False
            return handler(session, message)

        return handler(message)

    def _on_player_joined(self, message: PlayerJoined) -> bool:
        if message.uid in self._sessions:
            logger.debug("Player uid=%s already in room", message.uid)
            return False
        self._sessions[message.uid] = SpectatorDataManager(
            message.uid,
            username=message.username,
            team=message.team,
            difficulty=self._difficulty,
        )
        logger.info("Player joined: uid=%s (%s)", message.uid, message.username)
        return True

    def _on_player_left(self, message: PlayerLeft) -> bool:
        if self._sessions.pop(message.uid, None) is None:
            logger.debug("Player uid=%s left but was not in room", message.uid)
            return False
        logger.info("Player left: uid=%s", message.uid)
        return True

    def _on_beatmap_changed(self, message: BeatmapChanged) -> bool:
        new = message.beatmap
        if new is None:
            self._beatmap_status = BeatmapStatus.NONE
            self._phase = RoomPhase.AWAITING_BEATMAP
            logger.info("No beatmap is picked in room %s", self.room_id)
            return True

        if new == self._beatmap:
            return self._on_same_beatmap(new)

        self._reset_sessions()
        self._beatmap = new
        self._difficulty = None
        self._gameplay_started_at = None
        self._phase = RoomPhase.AWAITING_BEATMAP
        for session in self._sessions.values():
            session.apply_difficulty(None)

        logger.info("Beatmap changed to %s", new.display_title)
        self._request_beatmap(new)
        return True

    def _on_same_beatmap(self, beatmap: BeatmapRef) -> bool:
        # Rejoining the same gameplay keeps every timeline.
        if self._beatmap_status is not BeatmapStatus.READY:
            self._phase = RoomPhase.AWAITING_BEATMAP
            logger.info("Retrying beatmap %s", beatmap.display_title)
            self._request_beatmap(beatmap)
            return True

        if self._phase in (RoomPhase.AWAITING_BEATMAP, RoomPhase.GAMEPLAY_ENDED):
            self._phase = RoomPhase.BEATMAP_READY
            return True

        logger.debug("Beatmap %s unchanged", beatmap.md5)
        return False

    def _request_beatmap(self, beatmap: BeatmapRef) -> None:
        if beatmap.beatmapset_id is None:
            self._beatmap_status = BeatmapStatus.NOT_FOUND
            logger.warning("Beatmap %s not found in mirror", beatmap.display_title)
            return

        self._beatmap_status = BeatmapStatus.LOADING
        if self._on_beatmap_request is not None:
            self._on_beatmap_request(beatmap)

    def _reset_sessions(self) -> None:
        sessions = list(self._sessions.values())
        for session in sessions:
            session.clear()
        logger.info("Cleared spectator data of %d player(s)", len(sessions))

    def _on_mods_changed(self, session: SpectatorDataManager, message: ModsChanged) -> bool:
        session.apply_mods(message.mods, message.force_cs, message.force_ar)
        return True

    def _on_cursor(self, session: SpectatorDataManager, message: CursorMessage) -> bool:
        session.add_cursor(message.group_id, message.sample)
        return True

    def _on_object_data(self, session: SpectatorDataManager, message: ObjectDataMessage) -> bool:
        session.add_judgement(message.judgement)
        return True

    def _on_stat_delta(self, session: SpectatorDataManager, message: StatDeltaMessage) -> bool:
        session.add_stat_delta(message.delta)
        return True

    def _on_stat_checkpoint(
        self, session: SpectatorDataManager, message: StatCheckpointMessage
    ) -> bool:
        session.add_stat_checkpoint(message.checkpoint)
        return True

    def _on_gameplay_started(self, message: GameplayStarted) -> bool:
        if self._phase is not RoomPhase.BEATMAP_READY:
            logger.warning("Gameplay started while room is %s; ignoring", self._phase.value)
            return False
        self._phase = RoomPhase.IN_GAMEPLAY
        self._gameplay_started_at = self._clock()
        logger.info("Gameplay started in room %s", self.room_id)
        return True

    def _on_gameplay_ended(self, message: GameplayEnded) -> bool:
        if self._phase is not RoomPhase.IN_GAMEPLAY:
            logger.warning("Gameplay ended while room is %s; ignoring", self._phase.value)
            return False
        self._phase = RoomPhase.GAMEPLAY_ENDED
        logger.info("Gameplay ended in room %s", self.room_id)
        return True

    def _on_team_mode_changed(self, message: TeamModeChanged) -> bool:
        self._team_mode = message.team_mode
        return True

    # ------------------------------------------------------------------
    # Beatmap collaborator signals
    # ------------------------------------------------------------------

    def beatmap_ready(self, beatmap: BeatmapRef, difficulty: BeatmapDifficulty) -> bool:
        if beatmap != self._beatmap:
            logger.debug("Ignoring ready signal for superseded beatmap %s", beatmap.md5)
            return False
        self._difficulty = difficulty
        self._beatmap_status = BeatmapStatus.READY
        if self._phase is RoomPhase.AWAITING_BEATMAP:
            self._phase = RoomPhase.BEATMAP_READY
        for session in self._sessions.values():
            session.apply_difficulty(difficulty)
        logger.info("Beatmap ready: %s", beatmap.display_title)
        return True

    def beatmap_unavailable(self, beatmap: BeatmapRef, reason: str = "") -> bool:
        if beatmap != self._beatmap:
            logger.debug("Ignoring failure for superseded beatmap %s", beatmap.md5)
            return False
        self._beatmap_status = BeatmapStatus.NOT_FOUND
        logger.warning("Beatmap unavailable: %s (%s)", beatmap.display_title, reason)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self, uid: int, time: int) -> PlayerSnapshot | None:
        session = self._sessions.get(uid)
        if session is None:
            return None
        return session.snapshot(time)

    def snapshots(self, time: int) -> list[PlayerSnapshot]:
        return [self._sessions[uid].snapshot(time) for uid in self.uids]

    def event_at(self, uid: int, category: str, time: int, group_id: int = 0):
        session = self._sessions.get(uid)
        if session is None:
            return None
        return session.event_at(category, time, group_id)

    def hit_errors(self, uid: int, time: int, window_ms: int) -> list[float]:
        session = self._sessions.get(uid)
        if session is None:
            return []
        return session.hit_errors(time, window_ms)

    def parameters(self, uid: int):
        session = self._sessions.get(uid)
        return session.parameters if session is not None else None

    @property
    def latest_time(self) -> int | None:
        times = [s.latest_time for s in self._sessions.values()]
        known = [t for t in times if t is not None]
        return max(known) if known else None

    def playback_time(self, now: float | None = None) -> int | None:
        """Milliseconds since gameplay started, or None before it has."""
        if self._gameplay_started_at is None:
            return None
        if now is None:
            now = self._clock()
        return int((now - self._gameplay_started_at) * 1000)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._sessions.clear()
        self._beatmap = None
        self._beatmap_status = BeatmapStatus.NONE
        self._difficulty = None
        self._team_mode = TeamMode.HEAD_TO_HEAD
        self._gameplay_started_at = None
        self._phase = RoomPhase.EMPTY
        logger.info("Room %s closed", self.room_id)

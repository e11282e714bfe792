"""Tests for MessageDecoder — discriminated, schema-validated decoding."""

import pytest

from conftest import beatmap_changed, cursor, object_data, stat
from spectatorsync.core.beatmap import BeatmapRef
from spectatorsync.core.events import HitResult, MovementKind, Position, StatKind
from spectatorsync.core.messages import (
    BeatmapChanged,
    CursorMessage,
    GameplayEnded,
    GameplayStarted,
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


@pytest.fixture(scope="module")
def decoder():
    return MessageDecoder()


class TestDecodeValid:
    def test_player_joined(self, decoder):
        result = decoder.decode({"state": "player_joined", "uid": 5, "username": "rian"})
        assert result.success
        assert result.message == PlayerJoined(uid=5, username="rian")
        assert result.kind == "player_joined"

    def test_player_left(self, decoder):
        assert decoder.decode({"state": "player_left", "uid": 5}).message == PlayerLeft(5)

    def test_beatmap_changed(self, decoder):
        msg = decoder.decode(beatmap_changed("abc", 99, title="Song")).message
        assert isinstance(msg, BeatmapChanged)
        assert msg.beatmap == BeatmapRef("abc")
        assert msg.beatmap.beatmapset_id == 99
        assert msg.beatmap.title == "Song"

    def test_beatmap_changed_null(self, decoder):
        msg = decoder.decode(beatmap_changed(None)).message
        assert msg == BeatmapChanged(beatmap=None)

    def test_mods_changed(self, decoder):
        msg = decoder.decode(
            {"state": "mods_changed", "uid": 3, "mods": ["HR", "PR"], "forceAR": 9.5}
        ).message
        assert msg == ModsChanged(uid=3, mods=("HR", "PR"), force_cs=None, force_ar=9.5)

    def test_cursor(self, decoder):
        msg = decoder.decode(cursor(7, 50, 110, 100, "down", group_id=1)).message
        assert isinstance(msg, CursorMessage)
        assert msg.uid == 7 and msg.group_id == 1
        assert msg.sample.time == 50
        assert msg.sample.position == Position(110, 100)
        assert msg.sample.kind is MovementKind.DOWN

    def test_object_data(self, decoder):
        msg = decoder.decode(object_data(7, 300, "perfect", -3.5)).message
        assert isinstance(msg, ObjectDataMessage)
        assert msg.judgement.result is HitResult.PERFECT
        assert msg.judgement.accuracy_offset_ms == -3.5

    def test_stats(self, decoder):
        delta = decoder.decode(stat(7, 10, "combo", 1, checkpoint=False)).message
        checkpoint = decoder.decode(stat(7, 10, "accuracy", 98.5)).message
        assert isinstance(delta, StatDeltaMessage)
        assert delta.delta.kind is StatKind.COMBO
        assert isinstance(checkpoint, StatCheckpointMessage)
        assert checkpoint.checkpoint.value == 98.5

    def test_room_messages(self, decoder):
        assert decoder.decode({"state": "gameplay_started"}).message == GameplayStarted()
        assert decoder.decode({"state": "gameplay_ended"}).message == GameplayEnded()
        msg = decoder.decode({"state": "team_mode_changed", "teamMode": "team_vs"}).message
        assert msg == TeamModeChanged(TeamMode.TEAM_VS)

    def test_extra_fields_are_tolerated(self, decoder):
        data = {"state": "player_left", "uid": 1, "recorded_at": "2026-01-01T00:00:00"}
        assert decoder.decode(data).success


class TestDecodeInvalid:
    def test_unknown_kind(self, decoder):
        result = decoder.decode({"state": "chat_message", "text": "hi"})
        assert not result.success
        assert result.message is None
        assert "Unknown message kind" in result.error

    def test_missing_state(self, decoder):
        assert not decoder.decode({"uid": 1}).success

    def test_not_an_object(self, decoder):
        for data in ("garbage", [1, 2], None, 42):
            result = decoder.decode(data)
            assert not result.success
            assert result.error == "Message is not a JSON object"

    def test_schema_violation(self, decoder):
        result = decoder.decode({"state": "cursor", "uid": 7, "time": 0})
        assert not result.success
        assert result.kind == "cursor"
        assert result.error.startswith("Schema validation")

    def test_bad_enum_value(self, decoder):
        assert not decoder.decode(cursor(7, 0, 1, 1, "hover")).success
        assert not decoder.decode(object_data(7, 0, "excellent")).success
        assert not decoder.decode(stat(7, 0, "pp", 1)).success

    def test_bool_is_not_a_uid(self, decoder):
        assert not decoder.decode({"state": "player_joined", "uid": True}).success

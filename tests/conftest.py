"""Shared test fixtures for spectatorsync."""

import pytest

from spectatorsync.core.beatmap import BeatmapDifficulty
from spectatorsync.core.room import RoomState


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def requests():
    """Beatmap references the room asked the collaborator for."""
    return []


@pytest.fixture
def room(clock, requests):
    return RoomState("room-1", on_beatmap_request=requests.append, clock=clock)


@pytest.fixture
def difficulty():
    return BeatmapDifficulty(od=8, cs=4, ar=9)


@pytest.fixture
def tmp_output(tmp_path):
    """Provide a temporary output directory for test runs."""
    return tmp_path / "output"


def beatmap_changed(md5="aaa", beatmapset_id=1234, **extra):
    beatmap = None
    if md5 is not None:
        beatmap = {"md5": md5, "beatmapSetId": beatmapset_id, **extra}
    return {"state": "beatmap_changed", "beatmap": beatmap}


def cursor(uid, time, x, y, kind="move", group_id=0):
    return {
        "state": "cursor", "uid": uid, "groupId": group_id, "time": time,
        "position": {"x": x, "y": y}, "kind": kind,
    }


def object_data(uid, time, result="great", offset=0.0):
    return {
        "state": "object_data", "uid": uid, "time": time,
        "result": result, "accuracyOffsetMs": offset,
    }


def stat(uid, time, kind, value, checkpoint=True):
    return {
        "state": "stat_checkpoint" if checkpoint else "stat_delta",
        "uid": uid, "time": time, "statKind": kind, "value": value,
    }

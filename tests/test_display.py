"""Tests for the terminal spectator view."""

from rich.console import Console

from conftest import beatmap_changed, cursor, object_data, stat
from spectatorsync.core.beatmap import BeatmapRef
from spectatorsync.core.mods import HitWindow
from spectatorsync.display import format_time, make_hit_error_bar, render


def _render_text(renderable) -> str:
    console = Console(width=160, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestFormatting:
    def test_format_time(self):
        assert format_time(None) == "--:--.---"
        assert format_time(61_234) == "01:01.234"
        assert format_time(-1500) == "-00:01.500"

    def test_hit_error_bar_without_window(self):
        assert make_hit_error_bar([1.0], None).plain == "no hit window"

    def test_hit_error_bar_marks_offsets(self):
        bar = make_hit_error_bar([0.0, 1000.0], HitWindow(50, 100, 200)).plain
        assert len(bar) == 21
        assert bar[10] == "█"
        assert bar[-1] == "█"


class TestRender:
    def test_render_room(self, room, difficulty):
        room.handle_raw(beatmap_changed("aaa", title="Song", artist="Artist"))
        room.beatmap_ready(BeatmapRef("aaa"), difficulty)
        room.handle_raw({"state": "player_joined", "uid": 1, "username": "rian"})
        room.handle_raw({"state": "mods_changed", "uid": 1, "mods": ["HR"]})
        room.handle_raw(cursor(1, 0, 100, 200, "down"))
        room.handle_raw(object_data(1, 10, "great", 4.0))
        room.handle_raw(stat(1, 0, "score", 1234))
        text = _render_text(render(room, 20))
        assert "rian" in text
        assert "1,234" in text
        assert "great" in text
        assert "HR" in text
        assert "Artist - Song" in text
        assert "#0 (100,200)" in text

    def test_render_without_time(self, room):
        text = _render_text(render(room, None))
        assert "No spectator data yet" in text
        assert "No beatmap is picked in room" in text

"""Terminal spectator view built from room snapshots.

Pure presentation: every builder takes immutable snapshots (or the room's
read-only properties) and returns a rich renderable. Nothing here mutates
the room.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from spectatorsync.core.beatmap import BeatmapStatus
from spectatorsync.core.data_manager import PlayerSnapshot
from spectatorsync.core.events import HitResult
from spectatorsync.core.messages import TeamMode
from spectatorsync.core.mods import HitWindow
from spectatorsync.core.room import RoomPhase, RoomState

BAR_WIDTH = 21

PHASE_STYLES = {
    RoomPhase.EMPTY: "dim",
    RoomPhase.AWAITING_BEATMAP: "yellow",
    RoomPhase.BEATMAP_READY: "cyan",
    RoomPhase.IN_GAMEPLAY: "bold green",
    RoomPhase.GAMEPLAY_ENDED: "bold red",
}

JUDGEMENT_STYLES = {
    HitResult.MISS: "bold red",
    HitResult.MEH: "yellow",
    HitResult.OK: "green",
    HitResult.GOOD: "bold green",
    HitResult.GREAT: "bold cyan",
    HitResult.PERFECT: "bold magenta",
}

STATUS_TEXT = {
    BeatmapStatus.NONE: "No beatmap is picked in room",
    BeatmapStatus.LOADING: "Loading...",
    BeatmapStatus.READY: "",
    BeatmapStatus.NOT_FOUND: "not found in mirror",
}


def format_time(ms: int | None) -> str:
    if ms is None:
        return "--:--.---"
    sign = "-" if ms < 0 else ""
    ms = abs(ms)
    return f"{sign}{ms // 60000:02d}:{(ms // 1000) % 60:02d}.{ms % 1000:03d}"


def format_stat(value: float | None, fmt: str = "{:,.0f}") -> Text:
    if value is None:
        return Text("--", style="dim")
    return Text(fmt.format(value), style="bold")


def format_cursors(snapshot: PlayerSnapshot) -> Text:
    if not snapshot.cursors:
        return Text("no cursor data", style="dim italic")
    text = Text()
    for i, (group_id, pos) in enumerate(sorted(snapshot.cursors.items())):
        if i > 0:
            text.append("  ")
        if pos is None:
            text.append(f"#{group_id} up", style="dim")
        else:
            text.append(f"#{group_id} ({pos.x:.0f},{pos.y:.0f})", style="white")
    return text


def make_hit_error_bar(offsets: list[float], window: HitWindow | None) -> Text:
    """Place recent hit offsets on a -meh..+meh bar."""
    if window is None:
        return Text("no hit window", style="dim italic")
    cells = ["─"] * BAR_WIDTH
    centre = BAR_WIDTH // 2
    cells[centre] = "│"
    bar = Text()
    for offset in offsets:
        clamped = max(-window.meh, min(window.meh, offset))
        idx = centre + round(clamped / window.meh * centre)
        cells[idx] = "█"
    for cell in cells:
        bar.append(cell, style="bold yellow" if cell == "█" else "dim")
    return bar


def build_header(room: RoomState, time: int | None) -> Panel:
    title = Text()
    title.append("ROOM ", style="bold white")
    title.append(room.room_id or "?", style="bold cyan")
    title.append("  |  ", style="dim")
    title.append(room.phase.value.replace("_", " ").upper(), style=PHASE_STYLES[room.phase])
    if room.team_mode is TeamMode.TEAM_VS:
        title.append("  |  TEAM VS", style="bold magenta")

    sub = Text()
    if room.beatmap is None:
        sub.append(STATUS_TEXT[BeatmapStatus.NONE], style="dim italic")
    else:
        sub.append(room.beatmap.display_title, style="bold")
        status = STATUS_TEXT[room.beatmap_status]
        if status:
            sub.append(f" ({status})", style="yellow")
    sub.append("  |  ", style="dim")
    sub.append(format_time(time), style="bold white")

    return Panel(Group(Align.center(title), Align.center(sub)), padding=(0, 1))


def build_players_table(
    room: RoomState,
    snapshots: list[PlayerSnapshot],
    hit_error_window_ms: int = 3000,
) -> Table:
    table = Table(expand=True, border_style="green")
    table.add_column("Player", no_wrap=True)
    table.add_column("Mods", no_wrap=True)
    table.add_column("Score", justify="right")
    table.add_column("Combo", justify="right")
    table.add_column("Acc", justify="right")
    table.add_column("Last", no_wrap=True)
    table.add_column("Hit error", no_wrap=True)
    table.add_column("Cursors")

    if not snapshots:
        table.add_row(Text("No spectator data yet", style="dim italic"))
        return table

    for snap in snapshots:
        last = Text("--", style="dim")
        if snap.last_judgement is not None:
            last = Text(snap.last_judgement.value, style=JUDGEMENT_STYLES[snap.last_judgement])
        offsets = room.hit_errors(snap.uid, snap.time, hit_error_window_ms)
        table.add_row(
            Text(snap.username[:16], style="bold"),
            Text("".join(snap.parameters.mods) or "NM", style="dim"),
            format_stat(snap.score),
            format_stat(snap.combo, "{:,.0f}x"),
            format_stat(snap.accuracy, "{:.2f}%"),
            last,
            make_hit_error_bar(offsets, snap.parameters.hit_window),
            format_cursors(snap),
        )
    return table


def render(room: RoomState, time: int | None, hit_error_window_ms: int = 3000) -> Group:
    snapshots = room.snapshots(time) if time is not None else []
    return Group(
        build_header(room, time),
        build_players_table(room, snapshots, hit_error_window_ms),
    )

"""CLI entry point: python -m spectatorsync <config.yaml>"""

import argparse
import logging
import os
import sys
import time
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler

from spectatorsync.beatmaps import StaticBeatmapProvider
from spectatorsync.config import load_config
from spectatorsync.core.messages import MessageDecoder
from spectatorsync.core.room import RoomState
from spectatorsync.display import render
from spectatorsync.stream import StreamRecorder, tail_jsonl

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "SPECTATORSYNC_LOG_LEVEL"


def _configure_logging(level: str, console: Console) -> None:
    logging.basicConfig(
        level=os.environ.get(LOG_LEVEL_ENV, level).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _build_room(config) -> RoomState:
    provider = StaticBeatmapProvider(config.beatmaps)
    room = RoomState(config.room_id, on_beatmap_request=provider.request)
    provider.attach(room)
    return room


def _feed(
    room: RoomState,
    records: list,
    recorder: StreamRecorder | None,
    decoder: MessageDecoder | None = None,
) -> int:
    """Dispatch records in order. Returns how many were applied.

    Only records that decode are written to the recorder, so a recording
    replays without the malformed lines of the live stream.
    """
    decoder = decoder or MessageDecoder()
    applied = 0
    for record in records:
        result = decoder.decode(record)
        if not result.success:
            logger.warning("Ignoring malformed message: %s", result.error)
            continue
        if room.handle(result.message):
            applied += 1
        if recorder is not None:
            recorder.record(record)
    return applied


def _display_time(room: RoomState) -> int | None:
    playback = room.playback_time()
    if playback is not None:
        return playback
    return room.latest_time


def _run_once(room, stream_path: Path, at_ms: int | None, config, console: Console) -> None:
    records, _ = tail_jsonl(stream_path, 0)
    _feed(room, records, None)
    if at_ms is None:
        at_ms = room.latest_time
    console.print(render(room, at_ms, config.display.hit_error_window_ms))


def _run_follow(room, stream_path: Path, config, recorder, console: Console) -> None:
    file_pos = 0
    window = config.display.hit_error_window_ms

    with Live(render(room, None, window), console=console, refresh_per_second=4, screen=True) as live:
        try:
            while True:
                records, file_pos = tail_jsonl(stream_path, file_pos)
                _feed(room, records, recorder)
                live.update(render(room, _display_time(room), window))
                time.sleep(config.display.refresh_rate_s)
        except KeyboardInterrupt:
            pass

    console.print(render(room, _display_time(room), window))


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="spectatorsync",
        description="Spectate a live multiplayer room from its message stream",
    )
    parser.add_argument(
        "config",
        type=Path,
        help="Path to spectator YAML config file",
    )
    parser.add_argument(
        "-s", "--stream",
        type=Path,
        default=None,
        help="JSONL message stream (default: spectator.stream from config)",
    )
    parser.add_argument(
        "--at",
        type=int,
        default=None,
        metavar="MS",
        help="Print the room as it was at MS milliseconds and exit",
    )
    parser.add_argument(
        "--follow",
        action="store_true",
        default=False,
        help="Keep tailing the stream and redraw live",
    )
    args = parser.parse_args()

    load_dotenv()

    if not args.config.exists():
        print(f"Error: config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    config = load_config(args.config)
    if args.stream:
        config.stream_path = args.stream
    if config.stream_path is None:
        print("Error: no stream given (use --stream or spectator.stream)", file=sys.stderr)
        sys.exit(1)

    console = Console()
    _configure_logging(config.log_level, console)

    room = _build_room(config)
    console.print(f"[bold]Spectating room:[/bold] {config.room_id}")
    console.print(f"[dim]Stream: {config.stream_path}[/dim]")

    try:
        if args.follow:
            recorder = StreamRecorder(config.record_path, config.room_id) if config.record_path else None
            _run_follow(room, config.stream_path, config, recorder, console)
        else:
            _run_once(room, config.stream_path, args.at, config, console)
    finally:
        room.close()


if __name__ == "__main__":
    main()

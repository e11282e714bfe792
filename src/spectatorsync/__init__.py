"""spectatorsync — time-indexed spectator data for live multiplayer rooms."""

__version__ = "0.1.0"

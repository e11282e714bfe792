"""Gameplay parameters derived from mods and beatmap difficulty.

``derive_parameters`` is pure: given the same mods, overrides and
difficulty it always returns the same parameters, regardless of what was
derived before.
"""

from __future__ import annotations

from dataclasses import dataclass

from spectatorsync.core.beatmap import BeatmapDifficulty

HARD_ROCK = "HR"
EASY = "EZ"
PRECISE = "PR"

_MAX_DIFFICULTY = 10.0


@dataclass(frozen=True)
class HitWindow:
    """Maximum absolute hit offsets (ms) for each non-miss judgement."""

    great: float
    good: float
    meh: float

    @classmethod
    def for_od(cls, od: float, precise: bool = False) -> HitWindow:
        if precise:
            return cls(
                great=55 + 6 * (5 - od),
                good=120 + 8 * (5 - od),
                meh=180 + 10 * (5 - od),
            )
        return cls(
            great=75 + 5 * (5 - od),
            good=150 + 10 * (5 - od),
            meh=250 + 10 * (5 - od),
        )


@dataclass(frozen=True)
class GameplayParameters:
    mods: tuple[str, ...] = ()
    hit_window: HitWindow | None = None
    od: float | None = None
    cs: float | None = None
    ar: float | None = None
    flip_y: bool = False
    precise: bool = False


def normalize_mods(mods) -> tuple[str, ...]:
    """Upper-case, de-duplicated acronyms in first-seen order."""
    seen: list[str] = []
    for mod in mods:
        acronym = str(mod).strip().upper()
        if acronym and acronym not in seen:
            seen.append(acronym)
    return tuple(seen)


def _scale(value: float, factor: float) -> float:
    return min(value * factor, _MAX_DIFFICULTY)


def derive_parameters(
    mods,
    difficulty: BeatmapDifficulty | None = None,
    force_cs: float | None = None,
    force_ar: float | None = None,
) -> GameplayParameters:
    acronyms = normalize_mods(mods)
    hard_rock = HARD_ROCK in acronyms
    easy = EASY in acronyms
    precise = PRECISE in acronyms

    od = cs = ar = None
    if difficulty is not None:
        od, cs, ar = difficulty.od, difficulty.cs, difficulty.ar
        if hard_rock:
            od, cs, ar = _scale(od, 1.4), _scale(cs, 1.3), _scale(ar, 1.4)
        if easy:
            od, cs, ar = od / 2, cs / 2, ar / 2

    # Room overrides win over both the beatmap and the mods.
    if force_cs is not None:
        cs = force_cs
    if force_ar is not None:
        ar = force_ar

    return GameplayParameters(
        mods=acronyms,
        hit_window=HitWindow.for_od(od, precise) if od is not None else None,
        od=od,
        cs=cs,
        ar=ar,
        flip_y=hard_rock,
        precise=precise,
    )

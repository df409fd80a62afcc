"""Symbolic stage positions <-> normalized coordinates.

Every symbolic position has a coordinate and every coordinate has a zone, so all
functions here are total and never raise.
"""
from __future__ import annotations

from enum import Enum
from typing import Union

from beatstage.beat import geometry
from beatstage.beat.geometry import Position, PositionZone, StagePosition, classify

__all__ = [
    "SymbolicPosition",
    "classify",
    "resolve",
    "resolve_stage",
    "to_coordinate",
    "nearest_symbolic",
    "describe",
    "zone_of",
]


class SymbolicPosition(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    LEFT_FRONT = "left-front"
    CENTER_FRONT = "center-front"
    RIGHT_FRONT = "right-front"
    LEFT_BACK = "left-back"
    CENTER_BACK = "center-back"
    RIGHT_BACK = "right-back"
    OFF_STAGE_LEFT = "off-stage-left"
    OFF_STAGE_RIGHT = "off-stage-right"


# Playback table: y=0.5 is the stage line, front/back step 0.1 down/upstage.
_POSITIONS: dict[SymbolicPosition, Position] = {
    SymbolicPosition.LEFT: geometry.LEFT,
    SymbolicPosition.CENTER: geometry.CENTER,
    SymbolicPosition.RIGHT: geometry.RIGHT,
    SymbolicPosition.LEFT_FRONT: geometry.LEFT_FRONT,
    SymbolicPosition.CENTER_FRONT: geometry.CENTER_FRONT,
    SymbolicPosition.RIGHT_FRONT: geometry.RIGHT_FRONT,
    SymbolicPosition.LEFT_BACK: geometry.LEFT_BACK,
    SymbolicPosition.CENTER_BACK: geometry.CENTER_BACK,
    SymbolicPosition.RIGHT_BACK: geometry.RIGHT_BACK,
    SymbolicPosition.OFF_STAGE_LEFT: geometry.OFF_STAGE_LEFT,
    SymbolicPosition.OFF_STAGE_RIGHT: geometry.OFF_STAGE_RIGHT,
}

# Editor table: the authoring canvas puts the stage line lower, at y=0.6.
_STAGE_POSITIONS: dict[SymbolicPosition, StagePosition] = {
    SymbolicPosition.LEFT: StagePosition(x=0.15, y=0.6),
    SymbolicPosition.CENTER: StagePosition(x=0.5, y=0.6),
    SymbolicPosition.RIGHT: StagePosition(x=0.85, y=0.6),
    SymbolicPosition.LEFT_FRONT: StagePosition(x=0.25, y=0.7),
    SymbolicPosition.CENTER_FRONT: StagePosition(x=0.5, y=0.7),
    SymbolicPosition.RIGHT_FRONT: StagePosition(x=0.75, y=0.7),
    SymbolicPosition.LEFT_BACK: StagePosition(x=0.25, y=0.5),
    SymbolicPosition.CENTER_BACK: StagePosition(x=0.5, y=0.5),
    SymbolicPosition.RIGHT_BACK: StagePosition(x=0.75, y=0.5),
    SymbolicPosition.OFF_STAGE_LEFT: StagePosition(x=-0.1, y=0.6),
    SymbolicPosition.OFF_STAGE_RIGHT: StagePosition(x=1.1, y=0.6),
}

_OFF_STAGE = (SymbolicPosition.OFF_STAGE_LEFT, SymbolicPosition.OFF_STAGE_RIGHT)


def resolve(symbolic: Union[SymbolicPosition, str]) -> Position:
    """Playback coordinate for a symbolic position ("center-front" -> (0.5, 0.6))."""
    return _POSITIONS[SymbolicPosition(symbolic)]


def resolve_stage(symbolic: Union[SymbolicPosition, str]) -> StagePosition:
    """Editor coordinate for a symbolic position."""
    return _STAGE_POSITIONS[SymbolicPosition(symbolic)]


def to_coordinate(
    position: Union[Position, StagePosition],
    stage_width: float,
    stage_height: float,
) -> tuple[float, float]:
    """Scale a normalized position to stage units."""
    return (stage_width * position.x, stage_height * position.y)


def nearest_symbolic(x: float, y: float) -> SymbolicPosition:
    """Closest named playback position to (x, y), for display.

    Coordinates outside [0, 1] on x are always reported as off-stage.
    """
    if x < 0.0:
        return SymbolicPosition.OFF_STAGE_LEFT
    if x > 1.0:
        return SymbolicPosition.OFF_STAGE_RIGHT

    best = SymbolicPosition.CENTER
    best_dist = float("inf")
    for symbolic, position in _POSITIONS.items():
        if symbolic in _OFF_STAGE:
            continue
        dist = (position.x - x) ** 2 + (position.y - y) ** 2
        if dist < best_dist:
            best_dist = dist
            best = symbolic
    return best


def describe(x: float, y: float) -> str:
    """Short display label, e.g. "center-front (50%, 60%)"."""
    return f"{nearest_symbolic(x, y).value} ({round(x * 100)}%, {round(y * 100)}%)"


def zone_of(position: Union[Position, StagePosition]) -> PositionZone:
    return classify(position.x)

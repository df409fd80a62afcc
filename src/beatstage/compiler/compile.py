"""Beat -> SceneState compilation and order-preserving sequence compilation.

compile_beat is total over valid Beat values: empty character or dialogue lists
compile to an empty scene, and a line whose speaker is not on stage still renders
at the fallback bubble position without a speaker name.

Timing precondition: durations and delays are non-negative (the Beat model
enforces this on construction); nothing here re-checks them.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

from beatstage.beat import geometry
from beatstage.beat.geometry import AnimationType, Direction, MovementType, Position
from beatstage.beat.positions import to_coordinate
from beatstage.beat.schema import Beat, CharacterAction, DialogueAction
from beatstage.characters import CharacterVoice
from beatstage.compiler.resources import (
    ResourceResolver,
    SymbolicResolver,
    background_name,
    resolve_handle,
    sprite_name,
)
from beatstage.compiler.scene import (
    CharacterState,
    DialogueState,
    SceneState,
    StagePoint,
    TheaterScript,
)
from beatstage.config import BUBBLE_OFFSET, FALLBACK_BUBBLE_POSITION, get_stage_size

logger = logging.getLogger(__name__)

EXIT_ALPHA = 0.3


def display_position(action: CharacterAction) -> Position:
    """STAY shows the origin; every other movement shows the destination."""
    movement = action.movement
    if movement.type == MovementType.STAY:
        return movement.from_ if movement.from_ is not None else geometry.CENTER
    if movement.type == MovementType.EXIT:
        return movement.to if movement.to is not None else geometry.OFF_STAGE_RIGHT
    return movement.to if movement.to is not None else geometry.CENTER


def select_animation(action: CharacterAction) -> AnimationType:
    """gesture > walking (ENTER / MOVE) > emotion idle."""
    if action.gesture is not None:
        gesture_animation = action.gesture.type.to_animation()
        if gesture_animation is not None:
            return gesture_animation
    if action.movement.type in (MovementType.ENTER, MovementType.MOVE):
        return AnimationType.WALKING
    return action.emotion.type.to_animation(speaking=False)


def compile_character(
    action: CharacterAction,
    stage_size: tuple[float, float],
    resolver: ResourceResolver,
) -> CharacterState:
    x, y = to_coordinate(display_position(action), *stage_size)
    return CharacterState(
        id=action.character_id,
        name=action.character_name,
        gender=action.gender,
        image_res=resolve_handle(resolver, sprite_name(action.gender)),
        position=StagePoint(x=x, y=y),
        alpha=EXIT_ALPHA if action.movement.type == MovementType.EXIT else 1.0,
        flip_x=action.facing_direction == Direction.LEFT,
        animation=select_animation(action),
        animation_duration=action.movement.speed.to_millis(),
        voice=action.voice if action.voice is not None else CharacterVoice(),
    )


def compile_dialogue(line: DialogueAction, characters: list[CharacterState]) -> DialogueState:
    speaker = next((c for c in characters if c.id == line.character_id), None)
    if speaker is None:
        logger.debug("dialogue %s: speaker %r not on stage", line.id, line.character_id)
        position = StagePoint(x=FALLBACK_BUBBLE_POSITION[0], y=FALLBACK_BUBBLE_POSITION[1])
    else:
        position = StagePoint(
            x=speaker.position.x + BUBBLE_OFFSET[0],
            y=speaker.position.y + BUBBLE_OFFSET[1],
        )
    return DialogueState(
        text=line.text,
        position=position,
        speaker_name=speaker.name if speaker is not None else None,
        delay_millis=int(line.delay * 1000),
        typing_speed_ms=line.typing_speed,
        voice=speaker.voice if speaker is not None else None,
    )


def compile_beat(
    beat: Beat,
    resolver: Optional[ResourceResolver] = None,
    stage_size: Optional[tuple[float, float]] = None,
) -> SceneState:
    """Flatten one Beat into a SceneState with absolute positions and ms timing."""
    resolver = resolver if resolver is not None else SymbolicResolver()
    stage_size = stage_size if stage_size is not None else get_stage_size()

    characters = [compile_character(a, stage_size, resolver) for a in beat.layers.characters]
    dialogues = [compile_dialogue(d, characters) for d in beat.layers.dialogues]

    return SceneState(
        background_res=resolve_handle(resolver, background_name(beat.layers.background)),
        characters=characters,
        dialogues=dialogues,
        duration_millis=int(beat.duration * 1000),
        is_ending=False,
    )


def compile_sequence(
    beats: Iterable[Beat],
    resolver: Optional[ResourceResolver] = None,
    stage_size: Optional[tuple[float, float]] = None,
    max_workers: Optional[int] = None,
    debug: bool = False,
) -> TheaterScript:
    """Compile beats into a TheaterScript whose scene order matches input order.

    Beats are independent, so with max_workers > 1 they compile on a thread pool;
    Executor.map keeps results in input order.
    """
    beats = list(beats)
    stage_size = stage_size if stage_size is not None else get_stage_size()

    def _compile(beat: Beat) -> SceneState:
        return compile_beat(beat, resolver=resolver, stage_size=stage_size)

    if max_workers is not None and max_workers > 1 and len(beats) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            scenes = list(pool.map(_compile, beats))
    else:
        scenes = [_compile(b) for b in beats]

    logger.debug("compiled %d beats into %d scenes", len(beats), len(scenes))
    return TheaterScript(scenes=scenes, debug=debug)

"""Reconciliation between LayeredBeat (four independent layers) and classic Beat.

to_classic_beat collapses the layers into one CharacterAction per involved
character; from_classic_beat is its best-effort inverse used to re-enter edit mode.
The round trip is lossy by construction: per character only one movement, one
emotion and one gesture survive.

Both directions are pure: inputs are never mutated and every output is a fresh
value built only from the inputs and the read-only character directory.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from beatstage.beat import geometry
from beatstage.beat.geometry import Direction, EmotionType, MovementType, Position, Speed, StagePosition
from beatstage.beat.layered import (
    ActionEntry,
    ActionLayer,
    DialogueActionType,
    DialogueEmotion,
    DialogueEntry,
    DialogueLayer,
    LayeredBeat,
    LocationLayer,
    MovementEntry,
    MovementLayer,
    StageActionType,
    StageLocation,
)
from beatstage.beat.schema import (
    BackgroundLayer,
    BackgroundType,
    Beat,
    BeatLayers,
    CharacterAction,
    DialogueAction,
    Emotion,
    Gesture,
    Movement,
)
from beatstage.characters import CharacterInfo, CharacterLookup, as_directory
from beatstage.config import DEFAULT_TYPING_SPEED_MS
from beatstage.errors import UnknownCharacterError
from beatstage.reconcile.duration import effective_duration

logger = logging.getLogger(__name__)

# Placement cycle for characters the movement layer never places.
DEFAULT_PLACEMENTS: tuple[Position, ...] = (geometry.LEFT, geometry.CENTER, geometry.RIGHT)

RECONCILED_INTENSITY = 0.7
RECONCILED_DESCRIPTION = "Layered beat"
UNKNOWN_SPEAKER = "Unknown"

# Fraction of the beat after which a classic EXIT starts walking off.
EXIT_START_FRACTION = 0.7
EXIT_SECONDS = 1.0
ENTER_SECONDS = 1.0

Characters = Union[CharacterLookup, Iterable[CharacterInfo]]


def involved_character_ids(beat: LayeredBeat) -> list[str]:
    """Ids referenced by the dialogue, action and movement layers, first appearance first."""
    ids: dict[str, None] = {}
    for entry in beat.dialogue_layer.dialogues:
        ids.setdefault(entry.character_id, None)
    for action in beat.action_layer.actions:
        ids.setdefault(action.character_id, None)
    for movement in beat.movement_layer.movements:
        ids.setdefault(movement.character_id, None)
    return list(ids)


def _derive_movement(entries: list[MovementEntry], default: Position) -> Movement:
    if not entries:
        return Movement(type=MovementType.STAY, from_=default, to=default, speed=Speed.NORMAL)
    if len(entries) == 1:
        here = entries[0].to_position.to_position()
        return Movement(type=MovementType.STAY, from_=here, to=here, speed=Speed.NORMAL)
    first, last = entries[0], entries[-1]
    start = first.from_position.to_position() if first.from_position is not None else None
    return Movement(
        type=MovementType.MOVE,
        from_=start,
        to=last.to_position.to_position(),
        speed=Speed.NORMAL,
    )


def _derive_facing(entries: list[MovementEntry]) -> Direction:
    if len(entries) < 2:
        return Direction.CENTER
    start_x = entries[0].start_position.x
    target_x = entries[1].to_position.x
    if target_x > start_x:
        return Direction.RIGHT
    if target_x < start_x:
        return Direction.LEFT
    return Direction.CENTER


def _derive_gesture(
    dialogues: list[DialogueEntry],
    actions: list[ActionEntry],
) -> Optional[Gesture]:
    """The first line's action beats a standalone action-layer gesture.

    Only the first line counts; later lines never contribute a gesture.
    """
    first_action = dialogues[0].action if dialogues else None
    if first_action is not None and first_action != DialogueActionType.NONE:
        gesture_type = first_action.to_gesture_type()
        return Gesture(type=gesture_type) if gesture_type is not None else None
    if actions:
        gesture_type = actions[0].action_type.to_gesture_type()
        return Gesture(type=gesture_type) if gesture_type is not None else None
    return None


def to_classic_beat(
    layered_beat: LayeredBeat,
    characters: Characters,
    strict: bool = False,
) -> Beat:
    """Reconcile a LayeredBeat into a classic Beat.

    1. Duration is the authored one, else estimated from the layers.
    2. Involved ids are collected from all layers; ids missing from the directory
       are dropped (or, with strict=True, reported via UnknownCharacterError).
    3. Each involved character gets one Movement:
         no entries   -> STAY at LEFT / CENTER / RIGHT by involved index mod 3
         one entry    -> STAY at that entry's target
         two or more  -> MOVE from the first entry's explicit start to the last target
    4. Emotion comes from the character's first line (layer order), else NEUTRAL.
    5. An action on the character's first line overrides an action-layer gesture.
    6. Facing compares entry[1]'s target x with entry[0]'s start x.
    7. Dialogue entries map 1:1 to DialogueActions at 50 ms typing speed.
    8. Background is always the stage floor; location is not carried over.
    """
    directory = as_directory(characters)
    duration = effective_duration(layered_beat)

    # Placement index is the position among all involved ids, dropped ones included.
    resolved: list[tuple[int, CharacterInfo]] = []
    unknown: list[str] = []
    for index, character_id in enumerate(involved_character_ids(layered_beat)):
        info = directory.lookup(character_id)
        if info is None:
            unknown.append(character_id)
        else:
            resolved.append((index, info))

    if unknown:
        if strict:
            raise UnknownCharacterError(layered_beat.id, unknown)
        logger.debug("beat %s: dropping unresolved characters %s", layered_beat.id, unknown)

    dialogues = layered_beat.dialogue_layer.dialogues
    actions = layered_beat.action_layer.actions
    movements = sorted(layered_beat.movement_layer.movements, key=lambda m: m.start_time)

    character_actions: list[CharacterAction] = []
    for index, info in resolved:
        own_dialogues = [d for d in dialogues if d.character_id == info.id]
        own_actions = [a for a in actions if a.character_id == info.id]
        own_movements = [m for m in movements if m.character_id == info.id]

        default = DEFAULT_PLACEMENTS[index % len(DEFAULT_PLACEMENTS)]
        emotion = own_dialogues[0].emotion.to_emotion_type() if own_dialogues else EmotionType.NEUTRAL

        character_actions.append(CharacterAction(
            character_id=info.id,
            character_name=info.name,
            gender=info.gender,
            movement=_derive_movement(own_movements, default),
            emotion=Emotion(type=emotion, intensity=RECONCILED_INTENSITY),
            gesture=_derive_gesture(own_dialogues, own_actions),
            facing_direction=_derive_facing(own_movements),
        ))

    dialogue_actions = [
        DialogueAction(
            id=entry.id,
            character_id=entry.character_id,
            text=entry.text,
            emotion=entry.emotion.to_emotion_type(),
            delay=entry.start_time,
            typing_speed=DEFAULT_TYPING_SPEED_MS,
        )
        for entry in dialogues
    ]

    return Beat(
        id=layered_beat.id,
        name=layered_beat.name,
        description=RECONCILED_DESCRIPTION,
        duration=duration,
        layers=BeatLayers(
            characters=character_actions,
            background=BackgroundLayer(type=BackgroundType.STAGE_FLOOR),
            dialogues=dialogue_actions,
        ),
    )


def to_classic_beats(
    layered_beats: Iterable[LayeredBeat],
    characters: Characters,
    strict: bool = False,
) -> list[Beat]:
    directory = as_directory(characters)
    return [to_classic_beat(b, directory, strict=strict) for b in layered_beats]


def _movement_entries(action: CharacterAction, beat: Beat) -> list[MovementEntry]:
    movement = action.movement
    origin = StagePosition.from_position(movement.from_) if movement.from_ is not None else None
    target = StagePosition.from_position(movement.to) if movement.to is not None else None
    entry_id = f"{beat.id}:{action.character_id}:movement"

    if movement.type == MovementType.STAY:
        if origin is None:
            return []
        return [MovementEntry(
            id=entry_id,
            character_id=action.character_id,
            to_position=origin,
            start_time=0.0,
            end_time=0.0,
            auto_walk=False,
        )]

    if movement.type in (MovementType.MOVE, MovementType.APPROACH, MovementType.RETREAT):
        if target is None and origin is None:
            return []
        return [MovementEntry(
            id=entry_id,
            character_id=action.character_id,
            from_position=origin if target is not None else None,
            to_position=target if target is not None else origin,
            start_time=0.0,
            end_time=beat.duration / 2,
            auto_walk=True,
        )]

    if movement.type == MovementType.ENTER:
        if target is None:
            return []
        return [MovementEntry(
            id=entry_id,
            character_id=action.character_id,
            to_position=target,
            start_time=0.0,
            end_time=ENTER_SECONDS,
            auto_walk=True,
        )]

    # EXIT: walk off during the last stretch of the beat.
    exit_to = target if target is not None else origin
    if exit_to is None:
        return []
    start = beat.duration * EXIT_START_FRACTION
    return [MovementEntry(
        id=entry_id,
        character_id=action.character_id,
        from_position=origin if target is not None else None,
        to_position=exit_to,
        start_time=start,
        end_time=start + EXIT_SECONDS,
        auto_walk=True,
    )]


def from_classic_beat(beat: Beat, characters: Characters) -> LayeredBeat:
    """Best-effort inverse of to_classic_beat, for editing compiled or templated beats.

    Dialogue entries never carry an action: classic beats fold dialogue actions into
    the character's gesture, which comes back as an action-layer entry instead.
    """
    directory = as_directory(characters)

    dialogues = []
    for line in beat.layers.dialogues:
        info = directory.lookup(line.character_id)
        dialogues.append(DialogueEntry(
            id=line.id,
            character_id=line.character_id,
            character_name=info.name if info is not None else UNKNOWN_SPEAKER,
            text=line.text,
            emotion=DialogueEmotion.from_emotion_type(line.emotion),
            start_time=line.delay,
            action=None,
        ))

    movements: list[MovementEntry] = []
    actions: list[ActionEntry] = []
    for action in beat.layers.characters:
        movements.extend(_movement_entries(action, beat))
        if action.gesture is not None:
            actions.append(ActionEntry(
                id=f"{beat.id}:{action.character_id}:action",
                character_id=action.character_id,
                action_type=StageActionType.from_gesture_type(action.gesture.type),
            ))

    return LayeredBeat(
        id=beat.id,
        name=beat.name,
        duration=beat.duration,
        location_layer=LocationLayer(location=StageLocation.STAGE_FLOOR),
        dialogue_layer=DialogueLayer(dialogues=dialogues),
        action_layer=ActionLayer(actions=actions),
        movement_layer=MovementLayer(movements=movements),
    )


def from_classic_beats(beats: Iterable[Beat], characters: Characters) -> list[LayeredBeat]:
    directory = as_directory(characters)
    return [from_classic_beat(b, directory) for b in beats]

"""Pure edit operations on LayeredBeat. Each returns a new beat; none mutate."""
from __future__ import annotations

from typing import Optional

from beatstage.beat.geometry import StagePosition
from beatstage.beat.layered import (
    ActionEntry,
    DialogueActionType,
    DialogueEmotion,
    DialogueEntry,
    LayeredBeat,
    MovementEntry,
    StageActionType,
    StageLocation,
)
from beatstage.characters import CharacterInfo
from beatstage.reconcile.duration import estimate

# Materializing (no known start) still occupies a beat slot of this length.
MATERIALIZE_SECONDS = 1.0


def next_dialogue_start(beat: LayeredBeat) -> float:
    """Start time for a line appended after every existing line has played."""
    return sum(d.playback_duration for d in beat.dialogue_layer.dialogues)


def append_dialogue(
    beat: LayeredBeat,
    character: CharacterInfo,
    text: str,
    emotion: DialogueEmotion = DialogueEmotion.CALM,
    action: Optional[DialogueActionType] = None,
    dialogue_id: Optional[str] = None,
) -> LayeredBeat:
    fields = dict(
        character_id=character.id,
        character_name=character.name,
        text=text,
        emotion=emotion,
        start_time=next_dialogue_start(beat),
        action=action,
    )
    if dialogue_id is not None:
        fields["id"] = dialogue_id
    entry = DialogueEntry(**fields)
    layer = beat.dialogue_layer.model_copy(
        update={"dialogues": [*beat.dialogue_layer.dialogues, entry]}
    )
    return beat.model_copy(update={"dialogue_layer": layer})


def remove_dialogue(beat: LayeredBeat, dialogue_id: str) -> LayeredBeat:
    """Drop one line and re-time the rest back to back from zero, in start order."""
    remaining = sorted(
        (d for d in beat.dialogue_layer.dialogues if d.id != dialogue_id),
        key=lambda d: d.start_time,
    )
    retimed: list[DialogueEntry] = []
    cursor = 0.0
    for entry in remaining:
        retimed.append(entry.model_copy(update={"start_time": cursor}))
        cursor += entry.playback_duration
    layer = beat.dialogue_layer.model_copy(update={"dialogues": retimed})
    return beat.model_copy(update={"dialogue_layer": layer})


def _last_position(beat: LayeredBeat, character_id: str) -> Optional[StagePosition]:
    own = [m for m in beat.movement_layer.movements if m.character_id == character_id]
    if not own:
        return None
    return max(own, key=lambda m: m.end_time).to_position


def add_movement(
    beat: LayeredBeat,
    character_id: str,
    to: StagePosition,
    start_time: float = 0.0,
    from_: Optional[StagePosition] = None,
    movement_id: Optional[str] = None,
) -> LayeredBeat:
    """Append a movement whose end time follows from the walking distance.

    The walk starts at from_, else where the character last stood. With neither the
    character materializes at `to` instead of walking.
    """
    fields = dict(
        character_id=character_id,
        from_position=from_,
        to_position=to,
        start_time=start_time,
        end_time=start_time + MATERIALIZE_SECONDS,
        auto_walk=False,
    )
    if movement_id is not None:
        fields["id"] = movement_id
    entry = MovementEntry(**fields)

    previous = _last_position(beat, character_id)
    if from_ is not None or previous is not None:
        origin = entry.actual_from(previous)
        entry = entry.model_copy(update={
            "from_position": origin,
            "end_time": start_time + origin.walk_duration_to(to),
            "auto_walk": True,
        })

    layer = beat.movement_layer.model_copy(
        update={"movements": [*beat.movement_layer.movements, entry]}
    )
    return beat.model_copy(update={"movement_layer": layer})


def add_action(
    beat: LayeredBeat,
    character_id: str,
    action_type: StageActionType,
    start_time: float = 0.0,
    linked_dialogue_id: Optional[str] = None,
) -> LayeredBeat:
    entry = ActionEntry(
        character_id=character_id,
        action_type=action_type,
        start_time=start_time,
        linked_dialogue_id=linked_dialogue_id,
    )
    layer = beat.action_layer.model_copy(
        update={"actions": [*beat.action_layer.actions, entry]}
    )
    return beat.model_copy(update={"action_layer": layer})


def set_location(beat: LayeredBeat, location: StageLocation) -> LayeredBeat:
    layer = beat.location_layer.model_copy(update={"location": location})
    return beat.model_copy(update={"location_layer": layer})


def with_computed_duration(beat: LayeredBeat) -> LayeredBeat:
    return beat.model_copy(update={"duration": estimate(beat)})

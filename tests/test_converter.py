"""Tests for LayeredBeat <-> Beat reconciliation."""
import logging

import pytest

from beatstage.beat import geometry
from beatstage.beat.geometry import Direction, EmotionType, GestureType, MovementType, StagePosition
from beatstage.beat.layered import (
    ActionEntry,
    ActionLayer,
    DialogueActionType,
    DialogueEmotion,
    DialogueEntry,
    DialogueLayer,
    LayeredBeat,
    MovementEntry,
    MovementLayer,
    StageActionType,
)
from beatstage.beat.schema import BackgroundType, Beat, BeatLayers, CharacterAction, Emotion, Gesture, Movement
from beatstage.beat.templates import first_meeting
from beatstage.characters import CharacterDirectory, CharacterInfo, Gender
from beatstage.errors import UnknownCharacterError
from beatstage.reconcile.converter import (
    from_classic_beat,
    from_classic_beats,
    involved_character_ids,
    to_classic_beat,
    to_classic_beats,
)

ALICE = CharacterInfo(id="a", name="Alice", gender=Gender.FEMALE)
BOB = CharacterInfo(id="b", name="Bob", gender=Gender.MALE)
CAROL = CharacterInfo(id="c", name="Carol", gender=Gender.FEMALE)
DAVE = CharacterInfo(id="d", name="Dave", gender=Gender.MALE)
CAST = [ALICE, BOB, CAROL, DAVE]


def _line(cid: str, text: str = "Hello", start: float = 0.0, **kw) -> DialogueEntry:
    return DialogueEntry(character_id=cid, character_name=cid.upper(), text=text, start_time=start, **kw)


def _layered(dialogues=(), actions=(), movements=(), duration=None) -> LayeredBeat:
    return LayeredBeat(
        id="lb1",
        name="Layered",
        duration=duration,
        dialogue_layer=DialogueLayer(dialogues=list(dialogues)),
        action_layer=ActionLayer(actions=list(actions)),
        movement_layer=MovementLayer(movements=list(movements)),
    )


def _by_id(beat: Beat) -> dict[str, CharacterAction]:
    return {c.character_id: c for c in beat.layers.characters}


class TestInvolvedCharacters:
    def test_first_appearance_order_across_layers(self):
        beat = _layered(
            dialogues=[_line("b"), _line("a"), _line("b")],
            actions=[ActionEntry(character_id="c", action_type=StageActionType.CLAP)],
            movements=[MovementEntry(character_id="a", to_position=StagePosition(x=0.5, y=0.6))],
        )
        assert involved_character_ids(beat) == ["b", "a", "c"]


class TestToClassic:
    def test_default_placement_cycles_left_center_right(self):
        beat = _layered(dialogues=[_line(c.id) for c in CAST])
        classic = to_classic_beat(beat, CAST)
        placed = [c.movement.from_ for c in classic.layers.characters]
        assert placed == [geometry.LEFT, geometry.CENTER, geometry.RIGHT, geometry.LEFT]
        assert all(c.movement.type == MovementType.STAY for c in classic.layers.characters)

    def test_single_entry_stays_at_target(self):
        target = StagePosition(x=0.75, y=0.7)
        beat = _layered(movements=[MovementEntry(character_id="a", to_position=target)])
        action = to_classic_beat(beat, CAST).layers.characters[0]
        assert action.movement.type == MovementType.STAY
        assert action.movement.from_ == target.to_position()
        assert action.facing_direction == Direction.CENTER

    def test_multiple_entries_become_move(self):
        beat = _layered(movements=[
            MovementEntry(
                character_id="a",
                from_position=StagePosition(x=0.15, y=0.6),
                to_position=StagePosition(x=0.5, y=0.6),
                start_time=0.0,
                end_time=1.0,
            ),
            MovementEntry(
                character_id="a",
                to_position=StagePosition(x=0.85, y=0.6),
                start_time=1.0,
                end_time=2.0,
            ),
        ])
        action = to_classic_beat(beat, CAST).layers.characters[0]
        assert action.movement.type == MovementType.MOVE
        assert action.movement.from_ == geometry.Position(x=0.15, y=0.6)
        assert action.movement.to == geometry.Position(x=0.85, y=0.6)
        assert action.facing_direction == Direction.RIGHT

    def test_movements_are_ordered_by_start_time(self):
        later = MovementEntry(character_id="a", to_position=StagePosition(x=0.1, y=0.6), start_time=2.0, end_time=3.0)
        earlier = MovementEntry(character_id="a", to_position=StagePosition(x=0.9, y=0.6), start_time=0.0, end_time=1.0)
        action = to_classic_beat(_layered(movements=[later, earlier]), CAST).layers.characters[0]
        assert action.movement.to == geometry.Position(x=0.1, y=0.6)
        assert action.movement.from_ is None
        assert action.facing_direction == Direction.LEFT

    def test_emotion_from_first_line(self):
        beat = _layered(dialogues=[
            _line("a", emotion=DialogueEmotion.FEARFUL),
            _line("a", start=2.0, emotion=DialogueEmotion.HAPPY),
        ])
        action = to_classic_beat(beat, CAST).layers.characters[0]
        assert action.emotion.type == EmotionType.SCARED
        assert action.emotion.intensity == 0.7

    def test_no_lines_is_neutral(self):
        beat = _layered(actions=[ActionEntry(character_id="a", action_type=StageActionType.WAVE)])
        assert to_classic_beat(beat, CAST).layers.characters[0].emotion.type == EmotionType.NEUTRAL

    def test_dialogue_gesture_overrides_action_layer(self):
        beat = _layered(
            dialogues=[_line("a", action=DialogueActionType.CLAP)],
            actions=[ActionEntry(character_id="a", action_type=StageActionType.WAVE)],
        )
        action = to_classic_beat(beat, CAST).layers.characters[0]
        assert action.gesture == Gesture(type=GestureType.CLAP)

    def test_none_dialogue_action_falls_through_to_action_layer(self):
        beat = _layered(
            dialogues=[_line("a", action=DialogueActionType.NONE)],
            actions=[ActionEntry(character_id="a", action_type=StageActionType.DANCING)],
        )
        assert to_classic_beat(beat, CAST).layers.characters[0].gesture.type == GestureType.DANCE

    def test_unmapped_dialogue_action_means_no_gesture(self):
        beat = _layered(
            dialogues=[_line("a", action=DialogueActionType.NOD)],
            actions=[ActionEntry(character_id="a", action_type=StageActionType.WAVE)],
        )
        assert to_classic_beat(beat, CAST).layers.characters[0].gesture is None

    def test_only_first_line_carries_gesture(self):
        beat = _layered(
            dialogues=[_line("a"), _line("a", start=2.0, action=DialogueActionType.CLAP)],
            actions=[ActionEntry(character_id="a", action_type=StageActionType.DANCING)],
        )
        assert to_classic_beat(beat, CAST).layers.characters[0].gesture == Gesture(type=GestureType.DANCE)

    def test_later_line_gesture_ignored_without_action_layer(self):
        beat = _layered(dialogues=[_line("a"), _line("a", start=2.0, action=DialogueActionType.WAVE)])
        assert to_classic_beat(beat, CAST).layers.characters[0].gesture is None

    def test_jump_has_no_gesture(self):
        beat = _layered(actions=[ActionEntry(character_id="a", action_type=StageActionType.JUMP)])
        assert to_classic_beat(beat, CAST).layers.characters[0].gesture is None

    def test_dialogues_map_one_to_one(self):
        beat = _layered(dialogues=[
            _line("a", "First", 0.5, id="d1"),
            _line("b", "Second", 2.0, id="d2", emotion=DialogueEmotion.CALM),
        ])
        classic = to_classic_beat(beat, CAST)
        assert [(d.id, d.text, d.delay) for d in classic.layers.dialogues] == [
            ("d1", "First", 0.5),
            ("d2", "Second", 2.0),
        ]
        assert classic.layers.dialogues[1].emotion == EmotionType.NEUTRAL
        assert all(d.typing_speed == 50 for d in classic.layers.dialogues)

    def test_beat_level_fields(self):
        classic = to_classic_beat(_layered(dialogues=[_line("a")], duration=4.5), CAST)
        assert classic.id == "lb1"
        assert classic.name == "Layered"
        assert classic.description == "Layered beat"
        assert classic.duration == 4.5
        assert classic.layers.background.type == BackgroundType.STAGE_FLOOR

    def test_duration_estimated_when_absent(self):
        classic = to_classic_beat(_layered(dialogues=[_line("a", "x" * 40, 1.0)]), CAST)
        assert classic.duration == pytest.approx(7.0)

    def test_unknown_character_dropped_silently(self):
        beat = _layered(dialogues=[_line("ghost"), _line("a")])
        classic = to_classic_beat(beat, CAST)
        assert list(_by_id(classic)) == ["a"]
        assert len(classic.layers.dialogues) == 2

    def test_unknown_character_logged_at_debug(self, caplog):
        beat = _layered(dialogues=[_line("ghost")])
        with caplog.at_level(logging.DEBUG, logger="beatstage"):
            to_classic_beat(beat, CAST)
        assert "ghost" in caplog.text

    def test_placement_index_counts_dropped_characters(self):
        beat = _layered(dialogues=[_line("ghost"), _line("a"), _line("b")])
        placed = [c.movement.from_ for c in to_classic_beat(beat, CAST).layers.characters]
        assert placed == [geometry.CENTER, geometry.RIGHT]

    def test_strict_raises_for_unknown(self):
        beat = _layered(dialogues=[_line("ghost"), _line("a"), _line("phantom")])
        with pytest.raises(UnknownCharacterError) as exc_info:
            to_classic_beat(beat, CAST, strict=True)
        assert exc_info.value.character_ids == ["ghost", "phantom"]
        assert exc_info.value.beat_id == "lb1"

    def test_input_not_mutated(self):
        beat = _layered(dialogues=[_line("a")])
        snapshot = beat.model_dump()
        to_classic_beat(beat, CAST)
        assert beat.model_dump() == snapshot

    def test_accepts_directory_object(self):
        directory = CharacterDirectory(CAST)
        beats = to_classic_beats([_layered(dialogues=[_line("b")])], directory)
        assert beats[0].layers.characters[0].character_name == "Bob"


class TestFromClassic:
    def test_first_meeting_back_to_layered(self):
        layered = from_classic_beat(first_meeting("beat-1", ALICE, BOB), CAST)
        assert layered.duration == 4.0
        assert [d.start_time for d in layered.dialogue_layer.dialogues] == [1.5, 2.5]
        assert [d.character_name for d in layered.dialogue_layer.dialogues] == ["Alice", "Bob"]
        assert all(d.action is None for d in layered.dialogue_layer.dialogues)
        enter = layered.movement_layer.movements[0]
        assert enter.to_position == StagePosition(x=0.15, y=0.5)
        assert (enter.start_time, enter.end_time) == (0.0, 1.0)
        assert enter.id == "beat-1:a:movement"

    def test_unknown_speaker_name(self):
        beat = Beat(id="b", name="n", layers=BeatLayers(dialogues=[
            {"characterId": "ghost", "text": "Boo"},
        ]))
        layered = from_classic_beat(beat, CAST)
        assert layered.dialogue_layer.dialogues[0].character_name == "Unknown"

    def test_exit_walks_off_late(self):
        action = CharacterAction(
            character_id="a", character_name="Alice", gender=Gender.FEMALE,
            movement=Movement(type=MovementType.EXIT, from_=geometry.CENTER, to=geometry.OFF_STAGE_LEFT),
            emotion=Emotion(type=EmotionType.SAD),
        )
        beat = Beat(id="b", name="n", duration=5.0, layers=BeatLayers(characters=[action]))
        entry = from_classic_beat(beat, CAST).movement_layer.movements[0]
        assert entry.start_time == pytest.approx(3.5)
        assert entry.end_time == pytest.approx(4.5)
        assert entry.from_position == StagePosition(x=0.5, y=0.5)

    @pytest.mark.parametrize("gesture,stage_action", [
        (GestureType.DANCE, StageActionType.DANCING),
        (GestureType.STAND, StageActionType.IDLE),
        (GestureType.SIT, StageActionType.WAVE),
    ])
    def test_gesture_back_to_action(self, gesture, stage_action):
        action = CharacterAction(
            character_id="a", character_name="Alice", gender=Gender.FEMALE,
            movement=Movement(type=MovementType.STAY, from_=geometry.LEFT),
            emotion=Emotion(type=EmotionType.NEUTRAL),
            gesture=Gesture(type=gesture),
        )
        beat = Beat(id="b", name="n", layers=BeatLayers(characters=[action]))
        assert from_classic_beat(beat, CAST).action_layer.actions[0].action_type == stage_action

    def test_emotion_collapse(self):
        beat = Beat(id="b", name="n", layers=BeatLayers(dialogues=[
            {"characterId": "a", "text": "Huh?", "emotion": "confused"},
        ]))
        layered = from_classic_beat(beat, CAST)
        assert layered.dialogue_layer.dialogues[0].emotion == DialogueEmotion.ANNOYED

    def test_round_trip_keeps_cast_and_lines(self):
        original = first_meeting("beat-1", ALICE, BOB)
        again = to_classic_beat(from_classic_beat(original, CAST), CAST)
        assert [c.character_id for c in again.layers.characters] == ["a", "b"]
        assert [d.delay for d in again.layers.dialogues] == [1.5, 2.5]
        assert again.duration == original.duration
        # entrances collapse to standing at their destination
        assert _by_id(again)["a"].movement.from_ == geometry.LEFT
        assert _by_id(again)["b"].movement.from_ == geometry.RIGHT

    def test_layered_round_trip_keeps_position_emotion_and_line(self):
        spot = StagePosition(x=0.2, y=0.6)
        original = _layered(
            dialogues=[_line("a", "I heard something", 1.25, emotion=DialogueEmotion.FEARFUL)],
            movements=[MovementEntry(character_id="a", to_position=spot, start_time=0.0, end_time=0.0)],
            duration=4.0,
        )
        again = from_classic_beat(to_classic_beat(original, CAST), CAST)
        [entry] = again.movement_layer.movements
        assert entry.character_id == "a"
        assert entry.start_position == spot
        [line] = again.dialogue_layer.dialogues
        assert (line.text, line.start_time, line.emotion) == (
            "I heard something", 1.25, DialogueEmotion.FEARFUL,
        )
        assert line.character_name == "Alice"
        assert again.duration == 4.0

    def test_plural_preserves_order(self):
        beats = [first_meeting("one", ALICE, BOB), first_meeting("two", BOB, ALICE)]
        assert [b.id for b in from_classic_beats(beats, CAST)] == ["one", "two"]

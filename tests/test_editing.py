"""Tests for pure LayeredBeat edit operations."""
import pytest

from beatstage.beat.geometry import StagePosition
from beatstage.beat.layered import (
    DialogueActionType,
    DialogueEmotion,
    LayeredBeat,
    StageActionType,
    StageLocation,
)
from beatstage.characters import CharacterInfo, Gender
from beatstage.reconcile.editing import (
    add_action,
    add_movement,
    append_dialogue,
    next_dialogue_start,
    remove_dialogue,
    set_location,
    with_computed_duration,
)

ALICE = CharacterInfo(id="a", name="Alice", gender=Gender.FEMALE)
BOB = CharacterInfo(id="b", name="Bob", gender=Gender.MALE)

LEFT = StagePosition(x=0.15, y=0.6)
RIGHT = StagePosition(x=0.85, y=0.6)


def _empty() -> LayeredBeat:
    return LayeredBeat(id="lb", name="Scratch")


class TestDialogue:
    def test_first_line_starts_at_zero(self):
        beat = append_dialogue(_empty(), ALICE, "Hello", dialogue_id="d1")
        line = beat.dialogue_layer.dialogues[0]
        assert line.start_time == 0.0
        assert line.character_name == "Alice"
        assert line.id == "d1"

    def test_lines_are_back_to_back(self):
        beat = append_dialogue(_empty(), ALICE, "Hello")
        beat = append_dialogue(beat, BOB, "Hi", emotion=DialogueEmotion.SHY, action=DialogueActionType.WAVE)
        first, second = beat.dialogue_layer.dialogues
        assert second.start_time == pytest.approx(first.playback_duration)
        assert second.emotion == DialogueEmotion.SHY
        assert second.action == DialogueActionType.WAVE

    def test_playback_duration_floor(self):
        beat = append_dialogue(_empty(), ALICE, "")
        assert beat.dialogue_layer.dialogues[0].playback_duration == 1.2

    def test_next_start_sums_playback(self):
        beat = append_dialogue(append_dialogue(_empty(), ALICE, "x" * 20), BOB, "x" * 20)
        # each line: (20 * 0.15 + 1) / 1.3
        assert next_dialogue_start(beat) == pytest.approx(2 * 4.0 / 1.3)

    def test_append_does_not_mutate(self):
        original = _empty()
        append_dialogue(original, ALICE, "Hello")
        assert original.dialogue_layer.dialogues == []

    def test_remove_retimes(self):
        beat = append_dialogue(_empty(), ALICE, "x" * 20, dialogue_id="d1")
        beat = append_dialogue(beat, BOB, "Hi", dialogue_id="d2")
        beat = append_dialogue(beat, ALICE, "Bye", dialogue_id="d3")
        removed = remove_dialogue(beat, "d1")
        remaining = removed.dialogue_layer.dialogues
        assert [d.id for d in remaining] == ["d2", "d3"]
        assert remaining[0].start_time == 0.0
        assert remaining[1].start_time == pytest.approx(remaining[0].playback_duration)

    def test_remove_unknown_id_only_retimes(self):
        beat = append_dialogue(_empty(), ALICE, "Hello", dialogue_id="d1")
        assert remove_dialogue(beat, "nope").dialogue_layer.dialogues == beat.dialogue_layer.dialogues


class TestMovement:
    def test_materialize_without_origin(self):
        beat = add_movement(_empty(), "a", RIGHT, start_time=0.5, movement_id="m1")
        entry = beat.movement_layer.movements[0]
        assert entry.from_position is None
        assert entry.auto_walk is False
        assert entry.end_time == pytest.approx(1.5)
        assert entry.id == "m1"

    def test_walk_from_explicit_origin(self):
        beat = add_movement(_empty(), "a", RIGHT, from_=LEFT)
        entry = beat.movement_layer.movements[0]
        assert entry.end_time == pytest.approx(2.1)
        assert entry.auto_walk is True

    def test_walk_continues_from_last_position(self):
        beat = add_movement(_empty(), "a", LEFT, from_=RIGHT)
        beat = add_movement(beat, "a", StagePosition(x=0.5, y=0.6), start_time=3.0)
        second = beat.movement_layer.movements[1]
        assert second.from_position == LEFT
        assert second.end_time == pytest.approx(3.0 + 0.35 * 3)

    def test_other_characters_do_not_count(self):
        beat = add_movement(_empty(), "b", LEFT, from_=RIGHT)
        beat = add_movement(beat, "a", RIGHT)
        assert beat.movement_layer.movements[1].from_position is None


class TestOtherLayers:
    def test_add_action(self):
        beat = add_action(_empty(), "a", StageActionType.BOW, start_time=1.0, linked_dialogue_id="d1")
        action = beat.action_layer.actions[0]
        assert (action.action_type, action.start_time, action.linked_dialogue_id) == (
            StageActionType.BOW, 1.0, "d1",
        )

    def test_set_location(self):
        beat = set_location(_empty(), StageLocation.ROOFTOP)
        assert beat.location_layer.location == StageLocation.ROOFTOP

    def test_with_computed_duration(self):
        beat = append_dialogue(_empty(), ALICE, "x" * 40)
        assert with_computed_duration(beat).duration == pytest.approx(6.0)
        assert with_computed_duration(_empty()).duration == 3.0


class TestActualFrom:
    def test_explicit_origin_wins(self):
        entry = add_movement(_empty(), "a", RIGHT, from_=LEFT).movement_layer.movements[0]
        assert entry.actual_from(RIGHT) == LEFT

    def test_previous_position_when_no_origin(self):
        entry = add_movement(_empty(), "a", RIGHT).movement_layer.movements[0]
        assert entry.actual_from(LEFT) == LEFT

    def test_stage_center_when_nothing_known(self):
        entry = add_movement(_empty(), "a", RIGHT).movement_layer.movements[0]
        assert entry.actual_from(None) == StagePosition(x=0.5, y=0.6)

"""Beat template library: ready-made dramatic situations for quick prototyping.

Every constructor is a pure function of its arguments. Beat ids are supplied by the
caller (a UUID or ULID) so the same call always yields the same Beat; dialogue ids
are derived from the beat id.
"""
from __future__ import annotations

from typing import Optional, Sequence

from beatstage.beat import geometry
from beatstage.beat.geometry import Direction, EmotionType, GestureType, MovementType, Position, Speed
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
from beatstage.characters import CharacterInfo


def _act(
    character: CharacterInfo,
    movement: Movement,
    emotion: EmotionType,
    intensity: float,
    facing: Direction,
    gesture: Optional[GestureType] = None,
) -> CharacterAction:
    return CharacterAction(
        character_id=character.id,
        character_name=character.name,
        gender=character.gender,
        movement=movement,
        emotion=Emotion(type=emotion, intensity=intensity),
        gesture=Gesture(type=gesture) if gesture is not None else None,
        facing_direction=facing,
    )


def _stay(at: Position) -> Movement:
    return Movement(type=MovementType.STAY, from_=at)


def _line(beat_id: str, n: int, character: CharacterInfo, text: str, emotion: EmotionType, delay: float) -> DialogueAction:
    return DialogueAction(
        id=f"{beat_id}:line-{n}",
        character_id=character.id,
        text=text,
        emotion=emotion,
        delay=delay,
    )


# ---------------------------------------------------------------------------
# Meetings
# ---------------------------------------------------------------------------

def first_meeting(
    beat_id: str,
    character_a: CharacterInfo,
    character_b: CharacterInfo,
    greeting_a: str = "Hello!",
    greeting_b: str = "Nice to meet you!",
) -> Beat:
    """Two characters enter from opposite wings and greet each other."""
    return Beat(
        id=beat_id,
        name="First meeting",
        description="Two people meet for the first time",
        duration=4.0,
        layers=BeatLayers(
            characters=[
                _act(
                    character_a,
                    Movement(type=MovementType.ENTER, from_=geometry.OFF_STAGE_LEFT, to=geometry.LEFT),
                    EmotionType.EXCITED, 0.6, Direction.RIGHT,
                ),
                _act(
                    character_b,
                    Movement(type=MovementType.ENTER, from_=geometry.OFF_STAGE_RIGHT, to=geometry.RIGHT),
                    EmotionType.HAPPY, 0.5, Direction.LEFT,
                ),
            ],
            dialogues=[
                _line(beat_id, 1, character_a, greeting_a, EmotionType.HAPPY, 1.5),
                _line(beat_id, 2, character_b, greeting_b, EmotionType.HAPPY, 2.5),
            ],
            background=BackgroundLayer(type=BackgroundType.STAGE_FLOOR),
        ),
    )


def awkward_silence(beat_id: str, character_a: CharacterInfo, character_b: CharacterInfo) -> Beat:
    return Beat(
        id=beat_id,
        name="Awkward silence",
        description="Both are painfully aware of each other",
        duration=3.0,
        layers=BeatLayers(
            characters=[
                _act(character_a, _stay(geometry.LEFT), EmotionType.NERVOUS, 0.7, Direction.RIGHT),
                _act(character_b, _stay(geometry.RIGHT), EmotionType.SHY, 0.6, Direction.LEFT),
            ],
        ),
    )


# ---------------------------------------------------------------------------
# Conflict
# ---------------------------------------------------------------------------

def confrontation(
    beat_id: str,
    character_a: CharacterInfo,
    character_b: CharacterInfo,
    line_a: str = "Why on earth did you do that?",
    line_b: str = "I had no other choice!",
) -> Beat:
    """A presses forward while B gives ground."""
    return Beat(
        id=beat_id,
        name="Confrontation",
        description="A tense standoff between two people",
        duration=5.0,
        layers=BeatLayers(
            characters=[
                _act(
                    character_a,
                    Movement(type=MovementType.APPROACH, from_=geometry.LEFT, to=geometry.LEFT_FRONT, speed=Speed.FAST),
                    EmotionType.ANGRY, 0.8, Direction.RIGHT,
                ),
                _act(
                    character_b,
                    Movement(type=MovementType.RETREAT, from_=geometry.RIGHT, to=geometry.RIGHT_FRONT),
                    EmotionType.ANNOYED, 0.7, Direction.LEFT,
                ),
            ],
            dialogues=[
                _line(beat_id, 1, character_a, line_a, EmotionType.ANGRY, 0.5),
                _line(beat_id, 2, character_b, line_b, EmotionType.ANNOYED, 2.5),
            ],
        ),
    )


def step_back(beat_id: str, character: CharacterInfo, line: str = "Wait... I need time to think") -> Beat:
    return Beat(
        id=beat_id,
        name="Step back",
        description="Flustered, backing away",
        duration=3.0,
        layers=BeatLayers(
            characters=[
                _act(
                    character,
                    Movement(type=MovementType.RETREAT, from_=geometry.CENTER, to=geometry.RIGHT, speed=Speed.FAST),
                    EmotionType.CONFUSED, 0.8, Direction.LEFT,
                ),
            ],
            dialogues=[_line(beat_id, 1, character, line, EmotionType.CONFUSED, 1.0)],
        ),
    )


# ---------------------------------------------------------------------------
# Emotion
# ---------------------------------------------------------------------------

def confession(
    beat_id: str,
    confessor: CharacterInfo,
    listener: CharacterInfo,
    confession_line: str = "The truth is... I like you",
) -> Beat:
    return Beat(
        id=beat_id,
        name="Confession",
        description="Finding the courage to confess",
        duration=5.0,
        layers=BeatLayers(
            characters=[
                _act(
                    confessor,
                    Movement(type=MovementType.APPROACH, from_=geometry.LEFT, to=geometry.CENTER_FRONT, speed=Speed.SLOW),
                    EmotionType.NERVOUS, 0.9, Direction.RIGHT,
                ),
                _act(listener, _stay(geometry.RIGHT), EmotionType.SURPRISED, 0.8, Direction.LEFT),
            ],
            dialogues=[_line(beat_id, 1, confessor, confession_line, EmotionType.NERVOUS, 2.0)],
        ),
    )


def celebration(
    beat_id: str,
    characters: Sequence[CharacterInfo],
    cheer_line: str = "We did it!",
) -> Beat:
    """Everyone claps and the first character cheers. Third and later share RIGHT."""
    placements = (geometry.LEFT, geometry.CENTER)
    actions = [
        _act(
            character,
            _stay(placements[i] if i < len(placements) else geometry.RIGHT),
            EmotionType.EXCITED, 1.0, Direction.FORWARD,
            gesture=GestureType.CLAP,
        )
        for i, character in enumerate(characters)
    ]
    dialogues = []
    if characters:
        dialogues.append(_line(beat_id, 1, characters[0], cheer_line, EmotionType.EXCITED, 1.0))
    return Beat(
        id=beat_id,
        name="Celebration",
        description="Cheering with joy",
        duration=4.0,
        layers=BeatLayers(characters=actions, dialogues=dialogues),
    )


# ---------------------------------------------------------------------------
# Farewell
# ---------------------------------------------------------------------------

def farewell(
    beat_id: str,
    character_a: CharacterInfo,
    character_b: CharacterInfo,
    farewell_a: str = "Take care...",
    farewell_b: str = "See you next time",
) -> Beat:
    """Both wave and walk off through opposite wings."""
    return Beat(
        id=beat_id,
        name="Farewell",
        description="A reluctant goodbye",
        duration=5.0,
        layers=BeatLayers(
            characters=[
                _act(
                    character_a,
                    Movement(type=MovementType.EXIT, from_=geometry.CENTER, to=geometry.OFF_STAGE_LEFT, speed=Speed.SLOW),
                    EmotionType.SAD, 0.6, Direction.RIGHT,
                    gesture=GestureType.WAVE,
                ),
                _act(
                    character_b,
                    Movement(type=MovementType.EXIT, from_=geometry.CENTER, to=geometry.OFF_STAGE_RIGHT, speed=Speed.SLOW),
                    EmotionType.SAD, 0.5, Direction.LEFT,
                    gesture=GestureType.WAVE,
                ),
            ],
            dialogues=[
                _line(beat_id, 1, character_a, farewell_a, EmotionType.SAD, 1.0),
                _line(beat_id, 2, character_b, farewell_b, EmotionType.SAD, 2.5),
            ],
        ),
    )


# ---------------------------------------------------------------------------
# Solo
# ---------------------------------------------------------------------------

def monologue(beat_id: str, character: CharacterInfo, thought: str = "What should I do...") -> Beat:
    return Beat(
        id=beat_id,
        name="Monologue",
        description="Lost in thought, alone",
        duration=4.0,
        layers=BeatLayers(
            characters=[_act(character, _stay(geometry.CENTER), EmotionType.CONFUSED, 0.7, Direction.FORWARD)],
            dialogues=[_line(beat_id, 1, character, thought, EmotionType.CONFUSED, 1.0)],
        ),
    )


def entrance(
    beat_id: str,
    character: CharacterInfo,
    from_: Position = geometry.OFF_STAGE_LEFT,
    to: Position = geometry.CENTER,
    greeting: Optional[str] = None,
) -> Beat:
    dialogues = []
    if greeting is not None:
        dialogues.append(_line(beat_id, 1, character, greeting, EmotionType.NEUTRAL, 1.5))
    return Beat(
        id=beat_id,
        name="Entrance",
        description=f"{character.name} enters",
        duration=3.0,
        layers=BeatLayers(
            characters=[
                _act(
                    character,
                    Movement(type=MovementType.ENTER, from_=from_, to=to),
                    EmotionType.NEUTRAL, 0.5, Direction.FORWARD,
                ),
            ],
            dialogues=dialogues,
        ),
    )


# name -> (constructor, number of characters it takes; None = any number)
TEMPLATES: dict[str, tuple] = {
    "first_meeting": (first_meeting, 2),
    "awkward_silence": (awkward_silence, 2),
    "confrontation": (confrontation, 2),
    "step_back": (step_back, 1),
    "confession": (confession, 2),
    "celebration": (celebration, None),
    "farewell": (farewell, 2),
    "monologue": (monologue, 1),
    "entrance": (entrance, 1),
}


def build_template(name: str, beat_id: str, characters: Sequence[CharacterInfo]) -> Beat:
    """Build a template by name with its default lines.

    Raises KeyError for an unknown name and ValueError when the character count
    does not match the template.
    """
    constructor, arity = TEMPLATES[name]
    if arity is None:
        return constructor(beat_id, list(characters))
    if len(characters) != arity:
        raise ValueError(f"template '{name}' takes {arity} character(s), got {len(characters)}")
    return constructor(beat_id, *characters)

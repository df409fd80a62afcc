"""Layered beat model: the same dramatic unit as four independently timed layers.

1. Location  - which place the stage depicts
2. Dialogue  - ordered lines with emotion and an optional accompanying action
3. Action    - standalone gestures
4. Movement  - timed placements / traversals on the stage

Each layer's entries carry their own timing relative to beat start. A LayeredBeat
has no single authoritative timeline until its duration is computed
(see beatstage.reconcile.duration).
"""
import uuid
from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from beatstage.beat.geometry import EmotionType, GestureType, StageModel, StagePosition

_CENTER = StagePosition(x=0.5, y=0.6)


def _new_id() -> str:
    return str(uuid.uuid4())


class StageLocation(str, Enum):
    STAGE_FLOOR = "STAGE_FLOOR"
    SCHOOL_PLAYGROUND = "SCHOOL_PLAYGROUND"
    CLASSROOM = "CLASSROOM"
    OFFICE = "OFFICE"
    ROOFTOP = "ROOFTOP"
    CONVENIENCE_STORE = "CONVENIENCE_STORE"
    HOUSE_FRONT = "HOUSE_FRONT"
    SUBWAY_STATION = "SUBWAY_STATION"
    BUS_STOP = "BUS_STOP"
    RESTAURANT = "RESTAURANT"
    BEDROOM = "BEDROOM"
    LIVING_ROOM = "LIVING_ROOM"
    KITCHEN = "KITCHEN"
    PARK = "PARK"
    STREET = "STREET"


class LocationLayer(StageModel):
    location: StageLocation = StageLocation.STAGE_FLOOR


class DialogueEmotion(str, Enum):
    CALM = "CALM"
    HAPPY = "HAPPY"
    SAD = "SAD"
    ANGRY = "ANGRY"
    SURPRISED = "SURPRISED"
    FEARFUL = "FEARFUL"
    EXCITED = "EXCITED"
    NERVOUS = "NERVOUS"
    SHY = "SHY"
    ANNOYED = "ANNOYED"

    def to_emotion_type(self) -> EmotionType:
        return _DIALOGUE_EMOTIONS[self]

    @classmethod
    def from_emotion_type(cls, emotion: EmotionType) -> "DialogueEmotion":
        # CONFUSED and DISGUSTED have no dialogue counterpart and collapse to ANNOYED.
        for dialogue_emotion, emotion_type in _DIALOGUE_EMOTIONS.items():
            if emotion_type == emotion:
                return dialogue_emotion
        return cls.ANNOYED


_DIALOGUE_EMOTIONS: dict[DialogueEmotion, EmotionType] = {
    DialogueEmotion.CALM: EmotionType.NEUTRAL,
    DialogueEmotion.HAPPY: EmotionType.HAPPY,
    DialogueEmotion.SAD: EmotionType.SAD,
    DialogueEmotion.ANGRY: EmotionType.ANGRY,
    DialogueEmotion.SURPRISED: EmotionType.SURPRISED,
    DialogueEmotion.FEARFUL: EmotionType.SCARED,
    DialogueEmotion.EXCITED: EmotionType.EXCITED,
    DialogueEmotion.NERVOUS: EmotionType.NERVOUS,
    DialogueEmotion.SHY: EmotionType.SHY,
    DialogueEmotion.ANNOYED: EmotionType.ANNOYED,
}


class DialogueActionType(str, Enum):
    """Gesture performed while speaking. NOD / SHAKE_HEAD / POINT have no sprite yet."""
    NONE = "NONE"
    CLAP = "CLAP"
    WAVE = "WAVE"
    NOD = "NOD"
    SHAKE_HEAD = "SHAKE_HEAD"
    POINT = "POINT"
    BOW = "BOW"

    def to_gesture_type(self) -> Optional[GestureType]:
        return {
            DialogueActionType.CLAP: GestureType.CLAP,
            DialogueActionType.WAVE: GestureType.WAVE,
            DialogueActionType.BOW: GestureType.BOW,
        }.get(self)


class DialogueEntry(StageModel):
    id: str = Field(default_factory=_new_id)
    character_id: str
    character_name: str  # display only
    text: str
    emotion: DialogueEmotion = DialogueEmotion.CALM
    start_time: float = Field(default=0.0, ge=0.0)
    action: Optional[DialogueActionType] = None

    @property
    def playback_duration(self) -> float:
        """Seconds the line occupies on playback (length-based, 1.3x speed-up)."""
        return max((len(self.text) * 0.15 + 1.0) / 1.3, 1.2)


class DialogueLayer(StageModel):
    dialogues: list[DialogueEntry] = Field(default_factory=list)


class StageActionType(str, Enum):
    IDLE = "IDLE"
    CLAP = "CLAP"
    DANCING = "DANCING"
    WAVE = "WAVE"
    JUMP = "JUMP"
    BOW = "BOW"
    SING = "SING"

    def to_gesture_type(self) -> Optional[GestureType]:
        return _STAGE_ACTION_GESTURES.get(self)

    @classmethod
    def from_gesture_type(cls, gesture: GestureType) -> "StageActionType":
        # Gestures without a stage action (SIT, POINT, HUG, ...) fall back to WAVE.
        for action, gesture_type in _STAGE_ACTION_GESTURES.items():
            if gesture_type == gesture:
                return action
        return cls.WAVE


_STAGE_ACTION_GESTURES: dict[StageActionType, GestureType] = {
    StageActionType.IDLE: GestureType.STAND,
    StageActionType.CLAP: GestureType.CLAP,
    StageActionType.DANCING: GestureType.DANCE,
    StageActionType.WAVE: GestureType.WAVE,
    StageActionType.BOW: GestureType.BOW,
    StageActionType.SING: GestureType.SING,
}


class ActionEntry(StageModel):
    id: str = Field(default_factory=_new_id)
    character_id: str
    action_type: StageActionType
    start_time: float = Field(default=0.0, ge=0.0)
    linked_dialogue_id: Optional[str] = None


class ActionLayer(StageModel):
    actions: list[ActionEntry] = Field(default_factory=list)


class MovementEntry(StageModel):
    """A timed placement. Without from_position it materializes at to_position."""
    id: str = Field(default_factory=_new_id)
    character_id: str
    from_position: Optional[StagePosition] = None
    to_position: StagePosition
    start_time: float = Field(default=0.0, ge=0.0)
    end_time: float = Field(default=1.0, ge=0.0)
    auto_walk: bool = True
    linked_dialogue_id: Optional[str] = None

    @model_validator(mode="after")
    def end_not_before_start(self) -> "MovementEntry":
        if self.end_time < self.start_time:
            raise ValueError(
                f"end_time ({self.end_time}) must be >= start_time ({self.start_time})"
            )
        return self

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def start_position(self) -> StagePosition:
        """Where the entry begins when nothing earlier is known."""
        return self.from_position if self.from_position is not None else self.to_position

    def actual_from(self, previous: Optional[StagePosition]) -> StagePosition:
        if self.from_position is not None:
            return self.from_position
        if previous is not None:
            return previous
        return _CENTER


class MovementLayer(StageModel):
    movements: list[MovementEntry] = Field(default_factory=list)


class LayeredBeat(StageModel):
    id: str
    name: str
    duration: Optional[float] = Field(default=None, gt=0.0)  # None -> estimated
    location_layer: LocationLayer = Field(default_factory=LocationLayer)
    dialogue_layer: DialogueLayer = Field(default_factory=DialogueLayer)
    action_layer: ActionLayer = Field(default_factory=ActionLayer)
    movement_layer: MovementLayer = Field(default_factory=MovementLayer)

"""Classic Beat model: one timed dramatic unit with flattened per-character actions.

A Beat exclusively owns its layers. All models are frozen; derive new beats with
model_copy(update=...) rather than mutating.
"""
import uuid
from enum import Enum
from typing import Optional

from pydantic import Field

from beatstage.beat.geometry import (
    Direction,
    EmotionType,
    GestureType,
    MovementType,
    Position,
    Speed,
    StageModel,
)
from beatstage.characters import CharacterVoice, Gender
from beatstage.config import DEFAULT_BEAT_DURATION_S, DEFAULT_TYPING_SPEED_MS


class Movement(StageModel):
    type: MovementType
    from_: Optional[Position] = Field(default=None, alias="from")
    to: Optional[Position] = None
    speed: Speed = Speed.NORMAL


class Emotion(StageModel):
    type: EmotionType
    intensity: float = Field(default=0.5, ge=0.0, le=1.0)


class Gesture(StageModel):
    type: GestureType
    target: Optional[str] = None  # character id the gesture is aimed at


class CharacterAction(StageModel):
    """Everything one character does during a beat."""
    character_id: str
    character_name: str
    gender: Gender
    movement: Movement
    emotion: Emotion
    gesture: Optional[Gesture] = None
    facing_direction: Direction = Direction.CENTER
    voice: Optional[CharacterVoice] = None


class DialogueAction(StageModel):
    """One line of dialogue. delay is seconds after beat start."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    character_id: str
    text: str
    emotion: EmotionType = EmotionType.NEUTRAL
    delay: float = Field(default=0.0, ge=0.0)
    typing_speed: int = Field(default=DEFAULT_TYPING_SPEED_MS, ge=0)


class BackgroundType(str, Enum):
    STAGE_FLOOR = "stage_floor"
    FOREST = "forest"
    PARK = "park"
    INDOOR = "indoor"
    STREET = "street"
    CUSTOM = "custom"


class TransitionType(str, Enum):
    NONE = "NONE"
    FADE = "FADE"
    SLIDE_LEFT = "SLIDE_LEFT"
    SLIDE_RIGHT = "SLIDE_RIGHT"


class BackgroundLayer(StageModel):
    type: BackgroundType
    resource_name: Optional[str] = None
    transition: TransitionType = TransitionType.NONE


class LightingColor(str, Enum):
    WHITE = "WHITE"
    WARM = "WARM"
    COOL = "COOL"
    RED = "RED"
    BLUE = "BLUE"
    PURPLE = "PURPLE"


class LightingLayer(StageModel):
    brightness: float = Field(default=1.0, ge=0.0, le=1.0)
    color: LightingColor = LightingColor.WHITE
    spotlight: Optional[str] = None  # character id under the spotlight


class SoundEffectType(str, Enum):
    FOOTSTEP = "FOOTSTEP"
    DOOR_OPEN = "DOOR_OPEN"
    DOOR_CLOSE = "DOOR_CLOSE"
    APPLAUSE = "APPLAUSE"
    LAUGHTER = "LAUGHTER"
    GASP = "GASP"
    SIGH = "SIGH"


class SoundEffect(StageModel):
    type: SoundEffectType
    volume: float = Field(default=0.5, ge=0.0, le=1.0)
    delay: float = Field(default=0.0, ge=0.0)


class SoundLayer(StageModel):
    bgm: Optional[str] = None
    sound_effects: list[SoundEffect] = Field(default_factory=list)


class BeatLayers(StageModel):
    characters: list[CharacterAction] = Field(default_factory=list)
    background: Optional[BackgroundLayer] = None
    lighting: Optional[LightingLayer] = None
    sound: Optional[SoundLayer] = None
    dialogues: list[DialogueAction] = Field(default_factory=list)


class Beat(StageModel):
    id: str
    name: str
    description: str = ""
    duration: float = Field(default=DEFAULT_BEAT_DURATION_S, gt=0.0)  # seconds
    layers: BeatLayers = Field(default_factory=BeatLayers)

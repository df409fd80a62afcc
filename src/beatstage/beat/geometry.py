"""Stage geometry and the shared movement / emotion / gesture vocabularies.

Coordinates are normalized: x runs 0.0 (stage left) to 1.0 (stage right), y runs
0.0 (upstage) to 1.0 (downstage). Off-stage constants sit just outside [0, 1] on x.

str, Enum members serialize as plain strings; lowercase wire values match the
stored scenario format, the rest are uppercase there.
"""
import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

LEFT_ZONE_MAX_X = 0.3
RIGHT_ZONE_MIN_X = 0.7

OFF_STAGE_MIN_X = -0.1
OFF_STAGE_MAX_X = 1.1


class StageModel(BaseModel):
    """Immutable value type with camelCase wire names (snake_case also accepted)."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class PositionZone(str, Enum):
    LEFT = "LEFT"
    CENTER = "CENTER"
    RIGHT = "RIGHT"


def classify(x: float) -> PositionZone:
    """Coarse zone of a normalized x coordinate."""
    if x < LEFT_ZONE_MAX_X:
        return PositionZone.LEFT
    if x > RIGHT_ZONE_MIN_X:
        return PositionZone.RIGHT
    return PositionZone.CENTER


class Position(StageModel):
    """Normalized stage position. zone is always derived from x, never stored."""
    x: float = Field(ge=OFF_STAGE_MIN_X, le=OFF_STAGE_MAX_X)
    y: float = Field(ge=0.0, le=1.0)

    @computed_field
    @property
    def zone(self) -> PositionZone:
        return classify(self.x)


LEFT = Position(x=0.15, y=0.5)
CENTER = Position(x=0.5, y=0.5)
RIGHT = Position(x=0.85, y=0.5)
LEFT_FRONT = Position(x=0.25, y=0.6)
CENTER_FRONT = Position(x=0.5, y=0.6)
RIGHT_FRONT = Position(x=0.75, y=0.6)
LEFT_BACK = Position(x=0.25, y=0.4)
CENTER_BACK = Position(x=0.5, y=0.4)
RIGHT_BACK = Position(x=0.75, y=0.4)
OFF_STAGE_LEFT = Position(x=-0.1, y=0.5)
OFF_STAGE_RIGHT = Position(x=1.1, y=0.5)


class StagePosition(StageModel):
    """Editor-side stage coordinate used by the layered model (no zone)."""
    x: float = Field(ge=OFF_STAGE_MIN_X, le=OFF_STAGE_MAX_X)
    y: float = Field(ge=0.0, le=1.0)

    def distance_to(self, other: "StagePosition") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def walk_duration_to(self, other: "StagePosition") -> float:
        """Seconds to walk to other, never less than half a second."""
        return max(self.distance_to(other) * 3.0, 0.5)

    def to_position(self) -> Position:
        return Position(x=self.x, y=self.y)

    @classmethod
    def from_position(cls, position: Position) -> "StagePosition":
        return cls(x=position.x, y=position.y)


class MovementType(str, Enum):
    ENTER = "enter"
    EXIT = "exit"
    MOVE = "move"
    STAY = "stay"
    APPROACH = "approach"
    RETREAT = "retreat"


class Speed(str, Enum):
    VERY_SLOW = "very_slow"
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"
    VERY_FAST = "very_fast"

    def to_millis(self) -> int:
        return SPEED_MILLIS[self]


SPEED_MILLIS: dict[Speed, int] = {
    Speed.VERY_SLOW: 2000,
    Speed.SLOW: 1500,
    Speed.NORMAL: 1000,
    Speed.FAST: 600,
    Speed.VERY_FAST: 300,
}


class Direction(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    CENTER = "CENTER"
    FORWARD = "FORWARD"   # towards the audience
    BACKWARD = "BACKWARD"


class AnimationType(str, Enum):
    """Sprite animation selector carried by compiled characters."""
    IDLE = "idle"
    IDLE_ANNOYED = "idle_annoyed"
    SPEAK_NORMAL = "speak_normal"
    SPEAK_ANGRY = "speak_angry"
    LISTENING = "listening"
    WALKING = "walking"
    ANNOYED = "annoyed"
    CLAP = "clap"
    DANCING_TYPE_A = "dancing_type_a"
    DANCING_TYPE_B = "dancing_type_b"
    DANCING_TYPE_C = "dancing_type_c"
    SING_NORMAL = "sing_normal"
    SING_CLIMAX = "sing_climax"
    SING_PITCHUP = "sing_pitchup"


class EmotionType(str, Enum):
    NEUTRAL = "neutral"
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    SURPRISED = "surprised"
    SCARED = "scared"
    DISGUSTED = "disgusted"
    EXCITED = "excited"
    NERVOUS = "nervous"
    CONFUSED = "confused"
    SHY = "shy"
    ANNOYED = "annoyed"

    def to_animation(self, speaking: bool = False) -> AnimationType:
        if self in (EmotionType.ANGRY, EmotionType.ANNOYED):
            return AnimationType.SPEAK_ANGRY if speaking else AnimationType.IDLE_ANNOYED
        if self in (EmotionType.HAPPY, EmotionType.EXCITED):
            return AnimationType.IDLE
        if self in (EmotionType.SAD, EmotionType.SCARED):
            return AnimationType.LISTENING
        return AnimationType.SPEAK_NORMAL if speaking else AnimationType.IDLE


class GestureType(str, Enum):
    WAVE = "wave"
    BOW = "bow"
    SIT = "sit"
    STAND = "stand"
    CLAP = "clap"
    DANCE = "dance"
    SING = "sing"
    POINT = "point"
    HUG = "hug"
    PUSH = "push"
    PULL = "pull"

    def to_animation(self) -> Optional[AnimationType]:
        return _GESTURE_ANIMATIONS.get(self)


_GESTURE_ANIMATIONS: dict[GestureType, AnimationType] = {
    GestureType.CLAP: AnimationType.CLAP,
    GestureType.DANCE: AnimationType.DANCING_TYPE_A,
    GestureType.SING: AnimationType.SING_NORMAL,
}

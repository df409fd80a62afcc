"""Compiled, renderer-ready output. Built once by the compiler and never mutated."""
from typing import Any, Optional

from pydantic import Field

from beatstage.beat.geometry import AnimationType, StageModel
from beatstage.characters import CharacterVoice, Gender
from beatstage.config import CHARACTER_SIZE, DEFAULT_TYPING_SPEED_MS


class StagePoint(StageModel):
    """Absolute position in stage units (not normalized)."""
    x: float
    y: float


class CharacterState(StageModel):
    id: str
    name: str
    gender: Gender
    image_res: Any            # opaque handle from the resource resolver
    position: StagePoint
    size: float = CHARACTER_SIZE
    alpha: float = Field(default=1.0, ge=0.0, le=1.0)
    scale: float = 1.0
    rotation: float = 0.0
    flip_x: bool = False
    animation: AnimationType = AnimationType.IDLE
    animation_duration: int = 500  # ms
    voice: CharacterVoice = Field(default_factory=CharacterVoice)
    description: Optional[str] = None


class DialogueState(StageModel):
    text: str
    position: StagePoint
    speaker_name: Optional[str] = None
    delay_millis: int = 0
    typing_speed_ms: int = DEFAULT_TYPING_SPEED_MS
    voice: Optional[CharacterVoice] = None


class SceneState(StageModel):
    background_res: Any = None
    characters: list[CharacterState] = Field(default_factory=list)
    dialogues: list[DialogueState] = Field(default_factory=list)
    duration_millis: int = 3000
    is_ending: bool = False


class TheaterScript(StageModel):
    """Ordered scenes; list order is playback order."""
    scenes: list[SceneState] = Field(default_factory=list)
    debug: bool = False

    @property
    def total_millis(self) -> int:
        return sum(scene.duration_millis for scene in self.scenes)

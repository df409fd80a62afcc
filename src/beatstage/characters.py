"""Character directory and voice profiles.

The directory is a read-only lookup passed in by callers. It may hold characters a
beat never references and beats may reference ids it does not hold.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Protocol, Union

from pydantic import Field

from beatstage.beat.geometry import StageModel


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class CharacterInfo(StageModel):
    """Minimum identity needed to place a character in a beat."""
    id: str
    name: str
    gender: Gender


class CharacterVoice(StageModel):
    """Typewriter blip voice used when a speech bubble types out."""
    pitch: float = 1.0
    speed: int = 80
    duration: int = 50
    volume: float = Field(default=0.5, ge=0.0, le=1.0)
    enabled: bool = True


MALE_DEEP = CharacterVoice(pitch=0.7, speed=100, duration=60, volume=0.6)
MALE_NORMAL = CharacterVoice(pitch=0.9, speed=85, duration=55, volume=0.5)
FEMALE_NORMAL = CharacterVoice(pitch=1.2, speed=70, duration=50, volume=0.5)
FEMALE_HIGH = CharacterVoice(pitch=1.5, speed=60, duration=45, volume=0.5)
CHILD = CharacterVoice(pitch=1.8, speed=50, duration=40, volume=0.4)
SILENT = CharacterVoice(enabled=False)

VOICE_PRESETS: dict[str, CharacterVoice] = {
    "male_deep": MALE_DEEP,
    "male_normal": MALE_NORMAL,
    "female_normal": FEMALE_NORMAL,
    "female_high": FEMALE_HIGH,
    "child": CHILD,
    "silent": SILENT,
}


class CharacterLookup(Protocol):
    def lookup(self, character_id: str) -> Optional[CharacterInfo]: ...


class CharacterDirectory:
    """Immutable id -> CharacterInfo index. First entry wins on duplicate ids."""

    def __init__(self, characters: Iterable[CharacterInfo] = ()) -> None:
        index: dict[str, CharacterInfo] = {}
        for character in characters:
            index.setdefault(character.id, character)
        self._index = index

    def lookup(self, character_id: str) -> Optional[CharacterInfo]:
        return self._index.get(character_id)

    def __contains__(self, character_id: object) -> bool:
        return character_id in self._index

    def __iter__(self):
        return iter(self._index.values())

    def __len__(self) -> int:
        return len(self._index)


def as_directory(
    characters: Union[CharacterLookup, Iterable[CharacterInfo]],
) -> CharacterLookup:
    """Accept either a ready lookup or a plain list of CharacterInfo."""
    if hasattr(characters, "lookup"):
        return characters  # type: ignore[return-value]
    return CharacterDirectory(characters)  # type: ignore[arg-type]

"""Serialized scenario: a beat collection tagged with how it was authored."""
import json
from typing import Annotated, Literal, Union

from pydantic import Field, TypeAdapter, field_validator

from beatstage.beat.geometry import StageModel
from beatstage.beat.schema import Beat
from beatstage.characters import CharacterInfo


class _ScenarioBase(StageModel):
    description: str = ""
    beats: list[Beat] = Field(default_factory=list)
    characters: list[CharacterInfo] = Field(default_factory=list)

    @field_validator("beats", "characters", mode="before")
    @classmethod
    def decode_embedded_json(cls, v):
        # Older payloads stored these arrays as JSON-encoded strings.
        if isinstance(v, str):
            return json.loads(v)
        return v


class BeatScenario(_ScenarioBase):
    """Beats authored directly in classic form."""
    type: Literal["beat"] = "beat"


class LayeredBeatScenario(_ScenarioBase):
    """Beats authored in layered mode and stored after reconciliation."""
    type: Literal["layered_beat"] = "layered_beat"


Scenario = Annotated[Union[BeatScenario, LayeredBeatScenario], Field(discriminator="type")]

SCENARIO_ADAPTER: TypeAdapter = TypeAdapter(Scenario)

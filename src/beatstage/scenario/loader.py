import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from pydantic import TypeAdapter, ValidationError

from beatstage.beat.layered import LayeredBeat
from beatstage.characters import CharacterInfo
from beatstage.compiler.compile import compile_sequence
from beatstage.compiler.resources import ResourceResolver
from beatstage.compiler.scene import TheaterScript
from beatstage.errors import ConversionFailed
from beatstage.reconcile.converter import from_classic_beats
from beatstage.scenario.schema import SCENARIO_ADAPTER, BeatScenario, LayeredBeatScenario

logger = logging.getLogger(__name__)

INLINE_SOURCE = "<inline>"

AnyScenario = Union[BeatScenario, LayeredBeatScenario]


@dataclass(frozen=True)
class ScriptReady:
    script: TheaterScript


@dataclass(frozen=True)
class ScriptFailed:
    reason: str


ScriptOutcome = Union[ScriptReady, ScriptFailed]


def _format_validation_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = " -> ".join(str(x) for x in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def decode_scenario(text: Union[str, bytes], source: str = INLINE_SOURCE) -> AnyScenario:
    """Parse and validate a serialized scenario. Raises ConversionFailed on failure."""
    try:
        return SCENARIO_ADAPTER.validate_json(text)
    except ValidationError as e:
        raise ConversionFailed(source, f"Schema validation failed: {_format_validation_error(e)}") from e


def load_scenario(path: Path) -> AnyScenario:
    """Load and validate a scenario file. Raises ConversionFailed on failure."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConversionFailed(path.name, str(e)) from e
    return decode_scenario(text, source=path.name)


_LAYERED_BEATS: TypeAdapter = TypeAdapter(list[LayeredBeat])
_CHARACTERS: TypeAdapter = TypeAdapter(list[CharacterInfo])


def _load_list(path: Path, adapter: TypeAdapter) -> list:
    try:
        return adapter.validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise ConversionFailed(path.name, f"Schema validation failed: {_format_validation_error(e)}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConversionFailed(path.name, str(e)) from e


def load_layered_beats(path: Path) -> list[LayeredBeat]:
    """Load a JSON array of layered beats. Raises ConversionFailed on failure."""
    return _load_list(path, _LAYERED_BEATS)


def load_characters(path: Path) -> list[CharacterInfo]:
    """Load a JSON array of character directory entries. Raises ConversionFailed on failure."""
    return _load_list(path, _CHARACTERS)


def encode_scenario(scenario: AnyScenario, indent: Optional[int] = 2) -> str:
    return scenario.model_dump_json(by_alias=True, indent=indent)


def layered_beats(scenario: AnyScenario) -> list[LayeredBeat]:
    """Re-enter edit mode: every stored beat back in layered form."""
    return from_classic_beats(scenario.beats, scenario.characters)


def convert_scenario(
    text: Union[str, bytes],
    resolver: Optional[ResourceResolver] = None,
    max_workers: Optional[int] = None,
) -> TheaterScript:
    """Decode a serialized scenario and compile it. Raises ConversionFailed."""
    scenario = decode_scenario(text)
    logger.debug("compiling %s scenario with %d beats", scenario.type, len(scenario.beats))
    return compile_sequence(scenario.beats, resolver=resolver, max_workers=max_workers)


def try_convert_scenario(
    text: Union[str, bytes],
    resolver: Optional[ResourceResolver] = None,
) -> ScriptOutcome:
    """Like convert_scenario, but malformed input comes back as ScriptFailed.

    An empty but well-formed scenario is ScriptReady with no scenes.
    """
    try:
        return ScriptReady(convert_scenario(text, resolver=resolver))
    except ConversionFailed as e:
        return ScriptFailed(e.detail)

from typing import Iterable


class BeatStageError(Exception):
    """Base class for all BeatStage errors."""


class ConversionFailed(BeatStageError):
    def __init__(self, source: str, detail: str) -> None:
        super().__init__(
            f"Cannot convert scenario '{source}'.\n"
            f"  Cause: {detail}\n"
            f"  Check: Is the payload valid JSON with a \"type\" of \"beat\" or \"layered_beat\"?\n"
            f"  Tip: Re-export the scenario with `beatstage reconcile` or `beatstage template` to get a known-good shape."
        )
        self.source = source
        self.detail = detail


class UnknownCharacterError(BeatStageError):
    def __init__(self, beat_id: str, character_ids: Iterable[str]) -> None:
        ids = list(character_ids)
        super().__init__(
            f"Beat '{beat_id}' references characters missing from the directory.\n"
            f"  Cause: unresolved ids {ids}\n"
            f"  Check: Was every character added to the character list before authoring?"
        )
        self.beat_id = beat_id
        self.character_ids = ids


class ConfigError(BeatStageError):
    def __init__(self, name: str, value: str) -> None:
        super().__init__(
            f"Invalid configuration value for {name}: '{value}'.\n"
            f"  Check: {name} must be a positive number of stage units."
        )
        self.name = name
        self.value = value

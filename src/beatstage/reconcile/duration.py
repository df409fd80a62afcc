"""Automatic beat duration from the latest-finishing dialogue or movement."""
from beatstage.beat.layered import DialogueEntry, LayeredBeat
from beatstage.config import DEFAULT_BEAT_DURATION_S

SECONDS_PER_CHARACTER = 0.15
MIN_LINE_SECONDS = 1.5
MOVEMENT_SECONDS = 2.0


def dialogue_end(entry: DialogueEntry) -> float:
    return entry.start_time + max(len(entry.text) * SECONDS_PER_CHARACTER, MIN_LINE_SECONDS)


def estimate(beat: LayeredBeat) -> float:
    """Seconds until the last line or movement finishes, never below 3.0.

    Recomputed from the layers on every call; nothing is cached.
    """
    candidates = [DEFAULT_BEAT_DURATION_S]
    candidates.extend(dialogue_end(d) for d in beat.dialogue_layer.dialogues)
    candidates.extend(m.start_time + MOVEMENT_SECONDS for m in beat.movement_layer.movements)
    return max(candidates)


def effective_duration(beat: LayeredBeat) -> float:
    """Explicit duration when authored, otherwise the estimate."""
    return beat.duration if beat.duration is not None else estimate(beat)

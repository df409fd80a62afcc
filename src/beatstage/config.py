"""Runtime configuration: stage dimensions and fixed compiler tunables."""
import os

from beatstage.errors import ConfigError

DEFAULT_STAGE_WIDTH = 360.0
DEFAULT_STAGE_HEIGHT = 300.0

# Speech bubble sits up and to the right of its speaker, in stage units.
BUBBLE_OFFSET: tuple[float, float] = (40.0, -60.0)
FALLBACK_BUBBLE_POSITION: tuple[float, float] = (180.0, 100.0)

CHARACTER_SIZE = 80.0
DEFAULT_TYPING_SPEED_MS = 50
DEFAULT_BEAT_DURATION_S = 3.0


def _read_dimension(name: str, default: float) -> float:
    env_val = os.environ.get(name)
    if env_val is None:
        return default
    try:
        value = float(env_val)
    except ValueError as e:
        raise ConfigError(name, env_val) from e
    if value <= 0:
        raise ConfigError(name, env_val)
    return value


def get_stage_size() -> tuple[float, float]:
    """Return (width, height) of the stage in stage units.

    Respects BEATSTAGE_STAGE_WIDTH / BEATSTAGE_STAGE_HEIGHT.
    Falls back to 360 x 300 when the variables are not set.
    """
    return (
        _read_dimension("BEATSTAGE_STAGE_WIDTH", DEFAULT_STAGE_WIDTH),
        _read_dimension("BEATSTAGE_STAGE_HEIGHT", DEFAULT_STAGE_HEIGHT),
    )

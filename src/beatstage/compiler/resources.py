"""Symbolic resource names and the resolver seam that turns them into handles.

The compiler only ever produces symbolic names (e.g. "stage_floor",
"stage_female_1_idle_1"); what a handle *is* belongs to the caller's renderer.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

from beatstage.beat.geometry import AnimationType
from beatstage.beat.schema import BackgroundLayer, BackgroundType
from beatstage.characters import Gender

logger = logging.getLogger(__name__)

FALLBACK_BACKGROUND = "stage_floor"

BACKGROUND_RESOURCES: dict[BackgroundType, str] = {
    BackgroundType.STAGE_FLOOR: "stage_floor",
    BackgroundType.FOREST: "bg_forest",
    BackgroundType.PARK: "bg_park",
    BackgroundType.INDOOR: "bg_indoor",
    BackgroundType.STREET: "bg_street",
}


class ResourceResolver(Protocol):
    fallback: Any

    def lookup(self, name: str) -> Optional[Any]: ...


class SymbolicResolver:
    """Identity resolver: the symbolic name is the handle."""
    fallback = FALLBACK_BACKGROUND

    def lookup(self, name: str) -> Optional[Any]:
        return name


class TableResolver:
    """Key lookup into a caller-supplied table with a single fallback handle."""

    def __init__(self, table: Mapping[str, Any], fallback: Any) -> None:
        self._table = dict(table)
        self.fallback = fallback

    def lookup(self, name: str) -> Optional[Any]:
        return self._table.get(name)


def resolve_handle(resolver: ResourceResolver, name: str) -> Any:
    handle = resolver.lookup(name)
    if handle is None:
        logger.debug("no resource for %r, using fallback %r", name, resolver.fallback)
        return resolver.fallback
    return handle


def background_name(background: Optional[BackgroundLayer]) -> str:
    """Custom and unmapped backgrounds, and a missing layer, get the stage floor."""
    if background is None:
        return FALLBACK_BACKGROUND
    return BACKGROUND_RESOURCES.get(background.type, FALLBACK_BACKGROUND)


def sprite_name(gender: Gender, animation: AnimationType = AnimationType.IDLE, frame: int = 1) -> str:
    """stage_{gender}_1_{animation}_{frame}, e.g. stage_male_1_idle_1."""
    return f"stage_{gender.value.lower()}_1_{animation.value}_{frame}"

"""Notification events emitted while the story mutates state."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Tuple

InventoryAction = Literal["added", "removed"]


@dataclass(frozen=True, slots=True)
class StoryEvent:
    """Base class for story events."""


@dataclass(frozen=True, slots=True)
class FlagSetEvent(StoryEvent):
    flag: str
    value: bool | str


@dataclass(frozen=True, slots=True)
class InventoryChangedEvent(StoryEvent):
    """Inventory changed; hosts refresh their inventory display."""

    item: str
    action: InventoryAction
    inventory: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ValueSetEvent(StoryEvent):
    property: str
    value: object


@dataclass(frozen=True, slots=True)
class RestartRequestedEvent(StoryEvent):
    """The host should discard the session and start over."""


@dataclass(frozen=True, slots=True)
class MalformedEffectEvent(StoryEvent):
    """An effect was ignored because the runtime cannot apply it."""

    effect_type: str
    reason: str


StoryEventListener = Callable[[StoryEvent], None]

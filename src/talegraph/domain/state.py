"""Domain-level state tracking."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from talegraph.domain.defs.story_def import DEFAULT_START_NODE_ID
from talegraph.domain.timekeeping import DEFAULT_START_MINUTES, day_name, format_clock

FlagValue = bool | str

DEFAULT_PLAYER_NAME = "Player"

# Story JSON names for the top-level state fields.
STATE_FIELD_ALIASES: Dict[str, str] = {
    "flags": "flags",
    "inventory": "inventory",
    "dayIndex": "day_index",
    "timeMinutes": "time_minutes",
    "playerName": "player_name",
    "currentScene": "current_scene",
}


def state_attribute_name(name: str) -> str | None:
    """Map a story-facing field name (``playerName`` or ``player_name``) to the attribute."""
    if name in STATE_FIELD_ALIASES:
        return STATE_FIELD_ALIASES[name]
    if name in STATE_FIELD_ALIASES.values():
        return name
    return None


@dataclass
class GameState:
    """Mutable session state, owned by a single host session."""

    current_scene: str = DEFAULT_START_NODE_ID
    flags: Dict[str, FlagValue] = field(default_factory=dict)
    inventory: List[str] = field(default_factory=list)
    day_index: int = 0
    time_minutes: int = DEFAULT_START_MINUTES
    player_name: str = DEFAULT_PLAYER_NAME

    def has_item(self, item: str) -> bool:
        return item in self.inventory

    def time_string(self) -> str:
        return format_clock(self.time_minutes)

    def day_name(self) -> str:
        return day_name(self.day_index)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable snapshot using story field names."""
        return {
            "currentScene": self.current_scene,
            "flags": dict(self.flags),
            "inventory": list(self.inventory),
            "dayIndex": self.day_index,
            "timeMinutes": self.time_minutes,
            "playerName": self.player_name,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GameState":
        """Rebuild state from :meth:`to_dict` output, ignoring malformed fields."""
        state = cls()
        current_scene = payload.get("currentScene")
        if isinstance(current_scene, str):
            state.current_scene = current_scene
        flags = payload.get("flags")
        if isinstance(flags, Mapping):
            state.flags = {
                str(key): value for key, value in flags.items() if isinstance(value, (bool, str))
            }
        inventory = payload.get("inventory")
        if isinstance(inventory, list):
            state.inventory = [item for item in inventory if isinstance(item, str)]
        day_index = payload.get("dayIndex")
        if isinstance(day_index, int) and not isinstance(day_index, bool):
            state.day_index = day_index
        time_minutes = payload.get("timeMinutes")
        if isinstance(time_minutes, int) and not isinstance(time_minutes, bool):
            state.time_minutes = time_minutes
        player_name = payload.get("playerName")
        if isinstance(player_name, str):
            state.player_name = player_name
        return state

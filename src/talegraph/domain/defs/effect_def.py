"""Effect definitions applied on node entry or when a choice is taken."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Union

SETTABLE_PROPERTIES: FrozenSet[str] = frozenset({"dayIndex", "timeMinutes", "playerName"})


@dataclass(frozen=True, slots=True)
class SetFlag:
    flag: str
    value: bool | str = True


@dataclass(frozen=True, slots=True)
class AddItem:
    item: str


@dataclass(frozen=True, slots=True)
class RemoveItem:
    item: str


@dataclass(frozen=True, slots=True)
class SetValue:
    """Assign one of the whitelisted top-level state properties."""

    property: str
    value: object = None


@dataclass(frozen=True, slots=True)
class Restart:
    """Ask the host to reset the whole session."""


@dataclass(frozen=True, slots=True)
class UnknownEffect:
    """Effect with a type tag the runtime does not understand."""

    type: str
    data: Dict[str, object] = field(default_factory=dict, compare=False, hash=False)


Effect = Union[SetFlag, AddItem, RemoveItem, SetValue, Restart, UnknownEffect]


def set_value_problem(effect: SetValue) -> str | None:
    """Describe why ``effect`` cannot be applied, or return ``None`` when it can."""
    if effect.property not in SETTABLE_PROPERTIES:
        allowed = ", ".join(sorted(SETTABLE_PROPERTIES))
        return f"SET_VALUE property '{effect.property}' is ignored (allowed: {allowed})."
    if effect.property == "playerName":
        if not isinstance(effect.value, str):
            return f"SET_VALUE playerName expects a string, got {effect.value!r}."
    elif isinstance(effect.value, bool) or not isinstance(effect.value, int):
        return f"SET_VALUE {effect.property} expects a whole number, got {effect.value!r}."
    return None

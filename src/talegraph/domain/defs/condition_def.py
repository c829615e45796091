"""Condition definitions attached to logic nodes, choices and text variants."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple, Union


@dataclass(frozen=True, slots=True)
class HasFlag:
    """True when the flag's truthiness matches ``value``."""

    flag: str
    value: bool = True


@dataclass(frozen=True, slots=True)
class HasItem:
    """True when the item is anywhere in the inventory."""

    item: str


@dataclass(frozen=True, slots=True)
class AllOf:
    """Logical AND over child conditions."""

    conditions: Tuple["Condition", ...] = ()


@dataclass(frozen=True, slots=True)
class AnyOf:
    """Logical OR over child conditions."""

    conditions: Tuple["Condition", ...] = ()


@dataclass(frozen=True, slots=True)
class Not:
    """Negation of a single child condition."""

    condition: "Condition | None" = None


@dataclass(frozen=True, slots=True)
class UnknownCondition:
    """Condition with a type tag the runtime does not understand."""

    type: str
    data: Dict[str, object] = field(default_factory=dict, compare=False, hash=False)


Condition = Union[HasFlag, HasItem, AllOf, AnyOf, Not, UnknownCondition]

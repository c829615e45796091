"""Applies story effects to the owned game state."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from talegraph.domain.defs import (
    AddItem,
    Effect,
    RemoveItem,
    Restart,
    SetFlag,
    SetValue,
    UnknownEffect,
    set_value_problem,
)
from talegraph.domain.state import GameState, state_attribute_name
from talegraph.services.events import (
    FlagSetEvent,
    InventoryChangedEvent,
    MalformedEffectEvent,
    RestartRequestedEvent,
    StoryEvent,
    StoryEventListener,
    ValueSetEvent,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EffectOutcome:
    """Result of applying one effect list."""

    events: List[StoryEvent] = field(default_factory=list)
    restart_requested: bool = False
    applied: int = 0


def apply_effects(
    effects: Sequence[Effect] | None,
    state: GameState,
    *,
    listener: StoryEventListener | None = None,
) -> EffectOutcome:
    """Apply ``effects`` to ``state`` in list order.

    ``RESTART`` stops processing; the effects after it are not applied.
    """
    outcome = EffectOutcome()
    if not effects:
        return outcome

    def emit(event: StoryEvent) -> None:
        outcome.events.append(event)
        if listener is not None:
            listener(event)

    for effect in effects:
        if isinstance(effect, SetFlag):
            state.flags[effect.flag] = effect.value
            emit(FlagSetEvent(flag=effect.flag, value=effect.value))
        elif isinstance(effect, AddItem):
            state.inventory.append(effect.item)
            emit(InventoryChangedEvent(item=effect.item, action="added", inventory=tuple(state.inventory)))
        elif isinstance(effect, RemoveItem):
            state.inventory[:] = [item for item in state.inventory if item != effect.item]
            emit(InventoryChangedEvent(item=effect.item, action="removed", inventory=tuple(state.inventory)))
        elif isinstance(effect, SetValue):
            problem = set_value_problem(effect)
            attribute = state_attribute_name(effect.property)
            if problem is not None or attribute is None:
                logger.debug("Ignoring SET_VALUE %r: %s", effect.property, problem)
                emit(MalformedEffectEvent(effect_type="SET_VALUE", reason=problem or "Property cannot be set."))
                continue
            setattr(state, attribute, effect.value)
            emit(ValueSetEvent(property=effect.property, value=effect.value))
        elif isinstance(effect, Restart):
            outcome.restart_requested = True
            outcome.applied += 1
            emit(RestartRequestedEvent())
            logger.debug("RESTART effect reached; skipping remaining effects.")
            break
        elif isinstance(effect, UnknownEffect):
            logger.warning("Ignoring unknown effect type %r.", effect.type)
            emit(MalformedEffectEvent(effect_type=effect.type, reason="Unknown effect type."))
            continue
        else:
            logger.warning("Ignoring unsupported effect object %r.", effect)
            continue
        outcome.applied += 1
    return outcome

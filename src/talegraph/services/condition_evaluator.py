"""Boolean evaluation of story conditions against the game state."""
from __future__ import annotations

import logging
from typing import Callable, List, Sequence

from talegraph.domain.defs import AllOf, AnyOf, Choice, Condition, HasFlag, HasItem, Not, UnknownCondition
from talegraph.domain.state import GameState

logger = logging.getLogger(__name__)

DiagnosticSink = Callable[[str], None]


def evaluate(
    condition: Condition | None,
    state: GameState,
    *,
    diagnostics: DiagnosticSink | None = None,
) -> bool:
    """Return whether ``condition`` holds for ``state``.

    Missing conditions are always true. Conditions the runtime cannot interpret
    (unknown type tags, ``NOT`` without a child) also evaluate to true so an
    unfinished story stays playable; they are reported to ``diagnostics`` and
    logged instead.
    """
    if condition is None:
        return True
    if isinstance(condition, HasFlag):
        return bool(state.flags.get(condition.flag)) == condition.value
    if isinstance(condition, HasItem):
        return condition.item in state.inventory
    if isinstance(condition, AllOf):
        return all(evaluate(child, state, diagnostics=diagnostics) for child in condition.conditions)
    if isinstance(condition, AnyOf):
        return any(evaluate(child, state, diagnostics=diagnostics) for child in condition.conditions)
    if isinstance(condition, Not):
        if condition.condition is None:
            _report(diagnostics, "NOT condition has no child condition; treating as true.")
            return True
        return not evaluate(condition.condition, state, diagnostics=diagnostics)
    if isinstance(condition, UnknownCondition):
        _report(diagnostics, f"Unknown condition type '{condition.type}'; treating as true.")
        return True
    _report(diagnostics, f"Unsupported condition object {condition!r}; treating as true.")
    return True


def visible_choices(choices: Sequence[Choice], state: GameState) -> List[Choice]:
    """Return the choices whose condition holds, in authoring order."""
    return [choice for choice in choices if evaluate(choice.condition, state)]


def _report(diagnostics: DiagnosticSink | None, message: str) -> None:
    logger.warning("Malformed condition: %s", message)
    if diagnostics is not None:
        diagnostics(message)
